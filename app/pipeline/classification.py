"""Stage 2: classify a finished reading guide in the background."""

import threading
from collections.abc import Callable

from app.database.models import LiteratureStatus
from app.database.repositories.literature_repository import LiteratureRepository
from app.llm.exceptions import ModelError
from app.logging.logger import Log
from app.pipeline.ai_service import LiteratureAiService
from app.pipeline.classification_decoder import decode_classification
from app.pipeline.exceptions import ClassificationDecodeError

Spawner = Callable[[Callable[[], None], str], None]

THREAD_NAME_PREFIX = "classify-"


def start_background_thread(target: Callable[[], None], name: str) -> None:
    """Start target on its own thread without keeping a handle to it.

    The thread is non-daemon so a classification already running is allowed
    to finish when the process shuts down.
    """
    threading.Thread(target=target, name=name, daemon=False).start()


def wait_for_background_threads(timeout: float | None = None) -> None:
    """Block until running classification threads end.

    Meant for process shutdown only, after which the connection pool closes.
    """
    for thread in threading.enumerate():
        if thread.name.startswith(THREAD_NAME_PREFIX):
            thread.join(timeout)


class ClassificationStage:
    """Generates tags and a description for a literature's reading guide.

    Classification is best-effort enrichment: every failure is logged and the
    literature is marked completed anyway.
    """

    def __init__(
        self,
        ai_service: LiteratureAiService,
        literature_repo: LiteratureRepository,
        spawn: Spawner = start_background_thread,
    ) -> None:
        self._ai_service = ai_service
        self._literature_repo = literature_repo
        self._spawn = spawn

    def dispatch(self, literature_id: int, reading_guide: str) -> None:
        """Run classification independently of the caller; nothing awaits it."""
        Log.info(f"Dispatching classification for literature {literature_id}")
        self._spawn(
            lambda: self.run(literature_id, reading_guide),
            f"{THREAD_NAME_PREFIX}{literature_id}",
        )

    def run(self, literature_id: int, reading_guide: str) -> None:
        """Classify synchronously, absorbing every failure."""
        try:
            reply = self._ai_service.generate_classification(reading_guide)
            result = decode_classification(reply)
            self._literature_repo.update_classification(
                literature_id, result.tags, result.description
            )
            Log.info(
                f"Literature {literature_id} classification saved: {len(result.tags)} tags"
            )
            return
        except ModelError as exc:
            Log.error(f"Classification request for literature {literature_id} failed: {exc}")
        except ClassificationDecodeError as exc:
            Log.error(
                f"Classification reply for literature {literature_id} "
                f"could not be decoded: {exc}. Raw reply: {exc.raw_text!r}"
            )
        except Exception:
            Log.exception(f"Classification of literature {literature_id} failed")
        self._mark_completed(literature_id)

    def _mark_completed(self, literature_id: int) -> None:
        try:
            self._literature_repo.update_status(literature_id, LiteratureStatus.COMPLETED)
        except Exception:
            Log.exception(f"Could not mark literature {literature_id} completed")
