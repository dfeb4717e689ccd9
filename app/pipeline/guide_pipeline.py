"""Single-document pipeline: stream a reading guide, then classify it in the background."""

from collections.abc import Iterator

from app.database.repositories.literature_repository import LiteratureRepository
from app.llm.exceptions import ModelError
from app.logging.logger import Log
from app.pipeline import events
from app.pipeline.ai_service import LiteratureAiService
from app.pipeline.context import PipelineContext
from app.pipeline.events import StreamEvent
from app.pipeline.steps import (
    CreateLiteratureStep,
    ExtractContentStep,
    FinalizeGuideStep,
    MarkFailedStep,
    ReloadGuideStep,
    SaveFileStep,
)
from app.storage.models import UploadedFile


class GuidePipeline:
    """Runs stage 1 for one upload as a lazy sequence of stream events.

    The sequence always ends with exactly one ``complete`` or ``error``
    event. Closing the generator early stops consuming the model stream and
    releases its connection; a classification already dispatched keeps
    running.
    """

    def __init__(
        self,
        *,
        save_file: SaveFileStep,
        extract_content: ExtractContentStep,
        create_literature: CreateLiteratureStep,
        reload_guide: ReloadGuideStep,
        finalize_guide: FinalizeGuideStep,
        mark_failed: MarkFailedStep,
        ai_service: LiteratureAiService,
        literature_repo: LiteratureRepository,
    ) -> None:
        self._save_file = save_file
        self._extract_content = extract_content
        self._create_literature = create_literature
        self._reload_guide = reload_guide
        self._finalize_guide = finalize_guide
        self._mark_failed = mark_failed
        self._ai_service = ai_service
        self._literature_repo = literature_repo

    def generate(self, upload: UploadedFile) -> Iterator[StreamEvent]:
        context = PipelineContext(upload=upload)
        Log.info(f"Generating reading guide for '{upload.filename}'")
        yield events.start(upload.filename)
        try:
            self._save_file.run(context)
            yield events.progress("File saved, extracting content...")

            self._extract_content.run(context)
            self._create_literature.run(context)
            yield events.progress("Content extracted, generating reading guide...")

            yield from self._stream_guide(context)

            self._reload_guide.run(context)
            self._finalize_guide.run(context)
        except ModelError as exc:
            # model failures are not document failures: the row stays PROCESSING
            context.error_message = str(exc)
            Log.error(f"Reading guide generation for '{upload.filename}' failed: {exc}")
            yield events.error(str(exc))
            return
        except Exception as exc:
            context.error_message = str(exc)
            Log.exception(f"Reading guide generation for '{upload.filename}' failed")
            self._mark_failed.run(context)
            yield events.error(str(exc))
            return

        Log.info(f"Reading guide for literature {context.literature_id} streamed")
        yield events.complete(context.require_literature_id())

    def _stream_guide(self, context: PipelineContext) -> Iterator[StreamEvent]:
        literature_id = context.require_literature_id()
        token_count = 0
        with self._ai_service.stream_reading_guide(context.content) as stream:
            for chunk in stream:
                if chunk.content:
                    self._append(literature_id, chunk.content)
                    token_count += 1
                    yield events.content(chunk.content)
                if chunk.finish_reason is not None:
                    Log.info(
                        f"Literature {literature_id} stream finished: {chunk.finish_reason}"
                    )
                    yield events.finish(chunk.finish_reason)
        Log.info(f"Literature {literature_id} received {token_count} guide chunks")

    def _append(self, literature_id: int, chunk: str) -> None:
        try:
            self._literature_repo.append_reading_guide(literature_id, chunk)
        except Exception as exc:
            Log.warning(f"Appending guide chunk to literature {literature_id} failed: {exc}")
