"""Batch import: run many uploads through the guide pipeline with bounded concurrency."""

import queue
import threading
from collections.abc import Iterator, Sequence
from concurrent.futures import Executor, Future
from dataclasses import dataclass

from app.llm.exceptions import ModelError
from app.logging.logger import Log
from app.pipeline import events
from app.pipeline.context import PipelineContext
from app.pipeline.events import StreamEvent
from app.pipeline.steps import (
    CreateLiteratureStep,
    ExtractContentStep,
    FinalizeGuideStep,
    GenerateGuideStep,
    MarkFailedStep,
    SaveFileStep,
)
from app.storage.models import UploadedFile


class BatchProgress:
    """Completed and error counters shared by concurrently running items."""

    def __init__(self, total: int) -> None:
        self.total = total
        self._completed = 0
        self._errors = 0
        self._lock = threading.Lock()

    @property
    def errors(self) -> int:
        with self._lock:
            return self._errors

    def record_success(self) -> int:
        """Count one finished item and return the new completed count."""
        with self._lock:
            self._completed += 1
            return self._completed

    def record_failure(self) -> int:
        """Count one failed item as completed and as an error; return completed count."""
        with self._lock:
            self._completed += 1
            self._errors += 1
            return self._completed


@dataclass(frozen=True, slots=True)
class ItemOutcome:
    """Result a worker reports for one item; turned into its final event by the consumer."""

    literature_id: int | None = None
    error_message: str | None = None


class BatchImportPipeline:
    """Processes a list of uploads and reports progress as one ordered event stream.

    Every item runs on the shared worker pool as soon as a worker is free,
    but events are emitted strictly by input index: all events of item 0,
    then all of item 1, and so on. A failing item produces a ``file_error``
    event and never stops the batch.
    """

    def __init__(
        self,
        *,
        save_file: SaveFileStep,
        extract_content: ExtractContentStep,
        create_literature: CreateLiteratureStep,
        generate_guide: GenerateGuideStep,
        finalize_guide: FinalizeGuideStep,
        mark_failed: MarkFailedStep,
        executor: Executor,
    ) -> None:
        self._save_file = save_file
        self._extract_content = extract_content
        self._create_literature = create_literature
        self._generate_guide = generate_guide
        self._finalize_guide = finalize_guide
        self._mark_failed = mark_failed
        self._executor = executor

    def run(self, uploads: Sequence[UploadedFile]) -> Iterator[StreamEvent]:
        progress = BatchProgress(len(uploads))
        Log.info(f"Batch import of {progress.total} files started")
        yield events.batch_start(progress.total)

        channels: list[queue.Queue[StreamEvent | ItemOutcome]] = [queue.Queue() for _ in uploads]
        futures: list[Future[None]] = []
        try:
            for index, upload in enumerate(uploads):
                futures.append(
                    self._executor.submit(self._process_item, index, upload, channels[index])
                )
            for index, channel in enumerate(channels):
                while True:
                    item = channel.get()
                    if isinstance(item, ItemOutcome):
                        yield self._finish_item(index, uploads[index], item, progress)
                        break
                    yield item
        finally:
            # items not started yet are dropped when the consumer goes away
            for future in futures:
                future.cancel()

        Log.info(
            f"Batch import finished: {progress.total} files, {progress.errors} errors"
        )
        yield events.batch_complete(progress.total, progress.errors)

    @staticmethod
    def _finish_item(
        index: int, upload: UploadedFile, outcome: ItemOutcome, progress: BatchProgress
    ) -> StreamEvent:
        # counted at emission time so completed grows by one per emitted item
        if outcome.error_message is None and outcome.literature_id is not None:
            completed = progress.record_success()
            return events.file_complete(index, outcome.literature_id, completed, progress.total)
        completed = progress.record_failure()
        return events.file_error(
            index, upload.filename, outcome.error_message or "", completed, progress.total
        )

    def _process_item(
        self,
        index: int,
        upload: UploadedFile,
        channel: queue.Queue[StreamEvent | ItemOutcome],
    ) -> None:
        context = PipelineContext(upload=upload)
        outcome = ItemOutcome(error_message="Processing was interrupted")
        try:
            channel.put(events.file_start(index, upload.filename))

            self._save_file.run(context)
            self._extract_content.run(context)
            self._create_literature.run(context)
            literature_id = context.require_literature_id()
            channel.put(events.file_saved(index, literature_id))

            self._generate_guide.run(context)
            self._finalize_guide.run(context)

            Log.info(f"Batch item {index} ('{upload.filename}') completed")
            outcome = ItemOutcome(literature_id=literature_id)
        except ModelError as exc:
            # the row stays PROCESSING after a model failure
            context.error_message = str(exc)
            Log.error(f"Batch item {index} ('{upload.filename}') failed: {exc}")
            outcome = ItemOutcome(error_message=str(exc))
        except Exception as exc:
            context.error_message = str(exc)
            Log.exception(f"Batch item {index} ('{upload.filename}') failed")
            self._mark_failed.run(context)
            outcome = ItemOutcome(error_message=str(exc))
        finally:
            # always the last entry on this item's channel
            channel.put(outcome)
