import threading
from collections.abc import Generator
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from app.database.models import LiteratureStatus
from app.extraction.content_extractor import ContentExtractor
from app.extraction.text_adapter import PlainTextAdapter
from app.llm.exceptions import TransportError
from app.pipeline import events
from app.pipeline.batch_pipeline import BatchImportPipeline, BatchProgress
from app.pipeline.classification import ClassificationStage
from app.pipeline.steps import (
    CreateLiteratureStep,
    ExtractContentStep,
    FinalizeGuideStep,
    GenerateGuideStep,
    MarkFailedStep,
    SaveFileStep,
)
from app.storage.file_storage import FileStorage
from app.storage.models import UploadedFile


@pytest.fixture()
def executor() -> Generator[ThreadPoolExecutor, None, None]:
    pool = ThreadPoolExecutor(max_workers=3)
    yield pool
    pool.shutdown(wait=True)


def _uploads(*names: str) -> list[UploadedFile]:
    return [UploadedFile(filename=name, content=f"text of {name}".encode()) for name in names]


def _pipeline(
    tmp_path: Path,
    literature_repo: Any,
    ai_service: MagicMock,
    executor: ThreadPoolExecutor,
    spawn: MagicMock | None = None,
) -> BatchImportPipeline:
    classification = ClassificationStage(ai_service, literature_repo, spawn=spawn or MagicMock())
    return BatchImportPipeline(
        save_file=SaveFileStep(FileStorage(files_root=tmp_path)),
        extract_content=ExtractContentStep(ContentExtractor({".md": PlainTextAdapter()})),
        create_literature=CreateLiteratureStep(literature_repo),
        generate_guide=GenerateGuideStep(ai_service),
        finalize_guide=FinalizeGuideStep(literature_repo, classification),
        mark_failed=MarkFailedStep(literature_repo),
        executor=executor,
    )


def _guide_service() -> MagicMock:
    ai_service = MagicMock()
    ai_service.generate_reading_guide.side_effect = lambda content: f"Guide for {content}"
    return ai_service


def _item_events(emitted: list[events.StreamEvent], index: int) -> list[str]:
    return [
        e.event
        for e in emitted
        if isinstance(e.data, dict) and e.data.get("index") == index
    ]


class TestBatchProgress:
    def test_counts_concurrent_updates(self) -> None:
        progress = BatchProgress(total=200)

        def _work(i: int) -> None:
            if i % 4 == 0:
                progress.record_failure()
            else:
                progress.record_success()

        threads = [threading.Thread(target=_work, args=(i,)) for i in range(200)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert progress.errors == 50
        assert progress.record_success() == 201

    def test_failure_counts_as_completed(self) -> None:
        progress = BatchProgress(total=2)
        assert progress.record_failure() == 1
        assert progress.record_success() == 2
        assert progress.errors == 1


class TestBatchImportPipeline:
    def test_all_items_succeed(
        self, tmp_path: Path, literature_repo: Any, executor: ThreadPoolExecutor
    ) -> None:
        spawn = MagicMock()
        pipeline = _pipeline(tmp_path, literature_repo, _guide_service(), executor, spawn)

        emitted = list(pipeline.run(_uploads("a.md", "b.md")))

        assert emitted[0].event == events.BATCH_START
        assert emitted[0].data == {"total": 2, "message": "Batch import started"}
        for index in (0, 1):
            assert _item_events(emitted, index) == [
                events.FILE_START,
                events.FILE_SAVED,
                events.FILE_COMPLETE,
            ]
        assert emitted[-1].event == events.BATCH_COMPLETE
        assert emitted[-1].data["errors"] == 0  # type: ignore[index]
        assert spawn.call_count == 2
        guides = sorted(row.reading_guide for row in literature_repo.rows.values())
        assert guides == ["Guide for text of a.md", "Guide for text of b.md"]

    def test_failing_item_does_not_stop_batch(
        self, tmp_path: Path, literature_repo: Any, executor: ThreadPoolExecutor
    ) -> None:
        pipeline = _pipeline(tmp_path, literature_repo, _guide_service(), executor)

        emitted = list(pipeline.run(_uploads("a.md", "b.xlsx", "c.md")))

        assert _item_events(emitted, 0)[-1] == events.FILE_COMPLETE
        assert _item_events(emitted, 1) == [events.FILE_START, events.FILE_ERROR]
        assert _item_events(emitted, 2)[-1] == events.FILE_COMPLETE

        file_error = next(e for e in emitted if e.event == events.FILE_ERROR)
        assert file_error.data["filename"] == "b.xlsx"  # type: ignore[index]
        assert "Unsupported file type" in file_error.data["error"]  # type: ignore[index]
        assert file_error.data["total"] == 3  # type: ignore[index]

        assert emitted[-1].data["total"] == 3  # type: ignore[index]
        assert emitted[-1].data["errors"] == 1  # type: ignore[index]
        assert len(literature_repo.rows) == 2

    def test_model_failure_leaves_item_processing(
        self, tmp_path: Path, literature_repo: Any, executor: ThreadPoolExecutor
    ) -> None:
        ai_service = MagicMock()

        def _generate(content: str) -> str:
            if "bad" in content:
                raise TransportError("timeout")
            return "Guide"

        ai_service.generate_reading_guide.side_effect = _generate
        pipeline = _pipeline(tmp_path, literature_repo, ai_service, executor)

        emitted = list(pipeline.run(_uploads("good.md", "bad.md")))

        assert _item_events(emitted, 1) == [
            events.FILE_START,
            events.FILE_SAVED,
            events.FILE_ERROR,
        ]
        statuses = {row.original_name: row.status for row in literature_repo.rows.values()}
        assert statuses["bad.md"] == LiteratureStatus.PROCESSING
        assert statuses["good.md"] == LiteratureStatus.PROCESSING
        assert emitted[-1].data["errors"] == 1  # type: ignore[index]

    def test_store_failure_marks_item_failed(
        self,
        tmp_path: Path,
        literature_repo: Any,
        executor: ThreadPoolExecutor,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        def _broken_update(literature_id: int, reading_guide: str) -> None:
            raise RuntimeError("database unavailable")

        monkeypatch.setattr(literature_repo, "update_reading_guide", _broken_update)
        pipeline = _pipeline(tmp_path, literature_repo, _guide_service(), executor)

        emitted = list(pipeline.run(_uploads("a.md")))

        assert _item_events(emitted, 0) == [
            events.FILE_START,
            events.FILE_SAVED,
            events.FILE_ERROR,
        ]
        file_error = next(e for e in emitted if e.event == events.FILE_ERROR)
        assert file_error.data["error"] == "database unavailable"  # type: ignore[index]
        (row,) = literature_repo.rows.values()
        assert row.status == LiteratureStatus.FAILED

    def test_events_follow_input_order_when_work_finishes_out_of_order(
        self, tmp_path: Path, literature_repo: Any, executor: ThreadPoolExecutor
    ) -> None:
        last_item_finalized = threading.Event()
        finalized: list[str] = []
        lock = threading.Lock()

        def _generate(content: str) -> str:
            if content.endswith("first.md"):
                assert last_item_finalized.wait(timeout=10)
            return f"Guide for {content}"

        def _spawn(target: Any, name: str) -> None:
            literature = literature_repo.rows[int(name.removeprefix("classify-"))]
            with lock:
                finalized.append(literature.original_name)
            if literature.original_name == "third.md":
                last_item_finalized.set()

        ai_service = MagicMock()
        ai_service.generate_reading_guide.side_effect = _generate
        pipeline = _pipeline(
            tmp_path, literature_repo, ai_service, executor, spawn=MagicMock(side_effect=_spawn)
        )

        emitted = list(pipeline.run(_uploads("first.md", "second.md", "third.md")))

        assert finalized.index("third.md") < finalized.index("first.md")
        indexes = [
            e.data["index"]
            for e in emitted
            if isinstance(e.data, dict) and "index" in e.data
        ]
        assert indexes == [0, 0, 0, 1, 1, 1, 2, 2, 2]
        completed = [
            e.data["completed"]  # type: ignore[index]
            for e in emitted
            if e.event == events.FILE_COMPLETE
        ]
        assert completed == [1, 2, 3]

    def test_empty_batch(
        self, tmp_path: Path, literature_repo: Any, executor: ThreadPoolExecutor
    ) -> None:
        pipeline = _pipeline(tmp_path, literature_repo, _guide_service(), executor)

        emitted = list(pipeline.run([]))

        assert [e.event for e in emitted] == [events.BATCH_START, events.BATCH_COMPLETE]
        assert emitted[-1].data["errors"] == 0  # type: ignore[index]

    def test_completed_count_grows_in_emission_order_with_mixed_outcomes(
        self, tmp_path: Path, literature_repo: Any, executor: ThreadPoolExecutor
    ) -> None:
        first_may_finish = threading.Event()

        def _generate(content: str) -> str:
            if content.endswith("first.md"):
                assert first_may_finish.wait(timeout=10)
            if content.endswith("second.md"):
                first_may_finish.set()
                raise TransportError("timeout")
            return f"Guide for {content}"

        ai_service = MagicMock()
        ai_service.generate_reading_guide.side_effect = _generate
        pipeline = _pipeline(tmp_path, literature_repo, ai_service, executor)

        emitted = list(pipeline.run(_uploads("first.md", "second.md", "third.md")))

        finished = [
            (e.event, e.data["index"], e.data["completed"])  # type: ignore[index]
            for e in emitted
            if e.event in (events.FILE_COMPLETE, events.FILE_ERROR)
        ]
        assert finished == [
            (events.FILE_COMPLETE, 0, 1),
            (events.FILE_ERROR, 1, 2),
            (events.FILE_COMPLETE, 2, 3),
        ]
