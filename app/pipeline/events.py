"""Caller-facing events emitted by the guide and batch pipelines."""

import json
from dataclasses import dataclass
from typing import Any

START = "start"
PROGRESS = "progress"
CONTENT = "content"
FINISH = "finish"
COMPLETE = "complete"
ERROR = "error"

BATCH_START = "batch_start"
FILE_START = "file_start"
FILE_SAVED = "file_saved"
FILE_COMPLETE = "file_complete"
FILE_ERROR = "file_error"
BATCH_COMPLETE = "batch_complete"

FAILURE_EVENTS = frozenset({ERROR, FILE_ERROR})


@dataclass(frozen=True)
class StreamEvent:
    """One named event; data is plain text or a JSON-serializable dict."""

    event: str
    data: str | dict[str, Any]

    @property
    def is_failure(self) -> bool:
        return self.event in FAILURE_EVENTS

    def to_sse(self) -> str:
        """Encode the event as a text/event-stream frame."""
        payload = (
            json.dumps(self.data, ensure_ascii=False)
            if isinstance(self.data, dict)
            else self.data
        )
        lines = [f"event: {self.event}"]
        lines.extend(f"data: {line}" for line in payload.split("\n"))
        return "\n".join(lines) + "\n\n"


def start(filename: str) -> StreamEvent:
    return StreamEvent(START, f"Processing '{filename}'...")


def progress(message: str) -> StreamEvent:
    return StreamEvent(PROGRESS, message)


def content(token: str) -> StreamEvent:
    return StreamEvent(CONTENT, token)


def finish(reason: str) -> StreamEvent:
    return StreamEvent(FINISH, reason)


def complete(literature_id: int) -> StreamEvent:
    return StreamEvent(
        COMPLETE,
        {"literatureId": literature_id, "message": "Reading guide generated"},
    )


def error(message: str) -> StreamEvent:
    return StreamEvent(ERROR, f"Processing failed: {message}")


def batch_start(total: int) -> StreamEvent:
    return StreamEvent(BATCH_START, {"total": total, "message": "Batch import started"})


def file_start(index: int, filename: str) -> StreamEvent:
    return StreamEvent(
        FILE_START,
        {"index": index, "filename": filename, "message": "Processing file"},
    )


def file_saved(index: int, literature_id: int) -> StreamEvent:
    return StreamEvent(
        FILE_SAVED,
        {
            "index": index,
            "literatureId": literature_id,
            "message": "File saved, generating reading guide",
        },
    )


def file_complete(index: int, literature_id: int, completed: int, total: int) -> StreamEvent:
    return StreamEvent(
        FILE_COMPLETE,
        {
            "index": index,
            "literatureId": literature_id,
            "completed": completed,
            "total": total,
            "message": "File processed",
        },
    )


def file_error(
    index: int,
    filename: str,
    error_message: str,
    completed: int,
    total: int,
) -> StreamEvent:
    return StreamEvent(
        FILE_ERROR,
        {
            "index": index,
            "filename": filename,
            "error": error_message,
            "completed": completed,
            "total": total,
        },
    )


def batch_complete(total: int, errors: int) -> StreamEvent:
    return StreamEvent(
        BATCH_COMPLETE,
        {"total": total, "errors": errors, "message": "Batch import finished"},
    )
