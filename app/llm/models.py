from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from types import TracebackType
from typing import Any


@dataclass(frozen=True)
class StreamChunk:
    """One decoded piece of a streamed completion."""

    content: str | None = None
    finish_reason: str | None = None


@dataclass(frozen=True)
class ChatCompletion:
    """Decoded non-streaming completion response."""

    choices: list[dict[str, Any]] = field(default_factory=list)
    model: str = ""

    @property
    def first_message_content(self) -> str | None:
        if not self.choices:
            return None
        message = self.choices[0].get("message") or {}
        return message.get("content")

    @property
    def first_finish_reason(self) -> str | None:
        if not self.choices:
            return None
        return self.choices[0].get("finish_reason")


class ChatStream:
    """Lazy, single-use sequence of StreamChunk values.

    Closing the stream stops consumption and releases the underlying
    connection. It is safe to close more than once.
    """

    def __init__(
        self,
        chunks: Iterator[StreamChunk],
        on_close: Callable[[], None] | None = None,
    ) -> None:
        self._chunks = chunks
        self._on_close = on_close
        self._closed = False

    def __iter__(self) -> Iterator[StreamChunk]:
        return self

    def __next__(self) -> StreamChunk:
        if self._closed:
            raise StopIteration
        return next(self._chunks)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        close_chunks = getattr(self._chunks, "close", None)
        try:
            if close_chunks is not None:
                close_chunks()
        finally:
            if self._on_close is not None:
                self._on_close()

    def __enter__(self) -> "ChatStream":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
