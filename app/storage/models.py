from dataclasses import dataclass
from pathlib import PurePath


@dataclass(frozen=True)
class UploadedFile:
    """Raw uploaded document as received from the caller."""

    filename: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def file_type(self) -> str:
        """Lower-cased extension of the original filename, without the dot."""
        return PurePath(self.filename).suffix.lower().lstrip(".")
