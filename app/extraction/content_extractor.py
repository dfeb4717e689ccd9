from pathlib import Path

from app.extraction.base import BaseTextExtractor
from app.extraction.exceptions import ExtractionError, UnsupportedFileTypeError
from app.logging.logger import Log


class ContentExtractor:
    """Reads a stored document and extracts its text by file extension."""

    def __init__(self, adapters: dict[str, BaseTextExtractor]) -> None:
        self._adapters = {ext.lower(): adapter for ext, adapter in adapters.items()}

    @property
    def supported_extensions(self) -> list[str]:
        return sorted(self._adapters)

    def extract(self, path: Path) -> str:
        """Extract the text content of the file at path.

        Raises:
            UnsupportedFileTypeError: if the extension has no adapter.
            ExtractionError: if the file cannot be read or holds no text.
        """
        extension = path.suffix.lower()
        adapter = self._adapters.get(extension)
        if adapter is None:
            raise UnsupportedFileTypeError(
                f"Unsupported file type '{extension or path.name}'. "
                f"Supported: {self.supported_extensions}"
            )
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise ExtractionError(f"Failed to read {path}: {exc}") from exc

        text = adapter.extract(data)
        if not text.strip():
            raise ExtractionError(f"No text content could be extracted from {path.name}")
        Log.info(f"Extracted {len(text)} chars from {path.name}")
        return text
