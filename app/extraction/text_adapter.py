from app.extraction.base import BaseTextExtractor
from app.extraction.exceptions import ExtractionError


class PlainTextAdapter(BaseTextExtractor):
    """Decodes Markdown and plain-text files as UTF-8 (a BOM is tolerated)."""

    def extract(self, data: bytes) -> str:
        try:
            return data.decode("utf-8-sig").strip()
        except UnicodeDecodeError as exc:
            raise ExtractionError(f"text file is not valid UTF-8: {exc}") from exc
