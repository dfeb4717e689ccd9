import pymupdf

from app.extraction.base import BaseTextExtractor
from app.extraction.exceptions import ExtractionError


class PyMuPdfAdapter(BaseTextExtractor):
    """Extracts text from PDF using PyMuPDF, one block per non-empty page."""

    def extract(self, data: bytes) -> str:
        try:
            with pymupdf.open(stream=data, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                pages = [page.get_text().strip() for page in doc]
        except Exception as exc:
            raise ExtractionError(f"pymupdf extraction failed: {exc}") from exc
        return "\n\n".join(page for page in pages if page)
