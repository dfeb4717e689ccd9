import io

import pdfplumber

from app.extraction.base import BaseTextExtractor
from app.extraction.exceptions import ExtractionError


class PdfPlumberAdapter(BaseTextExtractor):
    """Extracts text from PDF using pdfplumber.

    Pages without text are dropped; the rest are separated by a blank line.
    """

    def extract(self, data: bytes) -> str:
        try:
            with pdfplumber.open(io.BytesIO(data)) as pdf:
                pages = [(page.extract_text() or "").strip() for page in pdf.pages]
        except Exception as exc:
            raise ExtractionError(f"pdfplumber extraction failed: {exc}") from exc
        return "\n\n".join(page for page in pages if page)
