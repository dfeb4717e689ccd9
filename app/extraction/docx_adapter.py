import io

from docx import Document  # type: ignore
from docx.oxml.table import CT_Tbl  # type: ignore
from docx.oxml.text.paragraph import CT_P  # type: ignore
from docx.table import Table  # type: ignore
from docx.text.paragraph import Paragraph  # type: ignore

from app.extraction.base import BaseTextExtractor
from app.extraction.exceptions import ExtractionError


class DocxAdapter(BaseTextExtractor):
    """Extracts text from Word .docx files using python-docx.

    Body elements are read in document order. Headings become Markdown
    headings and table rows are joined with " | ".
    """

    def extract(self, data: bytes) -> str:
        try:
            doc = Document(io.BytesIO(data))
            blocks: list[str] = []
            for element in doc.element.body:
                if isinstance(element, CT_P):
                    text = self._paragraph_text(Paragraph(element, doc))
                    if text:
                        blocks.append(text)
                elif isinstance(element, CT_Tbl):
                    blocks.extend(self._table_rows(Table(element, doc)))
            return "\n".join(blocks).strip()
        except Exception as exc:
            raise ExtractionError(f"python-docx extraction failed: {exc}") from exc

    @staticmethod
    def _paragraph_text(paragraph: Paragraph) -> str:
        text = paragraph.text.strip()
        if not text:
            return ""
        style_name = paragraph.style.name if paragraph.style is not None else ""
        if style_name.startswith("Heading"):
            level = style_name.replace("Heading", "").strip()
            if level.isdigit():
                return f"{'#' * int(level)} {text}"
        return text

    @staticmethod
    def _table_rows(table: Table) -> list[str]:
        rows = []
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells]
            if any(cells):
                rows.append(" | ".join(cells))
        return rows
