import io
import threading

import pytest
from docx import Document
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from app.database.models import Literature, LiteratureStatus, NewLiterature
from app.pipeline.exceptions import LiteratureNotFoundError


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Hello PDF World")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a two-page PDF with known text on each page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Page one content")
    c.showPage()
    c.drawString(72, 720, "Page two content")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no text content (blank page)."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def sample_docx_bytes() -> bytes:
    """Generate a DOCX with a heading, a paragraph and a two-column table."""
    document = Document()
    document.add_heading("Chapter One", level=1)
    document.add_paragraph("Opening paragraph text.")
    table = document.add_table(rows=2, cols=2)
    table.cell(0, 0).text = "Term"
    table.cell(0, 1).text = "Meaning"
    table.cell(1, 0).text = "Gene"
    table.cell(1, 1).text = "Unit of heredity"
    buf = io.BytesIO()
    document.save(buf)
    return buf.getvalue()


class InMemoryLiteratureRepository:
    """Thread-safe stand-in for LiteratureRepository that records every write."""

    def __init__(self) -> None:
        self.rows: dict[int, Literature] = {}
        self.calls: list[tuple[str, int]] = []
        self._next_id = 1
        self._lock = threading.Lock()

    def create(self, literature: NewLiterature) -> int:
        with self._lock:
            literature_id = self._next_id
            self._next_id += 1
            self.rows[literature_id] = Literature(
                id=literature_id,
                original_name=literature.original_name,
                file_path=literature.file_path,
                file_size=literature.file_size,
                file_type=literature.file_type,
                content_length=literature.content_length,
                status=literature.status,
            )
            self.calls.append(("create", literature_id))
            return literature_id

    def find_by_id(self, literature_id: int) -> Literature | None:
        return self.rows.get(literature_id)

    def get_by_id(self, literature_id: int) -> Literature:
        return self._row(literature_id)

    def update_status(self, literature_id: int, status: LiteratureStatus) -> None:
        with self._lock:
            self._row(literature_id).status = status
            self.calls.append(("update_status", literature_id))

    def update_reading_guide(self, literature_id: int, reading_guide: str) -> None:
        with self._lock:
            self._row(literature_id).reading_guide = reading_guide
            self.calls.append(("update_reading_guide", literature_id))

    def append_reading_guide(self, literature_id: int, chunk: str) -> None:
        with self._lock:
            row = self._row(literature_id)
            row.reading_guide = (row.reading_guide or "") + chunk
            self.calls.append(("append_reading_guide", literature_id))

    def update_classification(
        self, literature_id: int, tags: list[str], description: str
    ) -> None:
        with self._lock:
            row = self._row(literature_id)
            if row.tags is None:
                row.tags = tags
            if row.description is None:
                row.description = description
            row.status = LiteratureStatus.COMPLETED
            self.calls.append(("update_classification", literature_id))

    def _row(self, literature_id: int) -> Literature:
        row = self.rows.get(literature_id)
        if row is None:
            raise LiteratureNotFoundError(f"Literature {literature_id} not found")
        return row


@pytest.fixture()
def literature_repo() -> InMemoryLiteratureRepository:
    return InMemoryLiteratureRepository()
