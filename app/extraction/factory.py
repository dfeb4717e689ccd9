from app.config.settings import Settings
from app.extraction.base import BaseTextExtractor
from app.extraction.content_extractor import ContentExtractor
from app.extraction.docx_adapter import DocxAdapter
from app.extraction.pdfplumber_adapter import PdfPlumberAdapter
from app.extraction.pymupdf_adapter import PyMuPdfAdapter
from app.extraction.text_adapter import PlainTextAdapter


class ContentExtractorFactory:
    """Creates the content extractor with the configured PDF engine."""

    PDF_ADAPTERS: dict[str, type[BaseTextExtractor]] = {
        "pdfplumber": PdfPlumberAdapter,
        "pymupdf": PyMuPdfAdapter,
    }

    @classmethod
    def create(cls, settings: Settings) -> ContentExtractor:
        engine = settings.pdf_engine.lower()
        pdf_adapter_cls = cls.PDF_ADAPTERS.get(engine)
        if pdf_adapter_cls is None:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. Choose from: {list(cls.PDF_ADAPTERS)}"
            )
        text_adapter = PlainTextAdapter()
        return ContentExtractor(
            {
                ".pdf": pdf_adapter_cls(),
                ".docx": DocxAdapter(),
                ".md": text_adapter,
                ".markdown": text_adapter,
                ".txt": text_adapter,
            }
        )
