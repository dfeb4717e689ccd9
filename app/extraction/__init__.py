from app.extraction.content_extractor import ContentExtractor
from app.extraction.exceptions import ExtractionError, UnsupportedFileTypeError
from app.extraction.factory import ContentExtractorFactory

__all__ = [
    "ContentExtractor",
    "ContentExtractorFactory",
    "ExtractionError",
    "UnsupportedFileTypeError",
]
