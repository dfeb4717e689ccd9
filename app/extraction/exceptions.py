class ExtractionError(Exception):
    """Raised when text content cannot be obtained from a stored document."""


class UnsupportedFileTypeError(ExtractionError):
    """Raised when no extractor is registered for a file extension."""
