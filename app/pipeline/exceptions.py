class PipelineError(Exception):
    """Base exception for all literature pipeline errors."""


class LiteratureNotFoundError(PipelineError):
    """Raised when a literature row cannot be found in the database."""


class ClassificationDecodeError(PipelineError):
    """Raised when a classification reply holds no recoverable JSON object."""

    def __init__(self, message: str, raw_text: str) -> None:
        super().__init__(message)
        self.raw_text = raw_text
