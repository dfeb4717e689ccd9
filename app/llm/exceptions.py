class ModelError(Exception):
    """Raised when a call to the language model service fails."""


class TransportError(ModelError):
    """Raised when the model service cannot be reached or the connection drops."""


class ServiceError(ModelError):
    """Raised when the model service answers with a non-success response."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: object = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class EmptyResponseError(ModelError):
    """Raised when the model service returns no usable content."""


class PromptLoadError(Exception):
    """Raised when a system prompt file cannot be read."""
