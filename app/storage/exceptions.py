class FileStorageError(Exception):
    """Raised when an uploaded file cannot be stored."""
