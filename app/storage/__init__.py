from app.storage.exceptions import FileStorageError
from app.storage.file_storage import FileStorage
from app.storage.models import UploadedFile

__all__ = ["FileStorage", "FileStorageError", "UploadedFile"]
