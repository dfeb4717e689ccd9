import uuid
from datetime import datetime, timezone
from pathlib import Path, PurePath

from app.logging.logger import Log
from app.storage.exceptions import FileStorageError
from app.storage.models import UploadedFile


def stored_file_path(files_root: Path, filename: str, now: datetime, file_id: str) -> Path:
    """Build path to a stored upload: {files_root}/{yyyy}/{mm}/{file_id}{ext}"""
    extension = PurePath(filename).suffix.lower()
    return files_root / f"{now:%Y}" / f"{now:%m}" / f"{file_id}{extension}"


class FileStorage:
    """Saves uploads under the files root and resolves stored paths."""

    FILES_ROOT = Path("/app/files")

    def __init__(
        self,
        files_root: Path | None = None,
        max_size_bytes: int | None = None,
    ) -> None:
        self._files_root = files_root if files_root is not None else self.FILES_ROOT
        self._max_size_bytes = max_size_bytes

    def save(self, upload: UploadedFile) -> Path:
        """Write the upload to disk and return its path.

        Raises:
            FileStorageError: if the upload is empty, too large, or cannot be written.
        """
        if not upload.content:
            raise FileStorageError(f"File '{upload.filename}' is empty")
        if self._max_size_bytes is not None and upload.size > self._max_size_bytes:
            raise FileStorageError(
                f"File '{upload.filename}' is {upload.size} bytes, "
                f"limit is {self._max_size_bytes}"
            )

        path = stored_file_path(
            self._files_root,
            upload.filename,
            datetime.now(timezone.utc),
            uuid.uuid4().hex,
        )
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(upload.content)
        except OSError as exc:
            raise FileStorageError(f"Failed to store '{upload.filename}': {exc}") from exc

        Log.info(f"Stored '{upload.filename}' ({upload.size} bytes) at {path}")
        return path

    def resolve(self, stored_path: str) -> Path:
        """Resolve a stored path, relative paths against the files root.

        Raises:
            FileNotFoundError: if nothing exists at the resolved path.
        """
        path = Path(stored_path)
        if not path.is_absolute():
            path = (self._files_root / path).resolve()
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        return path
