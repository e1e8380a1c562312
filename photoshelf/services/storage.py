"""
Storage Manager
===============

Filesystem layout for uploaded images::

    {base}/
      {stem}-{timestamp_ms}-{random}{ext}       original upload
      thumbnails/{same filename}                thumbnail

Stored names never reuse the client's filename verbatim: only a
sanitized stem is kept, so names cannot collide or traverse directories.
"""

import logging
import re
import secrets
import time
from pathlib import Path
from typing import Iterable, Optional, Union

logger = logging.getLogger(__name__)

THUMBNAIL_SUBDIR = "thumbnails"
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class StorageError(Exception):
    """Base exception for storage-related errors."""
    pass


class FileNotFoundStorageError(StorageError):
    """Raised when a stored file cannot be found."""
    pass


class StorageManager:
    """
    Manages the upload directory and its thumbnail subdirectory.

    Attributes:
        base_path: Root directory holding originals.
        thumbnails_path: Directory holding thumbnails.
    """

    def __init__(self, base_path: Union[str, Path]) -> None:
        """
        Initialize the storage manager, creating directories as needed.

        Raises:
            StorageError: If the directories cannot be created.
        """
        self.base_path = Path(base_path)
        self.thumbnails_path = self.base_path / THUMBNAIL_SUBDIR

        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
            self.thumbnails_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to create storage directory {self.base_path}: {e}") from e

        logger.info(f"Storage initialized at: {self.base_path}")

    @staticmethod
    def unique_filename(original_name: Optional[str]) -> str:
        """
        Build a collision-free stored name that keeps the original extension.

        ``holiday photo.JPG`` -> ``holiday_photo-1700000000000-123456789.JPG``
        """
        original = Path(original_name or "upload")
        ext = _UNSAFE_CHARS.sub("", original.suffix)
        stem = _UNSAFE_CHARS.sub("_", original.stem).strip("._") or "image"
        suffix = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}"
        return f"{stem[:100]}-{suffix}{ext}"

    def path_for(self, filename: str, thumbnail: bool = False) -> Path:
        """
        Resolve a stored filename to its path.

        Raises:
            StorageError: The name would escape the storage directory.
        """
        if Path(filename).name != filename or filename in ("", ".", ".."):
            raise StorageError(f"Invalid stored filename: {filename!r}")
        return (self.thumbnails_path if thumbnail else self.base_path) / filename

    def save_upload(self, filename: str, contents: bytes) -> Path:
        """Write uploaded bytes under ``filename``."""
        path = self.path_for(filename)
        try:
            path.write_bytes(contents)
        except OSError as e:
            raise StorageError(f"Failed to write {filename}: {e}") from e
        logger.debug(f"Saved upload {filename} ({len(contents)} bytes)")
        return path

    def read_bytes(self, filename: str, thumbnail: bool = False) -> bytes:
        """
        Read a stored file.

        Raises:
            FileNotFoundStorageError: The file is missing on disk.
        """
        path = self.path_for(filename, thumbnail=thumbnail)
        if not path.is_file():
            raise FileNotFoundStorageError(f"Stored file not found: {path.name}")
        return path.read_bytes()

    def delete_files(self, paths: Iterable[Path]) -> int:
        """
        Delete files best-effort; failures are logged, not raised.

        Returns:
            Number of files actually removed.
        """
        removed = 0
        for path in paths:
            try:
                if path.exists():
                    path.unlink()
                    removed += 1
            except OSError as e:
                logger.error(f"Failed to delete file {path}: {e}")
        return removed

    def delete_image_files(self, filename: str) -> int:
        """Remove an original and its thumbnail."""
        return self.delete_files([
            self.path_for(filename),
            self.path_for(filename, thumbnail=True),
        ])
