"""
Upload processing pipeline.

Stores an uploaded file and gathers what the database row needs:

1. Write the bytes under a unique name
2. Read the pixel dimensions
3. Pick EXIF fields
4. Generate the thumbnail

Steps 2-4 are best-effort: a file Pillow cannot read still gets stored
and listed, with null dimensions/EXIF and no thumbnail. Only a failure
to store the original aborts the upload.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from PIL import UnidentifiedImageError

from photoshelf.editing import Raster, decode_raster
from photoshelf.services.image_metadata import extract_exif, generate_thumbnail, read_dimensions
from photoshelf.services.storage import StorageManager

logger = logging.getLogger(__name__)

# Errors Pillow raises for unreadable or partially readable files
_IMAGE_ERRORS = (UnidentifiedImageError, OSError, ValueError, SyntaxError)


@dataclass
class ProcessedUpload:
    """Result of storing one upload."""

    filename: str
    size: int
    width: Optional[int] = None
    height: Optional[int] = None
    exif_data: Optional[Dict[str, Any]] = None
    has_thumbnail: bool = False


class ImageProcessor:
    """
    Stores uploads and derives their metadata.

    Attributes:
        storage: Where originals and thumbnails are written.
        thumbnail_size: Bounding box for thumbnails, in pixels.
    """

    def __init__(self, storage: StorageManager, thumbnail_size: int = 300) -> None:
        self.storage = storage
        self.thumbnail_size = thumbnail_size

    def process_upload(self, original_name: Optional[str], contents: bytes) -> ProcessedUpload:
        """
        Store ``contents`` and collect dimensions, EXIF and a thumbnail.

        Raises:
            StorageError: The original could not be written.
        """
        filename = self.storage.unique_filename(original_name)
        path = self.storage.save_upload(filename, contents)
        result = ProcessedUpload(filename=filename, size=len(contents))

        try:
            result.width, result.height = read_dimensions(path)
        except _IMAGE_ERRORS as e:
            logger.error(f"Failed to read dimensions of {filename}: {e}")

        try:
            result.exif_data = extract_exif(path)
        except _IMAGE_ERRORS as e:
            # Many formats simply carry no EXIF
            logger.info(f"EXIF extraction failed for {filename}: {e}")

        try:
            generate_thumbnail(
                path,
                self.storage.path_for(filename, thumbnail=True),
                max_size=self.thumbnail_size,
            )
            result.has_thumbnail = True
        except _IMAGE_ERRORS as e:
            logger.error(f"Thumbnail generation failed for {filename}: {e}")

        logger.info(
            f"Stored upload {filename}: {result.size} bytes, "
            f"{result.width}x{result.height}, exif={'yes' if result.exif_data else 'no'}"
        )
        return result

    def load_raster(self, filename: str) -> Raster:
        """
        Fetch a stored asset and decode it for editing.

        Raises:
            FileNotFoundStorageError: The asset is missing on disk.
            RasterDecodeError: The asset cannot be decoded.
        """
        return decode_raster(self.storage.read_bytes(filename))
