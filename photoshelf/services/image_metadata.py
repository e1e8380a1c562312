"""
Image metadata helpers
======================

Reads what the gallery shows about an upload and builds its thumbnail:

- **Dimensions**: pixel width and height as stored in the file.
- **EXIF**: a fixed pick of tags (capture time, camera, orientation and
  GPS position). GPS is converted from degrees/minutes/seconds rationals
  to signed decimal degrees, capture time to ISO 8601.
- **Thumbnail**: fitted inside a square bounding box, never enlarged.

EXIF is organised into IFDs (Image File Directories): IFD0 holds
Make/Model/Orientation, the Exif sub-IFD holds DateTimeOriginal and the
GPS sub-IFD holds the position. Pillow exposes the sub-IFDs through
``Exif.get_ifd``.
"""

import logging
import math
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from PIL import ExifTags, Image, ImageOps

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

EXIF_DATETIME_FORMAT = "%Y:%m:%d %H:%M:%S"

# Formats that cannot store an alpha channel or a palette as-is
_RGB_ONLY_FORMATS = {"JPEG"}


def read_dimensions(path: PathLike) -> Tuple[int, int]:
    """
    Read ``(width, height)`` without decoding the pixel data.
    """
    with Image.open(path) as image:
        return image.size


def _dms_to_decimal(dms: Any, ref: Optional[str]) -> Optional[float]:
    """
    Convert an EXIF (degrees, minutes, seconds) triple to decimal degrees.

    South and West references yield negative values.
    """
    try:
        degrees, minutes, seconds = (float(v) for v in dms)
    except (TypeError, ValueError, ZeroDivisionError):
        return None

    decimal = degrees + minutes / 60.0 + seconds / 3600.0
    # 0/0 rationals (no GPS fix) come through as NaN
    if not math.isfinite(decimal):
        return None
    if ref and ref.strip().upper() in ("S", "W"):
        decimal = -decimal
    return round(decimal, 7)


def _parse_exif_datetime(value: Any) -> Optional[str]:
    """Parse an EXIF timestamp (``2024:01:15 14:30:00``) to ISO 8601."""
    if not isinstance(value, str):
        return None
    try:
        return datetime.strptime(value.strip("\x00 "), EXIF_DATETIME_FORMAT).isoformat()
    except ValueError:
        logger.debug(f"Unparseable EXIF datetime: {value!r}")
        return None


def _clean_text(value: Any) -> Optional[str]:
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="ignore")
    if not isinstance(value, str):
        return None
    value = value.strip("\x00 ")
    return value or None


def extract_exif(path: PathLike) -> Optional[Dict[str, Any]]:
    """
    Extract the picked EXIF fields from an image file.

    Returns:
        Dictionary with any of ``DateTimeOriginal``, ``GPSLatitude``,
        ``GPSLongitude``, ``Make``, ``Model``, ``Orientation``; ``None``
        when the file carries none of them.
    """
    with Image.open(path) as image:
        exif = image.getexif()

    if not exif:
        logger.debug(f"No EXIF data found in {path}")
        return None

    picked: Dict[str, Any] = {}

    make = _clean_text(exif.get(ExifTags.Base.Make))
    if make:
        picked["Make"] = make
    model = _clean_text(exif.get(ExifTags.Base.Model))
    if model:
        picked["Model"] = model
    orientation = exif.get(ExifTags.Base.Orientation)
    if isinstance(orientation, int):
        picked["Orientation"] = orientation

    exif_ifd = exif.get_ifd(ExifTags.IFD.Exif)
    taken = _parse_exif_datetime(exif_ifd.get(ExifTags.Base.DateTimeOriginal))
    if taken:
        picked["DateTimeOriginal"] = taken

    gps_ifd = exif.get_ifd(ExifTags.IFD.GPSInfo)
    if gps_ifd:
        lat = _dms_to_decimal(
            gps_ifd.get(ExifTags.GPS.GPSLatitude),
            gps_ifd.get(ExifTags.GPS.GPSLatitudeRef),
        )
        lon = _dms_to_decimal(
            gps_ifd.get(ExifTags.GPS.GPSLongitude),
            gps_ifd.get(ExifTags.GPS.GPSLongitudeRef),
        )
        if lat is not None and lon is not None:
            picked["GPSLatitude"] = lat
            picked["GPSLongitude"] = lon

    return picked or None


def generate_thumbnail(source: PathLike, destination: PathLike, max_size: int = 300) -> Tuple[int, int]:
    """
    Write a thumbnail fitting inside ``max_size`` x ``max_size``.

    The aspect ratio is preserved and images already small enough are
    written at their original size. EXIF orientation is applied so the
    thumbnail displays upright.

    Returns:
        ``(width, height)`` of the written thumbnail.
    """
    destination = Path(destination)
    with Image.open(source) as image:
        fmt = image.format or "PNG"
        thumb = ImageOps.exif_transpose(image)
        thumb.thumbnail((max_size, max_size), Image.Resampling.LANCZOS)

        if fmt in _RGB_ONLY_FORMATS and thumb.mode not in ("RGB", "L"):
            thumb = thumb.convert("RGB")

        destination.parent.mkdir(parents=True, exist_ok=True)
        thumb.save(destination, format=fmt)

    logger.debug(f"Generated thumbnail {destination.name}: {thumb.size}")
    return thumb.size
