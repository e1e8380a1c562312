"""
Raster value type
=================

An RGBA pixel grid held as a ``(height, width, 4)`` numpy ``uint8`` array.

Rasters are treated as values: constructors copy their input and the
array is marked read-only, so a transform can never alias or mutate a
caller's buffer. Conversion helpers bridge to Pillow for decoding
uploaded files and encoding edited results.
"""

import io
import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from photoshelf.editing.errors import RasterDecodeError

logger = logging.getLogger(__name__)

Pixel = Tuple[int, int, int, int]

ENCODE_FORMATS = {
    "png": "PNG",
    "jpeg": "JPEG",
    "jpg": "JPEG",
    "webp": "WEBP",
}

MEDIA_TYPES = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "WEBP": "image/webp",
}


@dataclass(frozen=True, eq=False)
class Raster:
    """RGBA pixel grid. ``pixels[row, column]`` is ``(R, G, B, A)``."""

    pixels: np.ndarray

    def __post_init__(self) -> None:
        arr = self.pixels
        if arr.ndim != 3 or arr.shape[2] != 4:
            raise ValueError(f"Expected an (H, W, 4) array, got shape {arr.shape}")
        arr = np.array(arr, dtype=np.uint8, copy=True)
        arr.setflags(write=False)
        object.__setattr__(self, "pixels", arr)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        """``(width, height)``, the same order Pillow uses."""
        return self.width, self.height

    def pixel(self, x: int, y: int) -> Pixel:
        """Return the RGBA tuple at column ``x``, row ``y``."""
        r, g, b, a = self.pixels[y, x]
        return int(r), int(g), int(b), int(a)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Raster):
            return NotImplemented
        return np.array_equal(self.pixels, other.pixels)

    def __repr__(self) -> str:
        return f"Raster(width={self.width}, height={self.height})"

    # ── Constructors ────────────────────────────────────────────────
    @classmethod
    def new(cls, width: int, height: int, color: Pixel = (0, 0, 0, 255)) -> "Raster":
        """Create a raster filled with a single colour."""
        arr = np.empty((height, width, 4), dtype=np.uint8)
        arr[:, :] = color
        return cls(arr)

    @classmethod
    def from_array(cls, arr: np.ndarray) -> "Raster":
        """
        Build a raster from a greyscale, RGB or RGBA array.

        Greyscale is replicated into R, G and B; missing alpha is opaque.
        """
        arr = np.asarray(arr)
        if arr.ndim == 2:
            arr = np.repeat(arr[:, :, np.newaxis], 3, axis=2)
        if arr.ndim != 3 or arr.shape[2] not in (3, 4):
            raise ValueError(f"Unsupported array shape {arr.shape}")
        if arr.shape[2] == 3:
            alpha = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
            arr = np.concatenate([arr.astype(np.uint8), alpha], axis=2)
        return cls(arr)

    @classmethod
    def from_pil(cls, image: Image.Image) -> "Raster":
        """Convert a Pillow image (any mode) to an RGBA raster."""
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        return cls(np.asarray(image))

    def to_pil(self) -> Image.Image:
        """Convert to an RGBA Pillow image."""
        return Image.fromarray(np.array(self.pixels))


def decode_raster(data: bytes) -> Raster:
    """
    Decode encoded image bytes (JPEG, PNG, GIF, WebP...) into a raster.

    EXIF orientation is applied so the raster matches what viewers show.
    Only the first frame of animated formats is used.

    Raises:
        RasterDecodeError: The bytes are corrupt or not a supported image.
    """
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            image = ImageOps.exif_transpose(image)
            return Raster.from_pil(image)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        logger.warning(f"Failed to decode raster ({len(data)} bytes): {e}")
        raise RasterDecodeError(f"Cannot decode image: {e}") from e


def encode_raster(raster: Raster, fmt: str = "png", quality: int = 90) -> Tuple[bytes, str]:
    """
    Encode a raster to bytes.

    Args:
        raster: Raster to encode.
        fmt: ``png``, ``jpeg``/``jpg`` or ``webp``.
        quality: Lossy quality for JPEG and WebP.

    Returns:
        ``(data, media_type)``

    Raises:
        ValueError: Unknown format.
    """
    pil_format = ENCODE_FORMATS.get(fmt.lower())
    if pil_format is None:
        raise ValueError(f"Unsupported output format: {fmt}")

    image = raster.to_pil()
    save_kwargs = {}
    if pil_format == "JPEG":
        # JPEG has no alpha channel
        image = image.convert("RGB")
        save_kwargs["quality"] = quality
    elif pil_format == "WEBP":
        save_kwargs["quality"] = quality

    buffer = io.BytesIO()
    image.save(buffer, format=pil_format, **save_kwargs)
    return buffer.getvalue(), MEDIA_TYPES[pil_format]
