"""
Brightness / contrast / saturation adjustment.

All three controls are percentages around 100 (100 leaves the image
unchanged; the editor's sliders span 0-200). Values outside that range
are accepted as-is and simply saturate at the pixel level.

The stages run in a fixed order and each one reads the integer channel
values the previous stage stored, the same way a byte-clamped canvas
buffer behaves: after every stage channels are rounded (half to even)
and clamped to [0, 255]. Alpha is never touched.
"""

from dataclasses import asdict, dataclass
from typing import Dict

import numpy as np

from photoshelf.editing.raster import Raster

# Luma weights (ITU-R BT.601)
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114])

# The contrast curve has a pole at an offset of 259; offsets are capped
# just below it, which yields the steepest representable curve.
MAX_CONTRAST_OFFSET = 258.0


@dataclass(frozen=True)
class AdjustmentVector:
    """Brightness, contrast and saturation in percent (100 = identity)."""

    brightness: float = 100
    contrast: float = 100
    saturation: float = 100

    @property
    def is_identity(self) -> bool:
        return self.brightness == 100 and self.contrast == 100 and self.saturation == 100

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def contrast_factor(contrast: float) -> float:
    """
    Multiplier applied around mid-grey (128) for a contrast percentage.

    ``C = contrast - 100``; ``factor = 259(C + 255) / (255(259 - C))``.
    C = 0 gives exactly 1.0, C = -255 flattens to grey.
    """
    offset = min(float(contrast) - 100.0, MAX_CONTRAST_OFFSET)
    return (259.0 * (offset + 255.0)) / (255.0 * (259.0 - offset))


def _store(channels: np.ndarray) -> np.ndarray:
    """Round and clamp channel values as an 8-bit buffer would."""
    return np.clip(np.rint(channels), 0.0, 255.0)


def adjust_brightness(rgb: np.ndarray, brightness: float) -> np.ndarray:
    return _store(rgb * (brightness / 100.0))


def adjust_contrast(rgb: np.ndarray, contrast: float) -> np.ndarray:
    factor = contrast_factor(contrast)
    return _store(factor * (rgb - 128.0) + 128.0)


def adjust_saturation(rgb: np.ndarray, saturation: float) -> np.ndarray:
    # Luma from the values the contrast stage produced
    gray = (rgb @ LUMA_WEIGHTS)[..., np.newaxis]
    return _store(gray + (saturation / 100.0) * (rgb - gray))


def adjust(raster: Raster, vector: AdjustmentVector) -> Raster:
    """
    Apply brightness, then contrast, then saturation to every pixel.

    Args:
        raster: Source raster (not modified).
        vector: Adjustment percentages.

    Returns:
        A new raster with the same dimensions and untouched alpha.
    """
    rgb = raster.pixels[..., :3].astype(np.float64)

    rgb = adjust_brightness(rgb, vector.brightness)
    rgb = adjust_contrast(rgb, vector.contrast)
    rgb = adjust_saturation(rgb, vector.saturation)

    out = np.array(raster.pixels)
    out[..., :3] = rgb.astype(np.uint8)
    return Raster(out)
