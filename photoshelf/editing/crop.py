"""
Rectangular region extraction.

Regions are expressed in source-raster pixel coordinates. A region that
reaches past the raster's edges is truncated to the overlapping part; a
region with no area is rejected before any pixels are copied.
"""

from dataclasses import asdict, dataclass
from typing import Dict

from photoshelf.editing.errors import DegenerateRegionError
from photoshelf.editing.raster import Raster


@dataclass(frozen=True)
class CropRegion:
    """Axis-aligned rectangle: top-left corner plus non-negative size."""

    x: int
    y: int
    width: int
    height: int

    @classmethod
    def from_corners(cls, x0: int, y0: int, x1: int, y1: int) -> "CropRegion":
        """Normalize two opposite corners (in any order) into a region."""
        return cls(
            x=min(x0, x1),
            y=min(y0, y1),
            width=abs(x1 - x0),
            height=abs(y1 - y0),
        )

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def clamp_to(self, width: int, height: int) -> "CropRegion":
        """
        Intersect the region with a ``width`` x ``height`` raster.

        The result may be empty when the region lies entirely outside.
        """
        left = min(max(self.x, 0), width)
        top = min(max(self.y, 0), height)
        right = min(max(self.x + self.width, 0), width)
        bottom = min(max(self.y + self.height, 0), height)
        return CropRegion(left, top, max(right - left, 0), max(bottom - top, 0))

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


def crop(raster: Raster, region: CropRegion) -> Raster:
    """
    Extract ``region`` from ``raster``.

    ``out.pixel(i, j) == raster.pixel(region.x + i, region.y + j)`` and the
    output is ``region.width`` x ``region.height`` whenever the region lies
    inside the raster.

    Raises:
        DegenerateRegionError: The region has zero width or height, or does
            not overlap the raster at all.
    """
    if region.is_empty:
        raise DegenerateRegionError(
            f"Crop region must have a positive size, got {region.width}x{region.height}"
        )

    bounded = region.clamp_to(raster.width, raster.height)
    if bounded.is_empty:
        raise DegenerateRegionError(
            f"Crop region {region.to_dict()} lies outside the "
            f"{raster.width}x{raster.height} raster"
        )

    return Raster(
        raster.pixels[bounded.y:bounded.y + bounded.height, bounded.x:bounded.x + bounded.width]
    )
