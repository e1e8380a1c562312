"""
Composition of adjustment and crop.

The two transforms stay independent; an edit request only decides which
of them run and in which order.
"""

import enum
from dataclasses import dataclass
from typing import Optional

from photoshelf.editing.adjust import AdjustmentVector, adjust
from photoshelf.editing.crop import CropRegion, crop
from photoshelf.editing.raster import Raster


class EditOrder(str, enum.Enum):
    ADJUST_THEN_CROP = "adjust-then-crop"
    CROP_THEN_ADJUST = "crop-then-adjust"


@dataclass(frozen=True)
class EditRequest:
    adjustments: Optional[AdjustmentVector] = None
    region: Optional[CropRegion] = None
    order: EditOrder = EditOrder.ADJUST_THEN_CROP


def apply_edits(raster: Raster, request: EditRequest) -> Raster:
    """
    Run the requested transforms in sequence.

    An empty request returns the source raster unchanged. Cropping first is
    cheaper (fewer pixels to adjust) and gives the same pixels, since the
    adjustment is per-pixel.

    Raises:
        DegenerateRegionError: The crop region has no area.
    """
    steps = []
    if request.adjustments is not None and not request.adjustments.is_identity:
        steps.append(lambda r: adjust(r, request.adjustments))
    if request.region is not None:
        steps.append(lambda r: crop(r, request.region))

    if request.order is EditOrder.CROP_THEN_ADJUST:
        steps.reverse()

    result = raster
    for step in steps:
        result = step(result)
    return result
