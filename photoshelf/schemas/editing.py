"""Request schema for server-side edit previews."""

from typing import Literal, Optional

from pydantic import Field

from photoshelf.editing import AdjustmentVector, CropRegion, EditOrder, EditRequest
from photoshelf.schemas.common import CamelModel


class AdjustmentParams(CamelModel):
    """Percentages around 100; out-of-range values are not rejected."""

    brightness: float = 100
    contrast: float = 100
    saturation: float = 100


class RegionParams(CamelModel):
    x: int = 0
    y: int = 0
    width: int = Field(..., ge=0)
    height: int = Field(..., ge=0)


class EditImageRequest(CamelModel):
    adjustments: Optional[AdjustmentParams] = None
    crop: Optional[RegionParams] = None
    order: EditOrder = EditOrder.ADJUST_THEN_CROP
    format: Literal["png", "jpeg", "webp"] = "png"

    def to_edit_request(self) -> EditRequest:
        return EditRequest(
            adjustments=(
                AdjustmentVector(**self.adjustments.model_dump())
                if self.adjustments else None
            ),
            region=CropRegion(**self.crop.model_dump()) if self.crop else None,
            order=self.order,
        )
