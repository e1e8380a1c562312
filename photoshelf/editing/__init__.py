"""
Pixel adjustment and crop engine.

Pure functions over an explicit ``Raster`` value: no I/O, no shared
state, nothing retained between calls.
"""

from photoshelf.editing.adjust import AdjustmentVector, adjust, contrast_factor
from photoshelf.editing.crop import CropRegion, crop
from photoshelf.editing.errors import DegenerateRegionError, EditingError, RasterDecodeError
from photoshelf.editing.pipeline import EditOrder, EditRequest, apply_edits
from photoshelf.editing.raster import Raster, decode_raster, encode_raster
from photoshelf.editing.selection import RegionSelection, SelectionState

__all__ = [
    "AdjustmentVector",
    "CropRegion",
    "DegenerateRegionError",
    "EditOrder",
    "EditRequest",
    "EditingError",
    "Raster",
    "RasterDecodeError",
    "RegionSelection",
    "SelectionState",
    "adjust",
    "apply_edits",
    "contrast_factor",
    "crop",
    "decode_raster",
    "encode_raster",
]
