"""
Tests for composing adjustment and crop.
"""

import numpy as np
import pytest

from photoshelf.editing import (
    AdjustmentVector,
    CropRegion,
    DegenerateRegionError,
    EditOrder,
    EditRequest,
    Raster,
    adjust,
    apply_edits,
    crop,
)


@pytest.fixture
def raster() -> Raster:
    rng = np.random.default_rng(99)
    return Raster(rng.integers(0, 256, size=(12, 16, 4), dtype=np.uint8))


def test_empty_request_returns_source(raster):
    assert apply_edits(raster, EditRequest()) is raster


def test_identity_adjustment_is_skipped(raster):
    request = EditRequest(adjustments=AdjustmentVector())
    assert apply_edits(raster, request) is raster


def test_adjust_only(raster):
    vector = AdjustmentVector(120, 80, 60)
    assert apply_edits(raster, EditRequest(adjustments=vector)) == adjust(raster, vector)


def test_crop_only(raster):
    region = CropRegion(2, 3, 5, 4)
    out = apply_edits(raster, EditRequest(region=region))
    assert out == crop(raster, region)
    assert out.size == (5, 4)


@pytest.mark.parametrize("order", list(EditOrder))
def test_both_orders_give_same_pixels(raster, order):
    vector = AdjustmentVector(140, 70, 30)
    region = CropRegion(4, 1, 6, 8)

    out = apply_edits(raster, EditRequest(adjustments=vector, region=region, order=order))
    assert out == crop(adjust(raster, vector), region)


def test_degenerate_region_raises_even_with_adjustments(raster):
    request = EditRequest(
        adjustments=AdjustmentVector(brightness=50),
        region=CropRegion(0, 0, 0, 5),
        order=EditOrder.CROP_THEN_ADJUST,
    )
    with pytest.raises(DegenerateRegionError):
        apply_edits(raster, request)


def test_order_values():
    assert EditOrder("adjust-then-crop") is EditOrder.ADJUST_THEN_CROP
    assert EditOrder("crop-then-adjust") is EditOrder.CROP_THEN_ADJUST
