"""
Tests for region extraction.
"""

import numpy as np
import pytest

from photoshelf.editing import CropRegion, DegenerateRegionError, Raster, crop


@pytest.fixture
def gradient_raster() -> Raster:
    """4x4 raster where pixel (x, y) is (10x, 10y, x + y, 255)."""
    arr = np.zeros((4, 4, 4), dtype=np.uint8)
    for y in range(4):
        for x in range(4):
            arr[y, x] = [10 * x, 10 * y, x + y, 255]
    return Raster(arr)


class TestCropRegion:

    def test_from_corners_normalizes_any_order(self):
        expected = CropRegion(10, 5, 40, 5)
        assert CropRegion.from_corners(10, 10, 50, 5) == expected
        assert CropRegion.from_corners(50, 5, 10, 10) == expected

    def test_clamp_truncates_overhang(self):
        assert CropRegion(2, 3, 10, 10).clamp_to(4, 4) == CropRegion(2, 3, 2, 1)

    def test_clamp_handles_negative_origin(self):
        assert CropRegion(-2, -1, 4, 3).clamp_to(10, 10) == CropRegion(0, 0, 2, 2)

    def test_clamp_outside_is_empty(self):
        assert CropRegion(20, 20, 5, 5).clamp_to(4, 4).is_empty

    def test_to_dict(self):
        assert CropRegion(1, 2, 3, 4).to_dict() == {"x": 1, "y": 2, "width": 3, "height": 4}


class TestCrop:

    def test_full_extent_is_identity(self, gradient_raster):
        assert crop(gradient_raster, CropRegion(0, 0, 4, 4)) == gradient_raster

    @pytest.mark.parametrize("region", [
        CropRegion(0, 0, 1, 1),
        CropRegion(1, 2, 3, 2),
        CropRegion(0, 1, 4, 3),
        CropRegion(3, 0, 1, 4),
    ])
    def test_output_dimensions_match_region(self, gradient_raster, region):
        out = crop(gradient_raster, region)
        assert out.size == (region.width, region.height)

    def test_pixels_are_offset_by_region_origin(self, gradient_raster):
        region = CropRegion(1, 2, 3, 2)
        out = crop(gradient_raster, region)

        for j in range(region.height):
            for i in range(region.width):
                assert out.pixel(i, j) == gradient_raster.pixel(region.x + i, region.y + j)

    def test_known_pixel_lands_at_origin(self):
        arr = np.zeros((4, 4, 4), dtype=np.uint8)
        arr[2, 2] = [10, 20, 30, 255]
        out = crop(Raster(arr), CropRegion(2, 2, 2, 2))

        assert out.size == (2, 2)
        assert out.pixel(0, 0) == (10, 20, 30, 255)

    def test_partial_overlap_is_truncated(self, gradient_raster):
        out = crop(gradient_raster, CropRegion(2, 2, 5, 5))
        assert out.size == (2, 2)
        assert out.pixel(1, 1) == gradient_raster.pixel(3, 3)

    @pytest.mark.parametrize("region", [
        CropRegion(0, 0, 0, 2),
        CropRegion(1, 1, 2, 0),
        CropRegion(0, 0, 0, 0),
    ])
    def test_zero_size_region_is_rejected(self, gradient_raster, region):
        with pytest.raises(DegenerateRegionError):
            crop(gradient_raster, region)

    def test_region_outside_raster_is_rejected(self, gradient_raster):
        with pytest.raises(DegenerateRegionError):
            crop(gradient_raster, CropRegion(4, 0, 2, 2))

    def test_output_does_not_share_memory(self, gradient_raster):
        out = crop(gradient_raster, CropRegion(0, 0, 2, 2))
        assert not np.shares_memory(out.pixels, gradient_raster.pixels)
