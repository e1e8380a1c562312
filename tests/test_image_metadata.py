"""
Tests for dimension reading, EXIF extraction and thumbnail generation.
"""

from fractions import Fraction

import pytest
from PIL import Image
from PIL.TiffImagePlugin import IFDRational

from photoshelf.services.image_metadata import (
    _dms_to_decimal,
    _parse_exif_datetime,
    extract_exif,
    generate_thumbnail,
    read_dimensions,
)


@pytest.fixture
def exif_jpeg_path(tmp_path, jpeg_with_exif):
    path = tmp_path / "camera.jpg"
    path.write_bytes(jpeg_with_exif)
    return path


@pytest.fixture
def plain_png_path(tmp_path, make_image):
    path = tmp_path / "plain.png"
    path.write_bytes(make_image(size=(120, 80)))
    return path


# =============================================================================
# EXIF
# =============================================================================

class TestExifExtraction:

    def test_picks_camera_fields(self, exif_jpeg_path):
        exif = extract_exif(exif_jpeg_path)

        assert exif["Make"] == "TestCamera"
        assert exif["Model"] == "TestModel"
        assert exif["Orientation"] == 1
        assert exif["DateTimeOriginal"] == "2024-01-15T14:30:00"

    def test_gps_converted_to_signed_decimal(self, exif_jpeg_path):
        exif = extract_exif(exif_jpeg_path)

        assert exif["GPSLatitude"] == pytest.approx(40.4461111, abs=1e-6)
        assert exif["GPSLongitude"] == pytest.approx(-79.9822222, abs=1e-6)

    def test_only_picked_keys_returned(self, exif_jpeg_path):
        allowed = {"DateTimeOriginal", "GPSLatitude", "GPSLongitude", "Make", "Model", "Orientation"}
        assert set(extract_exif(exif_jpeg_path)) <= allowed

    def test_image_without_exif_returns_none(self, plain_png_path):
        assert extract_exif(plain_png_path) is None


class TestExifHelpers:

    def test_dms_north_east_positive(self):
        assert _dms_to_decimal((Fraction(10), Fraction(30), Fraction(0)), "N") == 10.5

    @pytest.mark.parametrize("ref", ["S", "W", "s "])
    def test_dms_south_west_negative(self, ref):
        assert _dms_to_decimal((10.0, 30.0, 0.0), ref) == -10.5

    @pytest.mark.parametrize("value", [None, (1.0, 2.0), "garbage"])
    def test_dms_malformed_returns_none(self, value):
        assert _dms_to_decimal(value, "N") is None

    def test_dms_zero_over_zero_returns_none(self):
        # cameras without a GPS fix write 0/0 rationals
        no_fix = (IFDRational(0, 0), IFDRational(0, 0), IFDRational(0, 0))
        assert _dms_to_decimal(no_fix, "N") is None

    def test_dms_partial_nan_returns_none(self):
        assert _dms_to_decimal((IFDRational(40, 1), IFDRational(0, 0), 0.0), "S") is None

    def test_datetime_to_iso(self):
        assert _parse_exif_datetime("2023:07:04 09:05:01") == "2023-07-04T09:05:01"

    @pytest.mark.parametrize("value", [None, 123, "2023-07-04", "0000:00:00 00:00:00"])
    def test_bad_datetime_returns_none(self, value):
        assert _parse_exif_datetime(value) is None


# =============================================================================
# DIMENSIONS AND THUMBNAILS
# =============================================================================

class TestDimensions:

    def test_reads_width_and_height(self, plain_png_path):
        assert read_dimensions(plain_png_path) == (120, 80)

    def test_unreadable_file_raises(self, tmp_path):
        path = tmp_path / "broken.png"
        path.write_bytes(b"definitely not a png")
        with pytest.raises(OSError):
            read_dimensions(path)


class TestThumbnail:

    def test_fits_bounding_box_and_keeps_aspect(self, exif_jpeg_path, tmp_path):
        destination = tmp_path / "thumbs" / "camera.jpg"
        size = generate_thumbnail(exif_jpeg_path, destination, max_size=300)

        assert size == (300, 225)
        with Image.open(destination) as thumb:
            assert thumb.size == (300, 225)
            assert thumb.format == "JPEG"

    def test_small_image_not_upscaled(self, plain_png_path, tmp_path):
        destination = tmp_path / "small.png"
        assert generate_thumbnail(plain_png_path, destination, max_size=300) == (120, 80)

    def test_rgba_png_keeps_format(self, tmp_path):
        source = tmp_path / "alpha.png"
        Image.new("RGBA", (600, 200), (10, 20, 30, 40)).save(source)
        destination = tmp_path / "alpha_thumb.png"

        assert generate_thumbnail(source, destination, max_size=150) == (150, 50)
        with Image.open(destination) as thumb:
            assert thumb.format == "PNG"
            assert thumb.mode == "RGBA"
