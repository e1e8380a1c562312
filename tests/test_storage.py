"""
Tests for the upload directory manager and the upload processor.
"""

import re

import pytest

from photoshelf.editing import RasterDecodeError
from photoshelf.services.image_processor import ImageProcessor
from photoshelf.services.storage import (
    FileNotFoundStorageError,
    StorageError,
    StorageManager,
)


@pytest.fixture
def storage(tmp_path) -> StorageManager:
    return StorageManager(tmp_path / "uploads")


@pytest.fixture
def processor(storage) -> ImageProcessor:
    return ImageProcessor(storage, thumbnail_size=50)


# =============================================================================
# STORAGE MANAGER
# =============================================================================

class TestStorageManager:

    def test_creates_directories(self, storage):
        assert storage.base_path.is_dir()
        assert storage.thumbnails_path.is_dir()
        assert storage.thumbnails_path.parent == storage.base_path

    def test_unique_filename_keeps_stem_and_extension(self):
        name = StorageManager.unique_filename("holiday photo.JPG")
        assert re.fullmatch(r"holiday_photo-\d+-\d+\.JPG", name)

    def test_unique_filenames_differ(self):
        names = {StorageManager.unique_filename("a.png") for _ in range(50)}
        assert len(names) == 50

    @pytest.mark.parametrize("original", ["../../etc/passwd", "..", "", None])
    def test_unique_filename_is_always_a_plain_name(self, storage, original):
        name = StorageManager.unique_filename(original)
        assert "/" not in name
        assert storage.path_for(name).parent == storage.base_path

    @pytest.mark.parametrize("filename", ["../escape.png", "a/b.png", "..", ""])
    def test_path_for_rejects_traversal(self, storage, filename):
        with pytest.raises(StorageError):
            storage.path_for(filename)

    def test_save_and_read(self, storage):
        storage.save_upload("x.bin", b"payload")
        assert storage.read_bytes("x.bin") == b"payload"

    def test_read_missing_raises(self, storage):
        with pytest.raises(FileNotFoundStorageError):
            storage.read_bytes("missing.png")

    def test_delete_image_files_removes_original_and_thumbnail(self, storage):
        storage.save_upload("pic.png", b"a")
        storage.path_for("pic.png", thumbnail=True).write_bytes(b"b")

        assert storage.delete_image_files("pic.png") == 2
        assert not storage.path_for("pic.png").exists()
        assert not storage.path_for("pic.png", thumbnail=True).exists()

    def test_delete_missing_files_is_not_an_error(self, storage):
        assert storage.delete_image_files("never-stored.png") == 0


# =============================================================================
# UPLOAD PROCESSOR
# =============================================================================

class TestImageProcessor:

    def test_process_upload_collects_metadata(self, processor, jpeg_with_exif):
        result = processor.process_upload("camera.jpg", jpeg_with_exif)

        assert result.filename.endswith(".jpg")
        assert result.size == len(jpeg_with_exif)
        assert (result.width, result.height) == (640, 480)
        assert result.exif_data["Make"] == "TestCamera"
        assert result.has_thumbnail
        assert processor.storage.path_for(result.filename).is_file()
        assert processor.storage.path_for(result.filename, thumbnail=True).is_file()

    def test_unreadable_upload_is_still_stored(self, processor):
        result = processor.process_upload("fake.png", b"not really a png")

        assert processor.storage.path_for(result.filename).is_file()
        assert result.width is None and result.height is None
        assert result.exif_data is None
        assert not result.has_thumbnail

    def test_load_raster_decodes_stored_file(self, processor, make_image):
        result = processor.process_upload("small.png", make_image(size=(7, 3)))
        assert processor.load_raster(result.filename).size == (7, 3)

    def test_load_raster_missing_file(self, processor):
        with pytest.raises(FileNotFoundStorageError):
            processor.load_raster("gone.png")

    def test_load_raster_corrupt_file(self, processor):
        processor.storage.save_upload("corrupt.png", b"garbage")
        with pytest.raises(RasterDecodeError):
            processor.load_raster("corrupt.png")
