"""Tests for photo_uploader models."""
import pytest

from photo_uploader.errors import ValidationError
from photo_uploader.models import SourceFile, TaskSnapshot, UploadConfig, UploadStatus
from photo_uploader.orchestrator.models import BatchUploadResult


class TestUploadStatus:
    def test_terminal_states(self):
        assert UploadStatus.COMPLETED.is_terminal is True
        assert UploadStatus.ERROR.is_terminal is True
        assert UploadStatus.PENDING.is_terminal is False
        assert UploadStatus.UPLOADING.is_terminal is False


class TestSourceFile:
    def test_size_and_extension(self):
        source = SourceFile(name="Holiday.JPG", data=b"12345", content_type="image/jpeg")
        assert source.size == 5
        assert source.extension == ".jpg"

    def test_no_extension(self):
        assert SourceFile(name="scan", data=b"").extension == ""

    def test_from_path_guesses_type(self, tmp_path):
        path = tmp_path / "photo.png"
        path.write_bytes(b"\x89PNG")
        source = SourceFile.from_path(path)
        assert source.name == "photo.png"
        assert source.content_type == "image/png"
        assert source.data == b"\x89PNG"

    def test_from_path_unknown_type_is_empty(self, tmp_path):
        path = tmp_path / "blob"
        path.write_bytes(b"x")
        assert SourceFile.from_path(path).content_type == ""

    def test_immutable(self):
        source = SourceFile(name="a.png", data=b"")
        with pytest.raises(Exception):
            source.name = "b.png"


class TestUploadConfig:
    def test_collection_for(self):
        assert UploadConfig().collection_for("u1") == "users/u1/images"

    def test_defaults_include_dng(self):
        config = UploadConfig()
        assert ".dng" in config.allowed_extensions
        assert "image/x-adobe-dng" in config.allowed_mime_types


class TestTaskSnapshot:
    def test_is_terminal(self):
        snap = TaskSnapshot("t1", "a.png", 1, UploadStatus.ERROR, 0, error_message="boom")
        assert snap.is_terminal is True


class TestBatchUploadResult:
    def test_all_success(self):
        result = BatchUploadResult(total_files=2, uploaded_files=2, failed_files=0, urls=["a", "b"])
        assert result.all_success is True
        assert result.success is True

    def test_rejected_files_break_all_success(self):
        result = BatchUploadResult(
            total_files=1, uploaded_files=1, failed_files=0, rejected_files=["x.txt"]
        )
        assert result.all_success is False


def test_validation_error_message():
    error = ValidationError(["a.txt", "b.pdf"])
    assert error.rejected == ["a.txt", "b.pdf"]
    assert str(error) == "Invalid file format: a.txt, b.pdf. Please upload images only."
