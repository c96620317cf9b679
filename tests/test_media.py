"""
Tests for the media delegate wrapper

Staged files must be released on every exit path, and delegate failures must
surface as UploadError.
"""

from unittest.mock import patch

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile

from core import media
from core.exceptions import UploadError


class TestCategory:
    @pytest.mark.parametrize(
        "content_type, expected",
        [
            ("image/png", "image"),
            ("image/jpeg", "image"),
            ("video/mp4", "video"),
            ("application/octet-stream", "video"),
            (None, "video"),
        ],
    )
    def test_category_by_mime_prefix(self, content_type, expected):
        assert media.category_for(content_type) == expected


class TestStagedUpload:
    def test_file_exists_inside_block_and_is_removed_after(self, upload_dir, image_file):
        with media.staged_upload(image_file) as path:
            assert path.exists()
            assert path.parent == upload_dir
            assert path.read_bytes().startswith(b"\x89PNG")

        assert not path.exists()

    def test_file_is_removed_when_block_raises(self, upload_dir, image_file):
        with pytest.raises(RuntimeError):
            with media.staged_upload(image_file) as path:
                raise RuntimeError("boom")

        assert not path.exists()
        assert list(upload_dir.iterdir()) == []

    def test_staged_name_keeps_original_basename(self, upload_dir):
        upload = SimpleUploadedFile("../../etc/evil.png", b"data", content_type="image/png")
        with media.staged_upload(upload) as path:
            assert path.parent == upload_dir
            assert path.name.endswith("evil.png")


class TestUpload:
    def test_upload_returns_asset(self, tmp_path):
        local = tmp_path / "a.png"
        local.write_bytes(b"x")
        result = {"public_id": "SpeakWave_Post_Images/abc", "secure_url": "https://cdn/abc.png"}

        with patch("cloudinary.uploader.upload", return_value=result) as upload:
            asset = media.upload(local, "image", media.POST_IMAGES_FOLDER)

        upload.assert_called_once_with(str(local), folder=media.POST_IMAGES_FOLDER, resource_type="image")
        assert asset == media.MediaAsset("SpeakWave_Post_Images/abc", "https://cdn/abc.png", "image")

    def test_upload_failure_raises_upload_error(self, tmp_path):
        local = tmp_path / "a.png"
        local.write_bytes(b"x")

        with patch("cloudinary.uploader.upload", side_effect=Exception("timeout")):
            with pytest.raises(UploadError) as exc_info:
                media.upload(local, "image", media.POST_IMAGES_FOLDER, "Error while uploading thumbnail")

        assert str(exc_info.value.detail) == "Error while uploading thumbnail"
        assert exc_info.value.status_code == 500

    def test_store_upload_routes_videos_to_video_folder(self, mock_cloudinary, video_file):
        asset = media.store_upload(video_file, media.POST_IMAGES_FOLDER, media.POST_VIDEOS_FOLDER)

        kwargs = mock_cloudinary.upload.call_args.kwargs
        assert kwargs["folder"] == media.POST_VIDEOS_FOLDER
        assert kwargs["resource_type"] == "video"
        assert asset.resource_type == "video"

    def test_store_upload_cleans_up_on_failure(self, failing_cloudinary, upload_dir, image_file):
        with pytest.raises(UploadError):
            media.store_upload(image_file, media.POST_IMAGES_FOLDER)

        assert list(upload_dir.iterdir()) == []


class TestDestroy:
    def test_destroy_without_public_id_is_noop(self):
        with patch("cloudinary.uploader.destroy") as destroy:
            media.destroy("")
        destroy.assert_not_called()

    def test_destroy_passes_resource_type(self):
        with patch("cloudinary.uploader.destroy", return_value={"result": "ok"}) as destroy:
            media.destroy("SpeakWave_Posts_Videos/v1", "video")
        destroy.assert_called_once_with("SpeakWave_Posts_Videos/v1", resource_type="video", invalidate=True)

    def test_destroy_failure_raises_upload_error(self):
        with patch("cloudinary.uploader.destroy", side_effect=Exception("403")):
            with pytest.raises(UploadError):
                media.destroy("some/id")

    def test_discard_logs_instead_of_raising(self, caplog):
        with patch("cloudinary.uploader.destroy", side_effect=Exception("403")):
            media.discard("some/id")
        assert "left orphaned" in caplog.text
