"""Shared pytest fixtures

Users, posts and authenticated API clients, plus a mocked media host so no
test talks to Cloudinary.
"""

from itertools import count
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from rest_framework.test import APIClient

from posts.models import Post
from users.models import ROLE_ADMIN, User

_sequence = count(1)


# ==================== Media Host ====================


@pytest.fixture(autouse=True)
def upload_dir(settings, tmp_path):
    """Stage incoming files in a per-test directory"""
    path = tmp_path / "uploads"
    settings.UPLOAD_TEMP_DIR = str(path)
    return path


@pytest.fixture
def mock_cloudinary(upload_dir):
    """Patch the Cloudinary uploader; records whether the staged file existed during upload"""
    staged_seen = []

    def fake_upload(path, folder=None, resource_type="image", **kwargs):
        staged_seen.append(Path(path).exists())
        n = next(_sequence)
        return {
            "public_id": f"{folder}/asset_{n}",
            "secure_url": f"https://res.cloudinary.com/demo/{resource_type}/upload/{folder}/asset_{n}",
        }

    with patch("cloudinary.uploader.upload", side_effect=fake_upload) as upload, patch(
        "cloudinary.uploader.destroy", return_value={"result": "ok"}
    ) as destroy:
        upload.staged_seen = staged_seen
        yield SimpleNamespace(upload=upload, destroy=destroy)


@pytest.fixture
def failing_cloudinary(upload_dir):
    """Media host that rejects every upload"""
    with patch("cloudinary.uploader.upload", side_effect=Exception("cloudinary down")) as upload, patch(
        "cloudinary.uploader.destroy", return_value={"result": "ok"}
    ) as destroy:
        yield SimpleNamespace(upload=upload, destroy=destroy)


@pytest.fixture
def image_file():
    return SimpleUploadedFile("photo.png", b"\x89PNG\r\n\x1a\nfake-image", content_type="image/png")


@pytest.fixture
def video_file():
    return SimpleUploadedFile("clip.mp4", b"\x00\x00\x00\x18ftypmp42", content_type="video/mp4")


# ==================== Users & Clients ====================


@pytest.fixture
def make_user(db):
    def _make_user(username=None, role=None, **extra):
        username = username or f"user{next(_sequence)}"
        if role:
            extra["role"] = role
        return User.objects.create_user(
            email=f"{username}@speakwave.test", username=username, password="s3cret-pass", **extra
        )

    return _make_user


@pytest.fixture
def user(make_user):
    return make_user("alice")


@pytest.fixture
def admin_user(make_user):
    return make_user("root", role=ROLE_ADMIN)


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_for():
    """Build an APIClient authenticated as the given user"""

    def _client_for(user):
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    return _client_for


@pytest.fixture
def auth_client(client_for, user):
    return client_for(user)


# ==================== Posts ====================


@pytest.fixture
def make_post(db):
    def _make_post(author, content="Hello SpeakWave", **extra):
        return Post.objects.create(posted_by=author, content=content, **extra)

    return _make_post
