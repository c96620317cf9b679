import logging
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

import cloudinary
import cloudinary.uploader
from django.conf import settings

from .exceptions import UploadError

logger = logging.getLogger(__name__)

POST_IMAGES_FOLDER = 'SpeakWave_Post_Images'
POST_VIDEOS_FOLDER = 'SpeakWave_Posts_Videos'
AVATARS_FOLDER = 'SpeakWave_Avatars'


@dataclass(frozen=True)
class MediaAsset:
    public_id: str
    secure_url: str
    resource_type: str = 'image'


def configure():
    cloudinary.config(secure=True, **settings.CLOUDINARY)


def category_for(content_type):
    """
    Maps a MIME type to the delegate's resource type: images stay images, anything else is video.
    """
    return 'image' if (content_type or '').startswith('image') else 'video'


def asset_reference(public_id, secure_url):
    return {'public_id': public_id or None, 'secure_url': secure_url or None}


@contextmanager
def staged_upload(uploaded_file):
    """
    Writes an incoming file to UPLOAD_TEMP_DIR for the duration of the block.

    The staged copy is removed on every exit path, including delegate failures.
    """
    temp_dir = Path(settings.UPLOAD_TEMP_DIR)
    temp_dir.mkdir(parents=True, exist_ok=True)
    path = temp_dir / f"{uuid.uuid4().hex}_{Path(uploaded_file.name).name}"
    try:
        with open(path, 'wb') as f:
            for chunk in uploaded_file.chunks():
                f.write(chunk)
        yield path
    finally:
        path.unlink(missing_ok=True)


def upload(local_path, category, folder, error_message=None):
    try:
        result = cloudinary.uploader.upload(str(local_path), folder=folder, resource_type=category)
    except Exception as e:
        logger.error(f"Upload of {Path(local_path).name} to {folder} failed: {e}")
        raise UploadError(error_message) from e

    asset = MediaAsset(result['public_id'], result['secure_url'], category)
    logger.info(f"Uploaded {category} asset {asset.public_id}")
    return asset


def destroy(public_id, resource_type='image'):
    if not public_id:
        return
    try:
        result = cloudinary.uploader.destroy(public_id, resource_type=resource_type, invalidate=True)
    except Exception as e:
        logger.error(f"Delete of asset {public_id} failed: {e}")
        raise UploadError('Error while deleting media.') from e

    if result.get('result') != 'ok':
        logger.warning(f"Delete of asset {public_id} returned {result.get('result')}")
    else:
        logger.info(f"Deleted {resource_type} asset {public_id}")


def store_upload(uploaded_file, image_folder, video_folder=None, error_message=None):
    category = category_for(getattr(uploaded_file, 'content_type', ''))
    folder = image_folder if category == 'image' else (video_folder or image_folder)
    with staged_upload(uploaded_file) as path:
        return upload(path, category, folder, error_message)


def discard(public_id, resource_type='image'):
    """
    Best-effort removal of an asset that is no longer referenced by any row.
    """
    try:
        destroy(public_id, resource_type)
    except UploadError:
        logger.warning(f"Asset {public_id} left orphaned on the media host")
