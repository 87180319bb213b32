"""
Avatar Upload Service

Validates and stores user avatar images on local disk. Files are served
by the static mount at /uploads, so the stored avatar_url is
/uploads/avatars/<file>.

Validation:
- Content-Type header must be an allowed image type
- Size is limited to settings.avatar_max_bytes
- The first bytes must match a JPEG, PNG or GIF signature
"""

import logging
import secrets
from pathlib import Path

from fastapi import UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mybook.config import get_settings
from mybook.exceptions import InvalidUploadError
from mybook.models.user import User

logger = logging.getLogger(__name__)

AVATAR_URL_PREFIX = "/uploads/avatars/"

ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/gif"}

# Magic bytes for image file type validation
IMAGE_SIGNATURES = {
    b"\xff\xd8\xff": "jpg",
    b"\x89PNG\r\n\x1a\n": "png",
    b"GIF87a": "gif",
    b"GIF89a": "gif",
}


def detect_image_type(content: bytes) -> str | None:
    """
    Detect the image type from magic bytes.

    Returns:
        File extension (jpg, png, gif) or None if not recognized
    """
    for signature, extension in IMAGE_SIGNATURES.items():
        if content.startswith(signature):
            return extension
    return None


def _avatar_path(avatar_url: str | None) -> Path | None:
    """Local file behind an avatar URL we issued, if any."""
    if not avatar_url or not avatar_url.startswith(AVATAR_URL_PREFIX):
        return None
    filename = Path(avatar_url[len(AVATAR_URL_PREFIX):]).name
    return get_settings().avatar_dir / filename


def delete_avatar_file(avatar_url: str | None) -> None:
    """Remove a previously stored avatar file; missing files are ignored."""
    path = _avatar_path(avatar_url)
    if path is None:
        return
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Could not delete old avatar {path}: {e}")


def save_avatar(db: Session, user: User, upload: UploadFile) -> str:
    """
    Store an uploaded avatar and point the user at it.

    The previous avatar file is deleted after the new one is committed.
    If the commit fails the new file is deleted instead.

    Returns:
        The new avatar URL

    Raises:
        InvalidUploadError: Wrong content type, too large, or not an image
    """
    settings = get_settings()

    if upload.content_type not in ALLOWED_CONTENT_TYPES:
        raise InvalidUploadError("Only JPEG, PNG and GIF images are allowed")

    max_bytes = settings.avatar_max_bytes
    content = upload.file.read(max_bytes + 1)
    if len(content) > max_bytes:
        raise InvalidUploadError(f"File too large (max {max_bytes // (1024 * 1024)}MB)")

    extension = detect_image_type(content)
    if extension is None:
        raise InvalidUploadError("Invalid image file")

    avatar_dir = settings.avatar_dir
    avatar_dir.mkdir(parents=True, exist_ok=True)

    filename = f"avatar-{secrets.token_hex(8)}.{extension}"
    path = avatar_dir / filename
    path.write_bytes(content)

    user_id = user.id
    old_url = user.avatar_url
    user.avatar_url = f"{AVATAR_URL_PREFIX}{filename}"
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        path.unlink(missing_ok=True)
        logger.error(f"Failed to save avatar for user {user_id}, removed {filename}")
        raise
    db.refresh(user)

    delete_avatar_file(old_url)
    logger.info(f"User {user.id} uploaded avatar {filename}")
    return user.avatar_url
