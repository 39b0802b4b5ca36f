"""Photo uploads backed by Cloudinary."""

import logging

import cloudinary
import cloudinary.uploader
from fastapi import UploadFile

from .core import get_settings
from .errors import InvalidArgument, Unexpected

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = ("image/jpeg", "image/png", "image/gif", "image/webp")
MAX_PHOTO_BYTES = 5 * 1024 * 1024

CONTACT_PHOTOS = "contact_photos"
USER_PHOTOS = "user_photos"


def validate_photo(content_type: str | None, size: int) -> None:
    """
    Reject uploads that are not images or are too large.

    Raises:
        InvalidArgument: If the type or size is not accepted.
    """
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise InvalidArgument("Invalid file type. Only images are allowed.")
    if size == 0:
        raise InvalidArgument("No file uploaded")
    if size > MAX_PHOTO_BYTES:
        raise InvalidArgument("File size too large. Maximum size is 5MB.")


def upload_photo(file: UploadFile, folder: str) -> str:
    """
    Upload an image and return its public URL.

    Args:
        file (UploadFile): Uploaded image file.
        folder (str): Cloudinary folder.

    Raises:
        InvalidArgument: If the file is rejected by :func:`validate_photo`.
        Unexpected: If Cloudinary is not configured or the upload fails.

    Returns:
        str: Secure URL of the stored image.
    """
    content = file.file.read()
    validate_photo(file.content_type, len(content))

    settings = get_settings()
    if not settings.CLOUDINARY_URL:
        raise Unexpected("Photo storage is not configured")
    cloudinary.config(cloudinary_url=settings.CLOUDINARY_URL)

    try:
        upload_result = cloudinary.uploader.upload(content, folder=folder)
    except Exception as exc:
        logger.exception("Photo upload to %s failed", folder)
        raise Unexpected("Failed to upload photo") from exc

    url = upload_result.get("secure_url")
    if not url:
        logger.error("Cloudinary response without secure_url: %s", upload_result)
        raise Unexpected("Failed to upload photo")
    return url
