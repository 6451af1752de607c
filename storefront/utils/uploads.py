"""Product image uploads — validation, local storage and public URLs"""
import os
import random
import time
from pathlib import Path
from typing import List, Optional, Sequence

from fastapi import UploadFile

from storefront.config import settings
from storefront.errors import ValidationError
from storefront.utils.logger import logger

PRODUCT_IMAGE_DIR = "products"
_FIELD_NAME = "images"


def get_upload_dir() -> Path:
    """Directory product images are written to (created on demand)"""
    path = Path(settings.UPLOAD_DIR) / PRODUCT_IMAGE_DIR
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_image_url(filename: str, storage_type: Optional[str] = None) -> str:
    """Public URL of a stored image for the configured storage backend"""
    storage_type = storage_type or settings.STORAGE_TYPE

    if storage_type == "cloudinary":
        return f"https://res.cloudinary.com/{settings.CLOUDINARY_CLOUD_NAME}/image/upload/v1/{filename}"
    if storage_type == "s3":
        return f"https://{settings.AWS_S3_BUCKET}.s3.amazonaws.com/{filename}"
    return f"/uploads/{PRODUCT_IMAGE_DIR}/{filename}"


def generate_filename(original_name: str) -> str:
    """``images-<epoch ms>-<random>.<ext>`` keeping the original extension"""
    suffix = f"{int(time.time() * 1000)}-{random.randint(0, 999_999_999)}"
    extension = os.path.splitext(original_name or "")[1].lower()
    return f"{_FIELD_NAME}-{suffix}{extension}"


def _validate(files: Sequence[UploadFile]) -> None:
    if len(files) > settings.UPLOAD_MAX_FILES:
        raise ValidationError(f"At most {settings.UPLOAD_MAX_FILES} images can be uploaded at once")

    for upload in files:
        if not (upload.content_type or "").startswith("image/"):
            raise ValidationError("Only image files are allowed!")


def save_images(files: Optional[Sequence[UploadFile]]) -> List[str]:
    """Validate and store uploaded images, returning their URLs in upload order.

    Nothing is written unless every file passes validation.
    """
    files = [f for f in (files or []) if f is not None and f.filename]
    if not files:
        return []

    _validate(files)

    contents = []
    for upload in files:
        data = upload.file.read(settings.UPLOAD_MAX_FILE_SIZE + 1)
        if len(data) > settings.UPLOAD_MAX_FILE_SIZE:
            raise ValidationError(f"Image '{upload.filename}' exceeds the {settings.UPLOAD_MAX_FILE_SIZE // (1024 * 1024)}MB size limit")
        contents.append((upload.filename, data))

    upload_dir = get_upload_dir()
    urls = []
    for original_name, data in contents:
        filename = generate_filename(original_name)
        (upload_dir / filename).write_bytes(data)
        urls.append(get_image_url(filename))

    logger.info(f"Stored {len(urls)} product image(s)", extra={"action": "upload_images"})
    return urls
