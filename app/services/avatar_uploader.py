"""
Doctor avatar upload to Cloudinary
"""

import logging
from typing import BinaryIO

import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError
from fastapi.concurrency import run_in_threadpool

from app import config
from app.utils.error_handler import UpstreamError

logger = logging.getLogger(__name__)

ALLOWED_AVATAR_FORMATS = ("image/png", "image/jpeg", "image/webp")
UPLOAD_FAILED_MESSAGE = "Failed To Upload Doctor Avatar To Cloudinary"


class AvatarUploader:
    """Uploads images and returns the {public_id, url} reference stored on the user"""

    def __init__(self, folder: str = "hospital/doctors"):
        self.folder = folder
        cloudinary.config(
            cloud_name=config.CLOUDINARY_CLOUD_NAME,
            api_key=config.CLOUDINARY_API_KEY,
            api_secret=config.CLOUDINARY_API_SECRET,
            secure=True,
        )

    async def upload(self, file: BinaryIO, filename: str) -> dict:
        try:
            result = await run_in_threadpool(cloudinary.uploader.upload, file, folder=self.folder)
        except CloudinaryError as e:
            logger.error(f"Cloudinary upload of {filename} failed: {e}")
            raise UpstreamError(UPLOAD_FAILED_MESSAGE, e)

        if not result or result.get("error"):
            logger.error(f"Cloudinary error for {filename}: {result.get('error') if result else 'empty response'}")
            raise UpstreamError(UPLOAD_FAILED_MESSAGE)

        return {"public_id": result["public_id"], "url": result["secure_url"]}


def get_avatar_uploader() -> AvatarUploader:
    """FastAPI dependency; tests override it with a fake"""
    return AvatarUploader()
