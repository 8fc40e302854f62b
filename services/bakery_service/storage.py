"""Product image storage on Supabase Storage."""

import secrets
import string
import time
from typing import Optional

from libs.common.config import get_settings
from libs.common.errors import StorageError
from libs.common.logging import get_logger
from starlette.concurrency import run_in_threadpool
from supabase import Client, create_client

logger = get_logger(__name__)

ALLOWED_IMAGE_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png", "image/webp"})
MAX_IMAGE_BYTES = 5 * 1024 * 1024

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


def generate_image_name(original_filename: Optional[str]) -> str:
    """``product_<ms timestamp>_<random>.<ext>`` keeping the upload's extension."""
    extension = (original_filename or "").rsplit(".", 1)[-1].lower() or "jpg"
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(13))
    return f"product_{int(time.time() * 1000)}_{suffix}.{extension}"


class ProductImageStorage:
    """Uploads and removes product images in a public bucket."""

    def __init__(self, client: Optional[Client] = None, bucket: Optional[str] = None):
        settings = get_settings()
        self._client = client
        self.bucket = bucket or settings.SUPABASE_STORAGE_BUCKET

    @property
    def client(self) -> Client:
        if self._client is None:
            settings = get_settings()
            self._client = create_client(
                str(settings.SUPABASE_URL), settings.SUPABASE_SERVICE_ROLE_KEY
            )
        return self._client

    def _upload_sync(self, file_name: str, data: bytes, content_type: str) -> str:
        bucket = self.client.storage.from_(self.bucket)
        bucket.upload(
            path=file_name,
            file=data,
            file_options={"content-type": content_type, "upsert": "false"},
        )
        return bucket.get_public_url(file_name)

    async def upload(self, file_name: str, data: bytes, content_type: str) -> str:
        """Store the image and return its public URL."""
        try:
            return await run_in_threadpool(
                self._upload_sync, file_name, data, content_type
            )
        except Exception as exc:
            logger.error("Storage upload error for %s: %s", file_name, exc)
            raise StorageError("Failed to upload image") from exc

    async def delete(self, file_name: str) -> None:
        try:
            await run_in_threadpool(
                self.client.storage.from_(self.bucket).remove, [file_name]
            )
        except Exception as exc:
            logger.error("Storage delete error for %s: %s", file_name, exc)
            raise StorageError("Failed to delete image") from exc


def get_image_storage() -> ProductImageStorage:
    """FastAPI dependency; overridden in tests."""
    return ProductImageStorage()
