"""Admin product image upload and removal."""

from typing import Optional

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.common.errors import RequestValidationFailed
from libs.common.logging import get_logger
from libs.common.rate_limit import UPLOAD_LIMIT, limiter
from services.bakery_service.schemas import ImageUploadResponse, SuccessResponse
from services.bakery_service.storage import (
    ALLOWED_IMAGE_TYPES,
    MAX_IMAGE_BYTES,
    ProductImageStorage,
    generate_image_name,
    get_image_storage,
)

router = APIRouter(prefix="/upload", tags=["uploads"])
logger = get_logger(__name__)


@router.post("/image", response_model=ImageUploadResponse)
@limiter.limit(UPLOAD_LIMIT)
async def upload_image(
    request: Request,
    image: Optional[UploadFile] = File(None),
    current_user: AuthUser = Depends(require_admin),
    storage: ProductImageStorage = Depends(get_image_storage),
):
    """Validate type and size, then store under a generated name."""
    if image is None:
        raise RequestValidationFailed("No image file provided")
    if image.content_type not in ALLOWED_IMAGE_TYPES:
        raise RequestValidationFailed(
            "Invalid file type. Please upload JPEG, PNG, or WebP images."
        )

    data = await image.read()
    if len(data) > MAX_IMAGE_BYTES:
        raise RequestValidationFailed(
            "File too large. Please upload images smaller than 5MB."
        )

    file_name = generate_image_name(image.filename)
    image_url = await storage.upload(file_name, data, image.content_type)
    logger.info("Image %s uploaded by %s (%d bytes)", file_name, current_user.user_id, len(data))
    return ImageUploadResponse(imageUrl=image_url, fileName=file_name)


@router.delete("/image", response_model=SuccessResponse)
@limiter.limit(UPLOAD_LIMIT)
async def delete_image(
    request: Request,
    file_name: Optional[str] = Query(None, alias="fileName", max_length=100),
    current_user: AuthUser = Depends(require_admin),
    storage: ProductImageStorage = Depends(get_image_storage),
):
    if not file_name:
        raise RequestValidationFailed("No file name provided")
    await storage.delete(file_name)
    return SuccessResponse()
