"""Product menu router: public reads and admin catalog management."""

import uuid

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.common.errors import NotFound
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.bakery_service.repositories import ProductRepository
from services.bakery_service.schemas import (
    ProductCreate,
    ProductEnvelope,
    ProductListEnvelope,
    ProductUpdate,
    SuccessResponse,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/products", tags=["products"])
logger = get_logger(__name__)

# Columns that cannot be cleared by sending null
_REQUIRED_FIELDS = frozenset({"name", "price", "cost", "category", "available"})


async def _get_product_or_404(repo: ProductRepository, product_id: uuid.UUID):
    product = await repo.get(product_id)
    if product is None:
        raise NotFound("Product not found")
    return product


# ============================================================================
# MENU (public)
# ============================================================================


@router.get("", response_model=ProductListEnvelope)
async def list_products(
    available_only: bool = Query(False),
    db: AsyncSession = Depends(get_async_db),
):
    """Menu ordered by category, then name."""
    products = await ProductRepository(db).list_menu(available_only=available_only)
    return {"products": products}


@router.get("/{product_id}", response_model=ProductEnvelope)
async def get_product(
    product_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_db),
):
    product = await _get_product_or_404(ProductRepository(db), product_id)
    return {"product": product}


# ============================================================================
# ADMIN
# ============================================================================


@router.post("", response_model=ProductEnvelope, status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: ProductCreate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    product = await ProductRepository(db).create(payload)
    logger.info("Product %s created by %s", product.id, current_user.user_id)
    return {"product": product}


@router.patch("/{product_id}", response_model=ProductEnvelope)
async def update_product(
    product_id: uuid.UUID,
    payload: ProductUpdate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Partial update: only fields present in the body are written."""
    repo = ProductRepository(db)
    product = await _get_product_or_404(repo, product_id)

    changes = payload.model_dump(exclude_unset=True)
    changes = {
        field: value
        for field, value in changes.items()
        if value is not None or field not in _REQUIRED_FIELDS
    }
    product = await repo.update(product, changes)
    return {"product": product}


@router.delete("/{product_id}", response_model=SuccessResponse)
async def delete_product(
    product_id: uuid.UUID,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    repo = ProductRepository(db)
    product = await _get_product_or_404(repo, product_id)
    await repo.delete(product)
    logger.info("Product %s deleted by %s", product_id, current_user.user_id)
    return {"success": True}
