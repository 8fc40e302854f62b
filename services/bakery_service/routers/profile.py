"""Profile router: the caller's own customer profile."""

from fastapi import APIRouter, Depends
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.errors import NotFound
from libs.db.session import get_async_db
from services.bakery_service.repositories import ProfileRepository
from services.bakery_service.schemas import ProfileEnvelope, ProfileUpdate
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=ProfileEnvelope)
async def get_my_profile(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    profile = await ProfileRepository(db).get(current_user.user_id)
    if profile is None:
        raise NotFound("Profile not found")
    return {"profile": profile}


@router.put("", response_model=ProfileEnvelope)
async def update_my_profile(
    payload: ProfileUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Update contact details. Role and email are never writable here."""
    repo = ProfileRepository(db)
    profile = await repo.get(current_user.user_id)
    if profile is None:
        raise NotFound("Profile not found")

    profile = await repo.update(profile, payload.model_dump(exclude_unset=True))
    return {"profile": profile}
