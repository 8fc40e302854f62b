from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import ValidationError
from sqlalchemy import Uuid, bindparam, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.common.errors import Forbidden, PersistenceError, Unauthorized
from libs.common.logging import get_logger
from libs.db.session import get_async_db

settings = get_settings()
logger = get_logger(__name__)
security = HTTPBearer(auto_error=False)

ADMIN_ROLE = "admin"

_role_query = text("SELECT role FROM profiles WHERE id = :user_id").bindparams(
    bindparam("user_id", type_=Uuid)
)


def decode_access_token(token: str) -> AuthUser:
    """Validate a Supabase access token (HS256) and return its user."""
    try:
        payload = jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=["HS256"],
            # Supabase tokens carry aud="authenticated"; anon keys don't
            options={"verify_aud": False},
        )
        return AuthUser(**payload)
    except (JWTError, ValidationError) as exc:
        raise Unauthorized() from exc


async def get_current_user(
    token: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> AuthUser:
    """
    Resolve the caller from the bearer token; 401 when absent or invalid.
    """
    if token is None or not token.credentials:
        raise Unauthorized()
    return decode_access_token(token.credentials)


async def get_user_role(db: AsyncSession, user: AuthUser) -> Optional[str]:
    """Read the caller's stored role with service credentials."""
    try:
        result = await db.execute(_role_query, {"user_id": user.user_id})
    except SQLAlchemyError as exc:
        logger.error("Error fetching role for %s: %s", user.user_id, exc)
        raise PersistenceError("Failed to verify user permissions") from exc
    return result.scalar_one_or_none()


async def require_admin(
    current_user: Annotated[AuthUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_async_db)],
) -> AuthUser:
    """
    Ensure the caller's profile has the admin role.

    401 without a valid session, 403 for non-admins, 500 if the role
    lookup itself fails.
    """
    role = await get_user_role(db, current_user)
    if role != ADMIN_ROLE:
        raise Forbidden("Admin access required")
    return current_user
