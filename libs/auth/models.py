import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class AuthUser(BaseModel):
    """
    Represents an authenticated user from a Supabase access token.
    """

    model_config = ConfigDict(populate_by_name=True)

    user_id: uuid.UUID = Field(..., alias="sub")
    email: Optional[EmailStr] = None
    # Supabase sets "authenticated"; the bakery role lives in profiles.role
    role: str = "authenticated"
