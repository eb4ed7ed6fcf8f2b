"""User and invite Pydantic schemas: redemption, tokens, profile output."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class InviteRedeem(BaseModel):
    """Body of POST /auth/validate-invite."""
    invite_code: Optional[str] = Field(default=None, alias="inviteCode")
    email: Optional[str] = None

    model_config = {"populate_by_name": True}


class AdminBootstrap(BaseModel):
    """Body of POST /init-db."""
    email: Optional[EmailStr] = None


class UserOut(BaseModel):
    """Public user representation returned by the API."""
    id: int
    email: str
    is_admin: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class UserBrief(BaseModel):
    """Author info attached to comments."""
    id: int
    email: str

    model_config = {"from_attributes": True}


class AuthOut(BaseModel):
    token: str
    user: UserOut


class InviteCodeOut(BaseModel):
    id: int
    code: str
    created_by: Optional[int] = None
    used_by: Optional[int] = None
    is_active: bool
    created_at: Optional[datetime] = None
    used_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
