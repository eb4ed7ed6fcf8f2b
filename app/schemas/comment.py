"""Comment Pydantic schemas."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel

from app.schemas.user import UserBrief


class CommentCreate(BaseModel):
    comment: Optional[Any] = None


class CommentOut(BaseModel):
    id: int
    idea_id: int
    user_id: int
    comment: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user: UserBrief
