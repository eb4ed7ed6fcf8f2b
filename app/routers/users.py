"""Users router – current user profile."""

from fastapi import APIRouter, Depends

from app.models.user import User
from app.routers.auth import get_current_user
from app.schemas.user import UserOut

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me")
async def read_me(current_user: User = Depends(get_current_user)):
    """Return the authenticated user's profile."""
    return {"success": True, "data": UserOut.model_validate(current_user)}
