"""Admin router – invite code issuance and overview."""

from fastapi import APIRouter, Depends
from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.invite_code import InviteCode
from app.models.user import User
from app.routers.auth import require_admin
from app.schemas.user import InviteCodeOut
from app.services.auth import issue_invite_code

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/generate-invite")
async def generate_invite(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Issue a new single-use invite code."""
    code = await issue_invite_code(db, admin.id)
    return {
        "success": True,
        "message": "Invite code generated successfully",
        "data": {"inviteCode": code},
    }


@router.get("/invite-codes")
async def list_invite_codes(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """All invite codes, newest first."""
    result = await db.execute(
        select(InviteCode).order_by(desc(InviteCode.created_at), desc(InviteCode.id))
    )
    return {
        "success": True,
        "data": [InviteCodeOut.model_validate(c) for c in result.scalars().all()],
    }
