"""
Authentication router – invite redemption + bearer-token guards.

Endpoints:
    POST /auth/validate-invite  → redeem an invite code, return a JWT + user

Dependencies:
    get_current_user  → 401 unless a valid bearer token for a known user is sent
    require_admin     → 403 unless that user is an admin
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.user import User
from app.schemas.user import AuthOut, InviteRedeem, UserOut
from app.services.auth import issue_token, redeem_invite_code, validate_invite_code, verify_token

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer "


# ═══════════════════════════════════════════════════════════════
#  Dependencies
# ═══════════════════════════════════════════════════════════════

async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Extract the JWT from the Authorization header, decode it, and return the User.
    Raises 401 when the header is missing or the token does not check out.
    """
    header = request.headers.get("authorization", "")
    token = header[len(BEARER_PREFIX):].strip() if header.lower().startswith(BEARER_PREFIX) else ""
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")

    claims = verify_token(token)
    if not claims:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    result = await db.execute(select(User).where(User.id == claims.user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return user


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return current_user


# ═══════════════════════════════════════════════════════════════
#  POST /auth/validate-invite → redeem code, sign in
# ═══════════════════════════════════════════════════════════════

@router.post("/validate-invite")
async def validate_invite(
    body: InviteRedeem,
    db: AsyncSession = Depends(get_db),
):
    """Redeem an invite code for ``email``, creating the user on first use."""
    invite_code = (body.invite_code or "").strip()
    email = (body.email or "").strip()
    if not invite_code or not email:
        raise HTTPException(status_code=400, detail="Invite code and email are required")

    if not await validate_invite_code(db, invite_code):
        raise HTTPException(status_code=400, detail="Invalid or expired invite code")

    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if not user:
        user = User(email=email)
        db.add(user)
        await db.flush()
        await db.refresh(user)

    # Someone else may have redeemed it since the check; the raise rolls back the new user.
    if not await redeem_invite_code(db, invite_code, user.id):
        raise HTTPException(status_code=400, detail="Invalid or expired invite code")

    return {
        "success": True,
        "message": "Invite code validated successfully",
        "data": AuthOut(token=issue_token(user), user=UserOut.model_validate(user)),
    }
