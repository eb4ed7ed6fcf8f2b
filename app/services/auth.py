"""
Session tokens and invite codes.

Tokens are HS256 JWTs carrying the user id, email and admin flag with a
fixed lifetime; there is no refresh. Invite codes are single-use: the
redemption is one conditional UPDATE, so two concurrent redemptions of the
same code leave exactly one winner.

All helpers report failure with ``None`` / ``False``; routers translate
those into HTTP statuses.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.invite_code import InviteCode
from app.models.user import User

logger = logging.getLogger(__name__)


@dataclass
class TokenClaims:
    user_id: int
    email: str
    is_admin: bool


def issue_token(user: User) -> str:
    """Create a signed JWT for ``user`` with an expiry claim."""
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    to_encode = {
        "sub": str(user.id),
        "email": user.email,
        "is_admin": bool(user.is_admin),
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_token(token: str) -> Optional[TokenClaims]:
    """Decode ``token``; returns None when the signature or expiry is invalid."""
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
        )
        user_id = int(payload.get("sub", 0))
    except (JWTError, TypeError, ValueError):
        return None
    if not user_id:
        return None
    return TokenClaims(
        user_id=user_id,
        email=payload.get("email", ""),
        is_admin=bool(payload.get("is_admin", False)),
    )


async def validate_invite_code(db: AsyncSession, code: str) -> bool:
    """True iff an active, unused invite with this code exists."""
    result = await db.execute(
        select(InviteCode.id).where(
            InviteCode.code == code,
            InviteCode.is_active.is_(True),
            InviteCode.used_by.is_(None),
        )
    )
    return result.first() is not None


async def redeem_invite_code(db: AsyncSession, code: str, user_id: int) -> bool:
    """Mark the code as used by ``user_id`` if it is still active and unused."""
    result = await db.execute(
        update(InviteCode)
        .where(
            InviteCode.code == code,
            InviteCode.is_active.is_(True),
            InviteCode.used_by.is_(None),
        )
        .values(used_by=user_id, used_at=func.now())
        .execution_options(synchronize_session=False)
    )
    redeemed = result.rowcount == 1
    if redeemed:
        logger.info(f"Invite code redeemed by user {user_id}")
    return redeemed


def _random_code() -> str:
    return secrets.token_hex(12)


async def issue_invite_code(db: AsyncSession, admin_id: int, prefix: str = "") -> str:
    """Persist a fresh random invite code owned by ``admin_id`` and return it."""
    code = prefix + (_random_code().upper() if prefix else _random_code())
    db.add(InviteCode(code=code, created_by=admin_id))
    await db.flush()
    logger.info(f"Invite code issued by user {admin_id}")
    return code
