"""
System router – schema bootstrap and first admin.

Endpoints:
    POST /init-db  → create tables, ensure an admin exists, hand out an ADMIN- invite
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import Base, get_db
from app.models.user import User
from app.schemas.user import AdminBootstrap, UserOut
from app.services.auth import issue_invite_code

router = APIRouter(tags=["system"])
logger = logging.getLogger(__name__)

ADMIN_CODE_PREFIX = "ADMIN-"


@router.post("/init-db")
async def init_db(
    body: Optional[AdminBootstrap] = None,
    db: AsyncSession = Depends(get_db),
):
    conn = await db.connection()
    await conn.run_sync(Base.metadata.create_all)

    result = await db.execute(select(User).where(User.is_admin.is_(True)).order_by(User.id).limit(1))
    admin = result.scalar_one_or_none()
    created = admin is None

    if created:
        email = body.email if body else None
        if not email:
            raise HTTPException(status_code=400, detail="Admin email is required")

        existing = await db.execute(select(User).where(User.email == email))
        admin = existing.scalar_one_or_none()
        if admin:
            admin.is_admin = True
        else:
            admin = User(email=email, is_admin=True)
            db.add(admin)
        await db.flush()
        await db.refresh(admin)
        logger.info(f"Bootstrapped admin user {admin.id}")

    code = await issue_invite_code(db, admin.id, prefix=ADMIN_CODE_PREFIX)

    if created:
        message = "Database initialized and admin user created"
        instructions = f'Use invite code "{code}" with email "{admin.email}" to access the admin dashboard'
    else:
        message = "Database initialized (admin user already exists)"
        instructions = f'Use invite code "{code}" with your admin email to access the dashboard'

    return {
        "success": True,
        "message": message,
        "data": {
            "admin": UserOut.model_validate(admin),
            "adminInviteCode": code,
            "instructions": instructions,
        },
    }
