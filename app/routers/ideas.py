"""Ideas router – dashboard listing, create / delete, AI expansion."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.idea import Idea
from app.models.user import User
from app.routers.auth import get_current_user
from app.schemas.idea import IdeaCreate, IdeaGenerate, IdeaOut
from app.services import ai_client
from app.services.ideas import get_idea, get_idea_with_votes, list_ideas_with_votes

router = APIRouter(prefix="/ideas", tags=["ideas"])
logger = logging.getLogger(__name__)

MAX_GENERATED_IDEAS = 10


# ═══════════════════════════════════════════════════════════════
#  GET /ideas → every idea with vote aggregates
# ═══════════════════════════════════════════════════════════════

@router.get("")
async def list_ideas(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    ideas = await list_ideas_with_votes(db, current_user.id)
    return {"success": True, "data": ideas}


# ═══════════════════════════════════════════════════════════════
#  POST /ideas → create an idea
# ═══════════════════════════════════════════════════════════════

@router.post("")
async def create_idea(
    body: IdeaCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    title = (body.title or "").strip()
    description = (body.description or "").strip()
    if not title or not description:
        raise HTTPException(status_code=400, detail="Title and description are required")

    if body.parent_idea_id is not None and not await get_idea(db, body.parent_idea_id):
        raise HTTPException(status_code=404, detail="Parent idea not found")

    idea = Idea(
        title=title,
        description=description,
        created_by=current_user.id,
        parent_idea_id=body.parent_idea_id,
    )
    db.add(idea)
    await db.flush()
    await db.refresh(idea)

    return {
        "success": True,
        "message": "Idea created successfully",
        "data": IdeaOut.model_validate(idea),
    }


# ═══════════════════════════════════════════════════════════════
#  POST /ideas/generate → expand a root idea with the AI client
# ═══════════════════════════════════════════════════════════════

@router.post("/generate")
async def generate_ideas(
    body: IdeaGenerate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    context = (body.context or "").strip()
    if not body.root_idea_id or not context or not body.max_ideas or body.max_ideas < 1:
        raise HTTPException(
            status_code=400,
            detail="Root idea ID, context, and max ideas are required",
        )

    root = await get_idea(db, body.root_idea_id)
    if not root:
        raise HTTPException(status_code=404, detail="Root idea not found")

    try:
        generated = await ai_client.generate_ideas(
            root.title,
            root.description,
            context,
            min(body.max_ideas, MAX_GENERATED_IDEAS),
        )
    except ai_client.AIServiceError as e:
        logger.error(f"Idea generation for idea {root.id} failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate ideas")

    saved = []
    for item in generated:
        idea = Idea(
            title=item.title,
            description=item.description,
            created_by=current_user.id,
            parent_idea_id=root.id,
        )
        db.add(idea)
        await db.flush()
        await db.refresh(idea)
        saved.append(IdeaOut.model_validate(idea))

    return {
        "success": True,
        "message": f"Generated {len(saved)} new ideas",
        "data": saved,
    }


# ═══════════════════════════════════════════════════════════════
#  GET /ideas/{idea_id} → one idea with aggregates
# ═══════════════════════════════════════════════════════════════

@router.get("/{idea_id}")
async def read_idea(
    idea_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    idea = await get_idea_with_votes(db, idea_id, current_user.id)
    if not idea:
        raise HTTPException(status_code=404, detail="Idea not found")
    return {"success": True, "data": idea}


# ═══════════════════════════════════════════════════════════════
#  DELETE /ideas/{idea_id} → creator only; the store cascades
# ═══════════════════════════════════════════════════════════════

@router.delete("/{idea_id}")
async def delete_idea(
    idea_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    idea = await get_idea(db, idea_id)
    if not idea:
        raise HTTPException(status_code=404, detail="Idea not found")
    if idea.created_by != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have permission to delete this idea",
        )

    await db.execute(
        delete(Idea)
        .where(Idea.id == idea_id, Idea.created_by == current_user.id)
        .execution_options(synchronize_session=False)
    )
    # Drop the stale identity so later reads in this session do not see it.
    db.expunge(idea)
    logger.info(f"Idea {idea_id} deleted by user {current_user.id}")

    return {"success": True, "message": "Idea deleted successfully"}
