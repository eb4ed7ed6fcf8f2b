"""Market research router – fetch, or generate once and cache per idea."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import dialect_insert, get_db
from app.models.market_research import MarketResearch
from app.models.user import User
from app.routers.auth import get_current_user
from app.schemas.market_research import MarketResearchOut
from app.services import ai_client
from app.services.ideas import get_idea

router = APIRouter(prefix="/ideas", tags=["market-research"])
logger = logging.getLogger(__name__)


async def _cached_research(db: AsyncSession, idea_id: int):
    result = await db.execute(select(MarketResearch).where(MarketResearch.idea_id == idea_id))
    return result.scalar_one_or_none()


@router.get("/{idea_id}/market-research")
async def get_market_research(
    idea_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    research = await _cached_research(db, idea_id)
    if not research:
        raise HTTPException(status_code=404, detail="Market research not found")
    return {"success": True, "data": MarketResearchOut.model_validate(research)}


@router.post("/{idea_id}/market-research")
async def generate_market_research(
    idea_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Return the cached report, generating and storing it on first request."""
    idea = await get_idea(db, idea_id)
    if not idea:
        raise HTTPException(status_code=404, detail="Idea not found")

    research = await _cached_research(db, idea_id)
    if not research:
        try:
            report = await ai_client.generate_market_research(idea.title, idea.description)
        except ai_client.AIServiceError as e:
            logger.error(f"Market research for idea {idea_id} failed: {e}")
            raise HTTPException(status_code=500, detail="Failed to generate market research")

        # A concurrent first request may have stored one already; keep whichever landed first.
        stmt = dialect_insert(db, MarketResearch).values(idea_id=idea_id, research_data=report)
        await db.execute(stmt.on_conflict_do_nothing(index_elements=["idea_id"]))
        research = await _cached_research(db, idea_id)

    return {"success": True, "data": MarketResearchOut.model_validate(research)}
