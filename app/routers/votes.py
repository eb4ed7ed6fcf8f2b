"""Votes router – help-build / would-use toggles and signed upvotes."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import case, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import dialect_insert, get_db
from app.models.idea_upvote import IdeaUpvote
from app.models.idea_vote import IdeaVote, VoteType
from app.models.user import User
from app.routers.auth import get_current_user
from app.schemas.vote import VOTE_ACTIONS, VOTE_TYPES, UpvoteRequest, UpvoteSummary, VoteRequest, VoteSummary
from app.services.ideas import get_idea

router = APIRouter(prefix="/ideas", tags=["votes"])


async def _require_idea(db: AsyncSession, idea_id: int) -> None:
    if not await get_idea(db, idea_id):
        raise HTTPException(status_code=404, detail="Idea not found")


# ═══════════════════════════════════════════════════════════════
#  /ideas/{idea_id}/votes → help_build / use_service
# ═══════════════════════════════════════════════════════════════

@router.get("/{idea_id}/votes")
async def get_votes(
    idea_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    counts_result = await db.execute(
        select(IdeaVote.vote_type, func.count(IdeaVote.id))
        .where(IdeaVote.idea_id == idea_id)
        .group_by(IdeaVote.vote_type)
    )
    counts = {vote_type: count for vote_type, count in counts_result.all()}

    mine_result = await db.execute(
        select(IdeaVote.vote_type).where(
            IdeaVote.idea_id == idea_id,
            IdeaVote.user_id == current_user.id,
        )
    )
    mine = set(mine_result.scalars().all())

    return {
        "success": True,
        "data": VoteSummary(
            help_build_count=counts.get(VoteType.help_build, 0),
            use_service_count=counts.get(VoteType.use_service, 0),
            user_help_build_vote=VoteType.help_build in mine,
            user_use_service_vote=VoteType.use_service in mine,
        ),
    }


@router.post("/{idea_id}/votes")
async def cast_vote(
    idea_id: int,
    body: VoteRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not body.vote_type or not body.action:
        raise HTTPException(status_code=400, detail="Vote type and action are required")
    if body.vote_type not in VOTE_TYPES:
        raise HTTPException(status_code=400, detail="Invalid vote type")
    if body.action not in VOTE_ACTIONS:
        raise HTTPException(status_code=400, detail="Invalid action")

    await _require_idea(db, idea_id)
    vote_type = VoteType(body.vote_type)

    if body.action == "add":
        # A duplicate add is a no-op thanks to the (idea, user, type) unique key.
        stmt = dialect_insert(db, IdeaVote).values(
            idea_id=idea_id, user_id=current_user.id, vote_type=vote_type
        )
        await db.execute(
            stmt.on_conflict_do_nothing(index_elements=["idea_id", "user_id", "vote_type"])
        )
    else:
        await db.execute(
            delete(IdeaVote).where(
                IdeaVote.idea_id == idea_id,
                IdeaVote.user_id == current_user.id,
                IdeaVote.vote_type == vote_type,
            )
        )

    return {"success": True, "message": f"Vote {VOTE_ACTIONS[body.action]} successfully"}


# ═══════════════════════════════════════════════════════════════
#  /ideas/{idea_id}/upvotes → +1 / -1 / clear
# ═══════════════════════════════════════════════════════════════

@router.get("/{idea_id}/upvotes")
async def get_upvotes(
    idea_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    totals = (await db.execute(
        select(
            func.sum(case((IdeaUpvote.vote_value == 1, 1), else_=0)),
            func.sum(case((IdeaUpvote.vote_value == -1, 1), else_=0)),
            func.sum(IdeaUpvote.vote_value),
        ).where(IdeaUpvote.idea_id == idea_id)
    )).one()

    mine = (await db.execute(
        select(IdeaUpvote.vote_value).where(
            IdeaUpvote.idea_id == idea_id,
            IdeaUpvote.user_id == current_user.id,
        )
    )).scalar_one_or_none()

    upvote_count, downvote_count, net_votes = totals
    return {
        "success": True,
        "data": UpvoteSummary(
            upvote_count=int(upvote_count or 0),
            downvote_count=int(downvote_count or 0),
            net_votes=int(net_votes or 0),
            user_upvote_status=mine,
        ),
    }


@router.post("/{idea_id}/upvotes")
async def cast_upvote(
    idea_id: int,
    body: UpvoteRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if "vote_value" not in body.model_fields_set or body.vote_value not in (1, -1, None):
        raise HTTPException(
            status_code=400,
            detail="Vote value must be 1 (upvote), -1 (downvote), or null (remove vote)",
        )

    await _require_idea(db, idea_id)

    if body.vote_value is None:
        await db.execute(
            delete(IdeaUpvote).where(
                IdeaUpvote.idea_id == idea_id,
                IdeaUpvote.user_id == current_user.id,
            )
        )
        return {"success": True, "message": "Vote removed successfully"}

    stmt = dialect_insert(db, IdeaUpvote).values(
        idea_id=idea_id, user_id=current_user.id, vote_value=body.vote_value
    )
    await db.execute(
        stmt.on_conflict_do_update(
            index_elements=["idea_id", "user_id"],
            set_={"vote_value": stmt.excluded.vote_value, "updated_at": func.now()},
        )
    )
    return {"success": True, "message": "Vote updated successfully"}
