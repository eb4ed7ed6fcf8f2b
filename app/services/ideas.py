"""
Idea queries shared by the idea, vote, comment and research routers.

The dashboard listing is one SELECT: every idea left-joined to grouped
vote / upvote / comment aggregates plus the requesting user's own votes.
"""

from typing import List, Optional

from sqlalchemy import Select, and_, case, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from app.models.idea import Idea
from app.models.idea_comment import IdeaComment
from app.models.idea_upvote import IdeaUpvote
from app.models.idea_vote import IdeaVote, VoteType
from app.models.user import User
from app.schemas.idea import IdeaOut, IdeaVoteCounts, IdeaWithVotes


async def get_idea(db: AsyncSession, idea_id: int) -> Optional[Idea]:
    result = await db.execute(select(Idea).where(Idea.id == idea_id))
    return result.scalar_one_or_none()


def _vote_count_subquery(vote_type: VoteType, name: str):
    return (
        select(IdeaVote.idea_id.label("idea_id"), func.count(IdeaVote.id).label("count"))
        .where(IdeaVote.vote_type == vote_type)
        .group_by(IdeaVote.idea_id)
        .subquery(name)
    )


def _ideas_with_votes_query(user_id: int) -> Select:
    help_build = _vote_count_subquery(VoteType.help_build, "v_help")
    use_service = _vote_count_subquery(VoteType.use_service, "v_use")

    upvotes = (
        select(
            IdeaUpvote.idea_id.label("idea_id"),
            func.sum(case((IdeaUpvote.vote_value == 1, 1), else_=0)).label("upvote_count"),
            func.sum(case((IdeaUpvote.vote_value == -1, 1), else_=0)).label("downvote_count"),
            func.sum(IdeaUpvote.vote_value).label("net_votes"),
        )
        .group_by(IdeaUpvote.idea_id)
        .subquery("uv")
    )

    comments = (
        select(IdeaComment.idea_id.label("idea_id"), func.count(IdeaComment.id).label("count"))
        .group_by(IdeaComment.idea_id)
        .subquery("c")
    )

    user_votes = (
        select(
            IdeaVote.idea_id.label("idea_id"),
            func.max(case((IdeaVote.vote_type == VoteType.help_build, 1))).label("help_build_vote"),
            func.max(case((IdeaVote.vote_type == VoteType.use_service, 1))).label("use_service_vote"),
        )
        .where(IdeaVote.user_id == user_id)
        .group_by(IdeaVote.idea_id)
        .subquery("user_votes")
    )

    user_upvote = aliased(IdeaUpvote, name="user_upvotes")

    return (
        select(
            Idea,
            User.email.label("user_email"),
            func.coalesce(help_build.c.count, 0).label("help_build_count"),
            func.coalesce(use_service.c.count, 0).label("use_service_count"),
            func.coalesce(upvotes.c.upvote_count, 0).label("upvote_count"),
            func.coalesce(upvotes.c.downvote_count, 0).label("downvote_count"),
            func.coalesce(upvotes.c.net_votes, 0).label("net_votes"),
            func.coalesce(comments.c.count, 0).label("comments_count"),
            user_votes.c.help_build_vote,
            user_votes.c.use_service_vote,
            user_upvote.vote_value.label("user_upvote_status"),
        )
        .join(User, Idea.created_by == User.id)
        .outerjoin(help_build, help_build.c.idea_id == Idea.id)
        .outerjoin(use_service, use_service.c.idea_id == Idea.id)
        .outerjoin(upvotes, upvotes.c.idea_id == Idea.id)
        .outerjoin(comments, comments.c.idea_id == Idea.id)
        .outerjoin(user_votes, user_votes.c.idea_id == Idea.id)
        .outerjoin(
            user_upvote,
            and_(user_upvote.idea_id == Idea.id, user_upvote.user_id == user_id),
        )
    )


def _row_to_idea(row) -> IdeaWithVotes:
    return IdeaWithVotes(
        **IdeaOut.model_validate(row.Idea).model_dump(),
        user_email=row.user_email,
        vote_counts=IdeaVoteCounts(
            help_build_count=int(row.help_build_count or 0),
            use_service_count=int(row.use_service_count or 0),
            upvote_count=int(row.upvote_count or 0),
            downvote_count=int(row.downvote_count or 0),
            net_votes=int(row.net_votes or 0),
            user_help_build_vote=row.help_build_vote is not None,
            user_use_service_vote=row.use_service_vote is not None,
            user_upvote_status=row.user_upvote_status,
        ),
        comments_count=int(row.comments_count or 0),
    )


async def list_ideas_with_votes(db: AsyncSession, user_id: int) -> List[IdeaWithVotes]:
    """All ideas, newest first, annotated for ``user_id``."""
    result = await db.execute(
        _ideas_with_votes_query(user_id).order_by(desc(Idea.created_at), desc(Idea.id))
    )
    return [_row_to_idea(row) for row in result.all()]


async def get_idea_with_votes(db: AsyncSession, idea_id: int, user_id: int) -> Optional[IdeaWithVotes]:
    result = await db.execute(_ideas_with_votes_query(user_id).where(Idea.id == idea_id))
    row = result.first()
    return _row_to_idea(row) if row else None
