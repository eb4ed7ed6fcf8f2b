"""Comments router – short comments on ideas, newest first."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.idea_comment import MAX_COMMENT_CHARS, MAX_COMMENT_WORDS, IdeaComment
from app.models.user import User
from app.routers.auth import get_current_user
from app.schemas.comment import CommentCreate, CommentOut
from app.schemas.user import UserBrief
from app.services.ideas import get_idea

router = APIRouter(prefix="/ideas", tags=["comments"])


def _comment_out(comment: IdeaComment, author: User) -> CommentOut:
    return CommentOut(
        id=comment.id,
        idea_id=comment.idea_id,
        user_id=comment.user_id,
        comment=comment.comment,
        created_at=comment.created_at,
        updated_at=comment.updated_at,
        user=UserBrief.model_validate(author),
    )


@router.get("/{idea_id}/comments")
async def list_comments(
    idea_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(IdeaComment, User)
        .join(User, IdeaComment.user_id == User.id)
        .where(IdeaComment.idea_id == idea_id)
        .order_by(desc(IdeaComment.created_at), desc(IdeaComment.id))
    )
    return {
        "success": True,
        "data": [_comment_out(comment, author) for comment, author in result.all()],
    }


@router.post("/{idea_id}/comments")
async def add_comment(
    idea_id: int,
    body: CommentCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    text = body.comment
    if not isinstance(text, str) or not text.strip():
        raise HTTPException(status_code=400, detail="Comment is required")

    if len(text.split()) > MAX_COMMENT_WORDS:
        raise HTTPException(
            status_code=400, detail=f"Comment must be {MAX_COMMENT_WORDS} words or less"
        )
    if len(text) > MAX_COMMENT_CHARS:
        raise HTTPException(
            status_code=400,
            detail=f"Comment is too long (maximum {MAX_COMMENT_CHARS} characters)",
        )

    if not await get_idea(db, idea_id):
        raise HTTPException(status_code=404, detail="Idea not found")

    comment = IdeaComment(idea_id=idea_id, user_id=current_user.id, comment=text.strip())
    db.add(comment)
    await db.flush()
    await db.refresh(comment)

    return {
        "success": True,
        "message": "Comment added successfully",
        "data": _comment_out(comment, current_user),
    }
