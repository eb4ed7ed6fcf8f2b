"""IdeaUpvote model: one signed (+1 / -1) vote per user per idea."""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class IdeaUpvote(Base):
    __tablename__ = "idea_upvotes"
    __table_args__ = (
        UniqueConstraint("idea_id", "user_id", name="uq_idea_upvotes_idea_user"),
        CheckConstraint("vote_value IN (-1, 1)", name="ck_idea_upvotes_vote_value"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    idea_id: Mapped[int] = mapped_column(ForeignKey("ideas.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    vote_value: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
