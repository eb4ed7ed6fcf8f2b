"""Idea Pydantic schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class IdeaCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    parent_idea_id: Optional[int] = Field(default=None, alias="parentIdeaId")

    model_config = {"populate_by_name": True}


class IdeaGenerate(BaseModel):
    """Body of POST /ideas/generate."""
    root_idea_id: Optional[int] = Field(default=None, alias="rootIdeaId")
    context: Optional[str] = None
    max_ideas: Optional[int] = Field(default=None, alias="maxIdeas")

    model_config = {"populate_by_name": True}


class GeneratedIdea(BaseModel):
    """One idea as returned by the AI client, before it is persisted."""
    title: str
    description: str


class IdeaOut(BaseModel):
    id: int
    title: str
    description: str
    created_by: int
    parent_idea_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class IdeaVoteCounts(BaseModel):
    help_build_count: int = 0
    use_service_count: int = 0
    upvote_count: int = 0
    downvote_count: int = 0
    net_votes: int = 0
    user_help_build_vote: bool = False
    user_use_service_vote: bool = False
    user_upvote_status: Optional[int] = None


class IdeaWithVotes(IdeaOut):
    """An idea as listed on the dashboard: author, aggregates and own vote state."""
    user_email: str
    vote_counts: IdeaVoteCounts
    comments_count: int = 0
