"""Vote / upvote Pydantic schemas."""

from typing import Literal, Optional

from pydantic import BaseModel, StrictInt

from app.models.idea_vote import VoteType


class VoteRequest(BaseModel):
    """Body of POST /ideas/{id}/votes."""
    vote_type: Optional[str] = None
    action: Optional[str] = None


class UpvoteRequest(BaseModel):
    """Body of POST /ideas/{id}/upvotes. ``vote_value`` must be sent, null clears it."""
    vote_value: Optional[StrictInt] = None


class VoteSummary(BaseModel):
    help_build_count: int = 0
    use_service_count: int = 0
    user_help_build_vote: bool = False
    user_use_service_vote: bool = False


class UpvoteSummary(BaseModel):
    upvote_count: int = 0
    downvote_count: int = 0
    net_votes: int = 0
    user_upvote_status: Optional[Literal[1, -1]] = None


VOTE_TYPES = {v.value for v in VoteType}
# action -> past tense used in the response message
VOTE_ACTIONS = {"add": "added", "remove": "removed"}
