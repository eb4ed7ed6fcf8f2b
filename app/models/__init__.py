"""
Idea Manager – SQLAlchemy ORM models package.

Imports all model classes so the app and ``Base.metadata.create_all`` can
discover them through a single ``import app.models``.
"""

from app.models.user import User                           # noqa: F401
from app.models.invite_code import InviteCode              # noqa: F401
from app.models.idea import Idea                           # noqa: F401
from app.models.market_research import MarketResearch      # noqa: F401
from app.models.idea_vote import IdeaVote, VoteType        # noqa: F401
from app.models.idea_upvote import IdeaUpvote              # noqa: F401
from app.models.idea_comment import IdeaComment            # noqa: F401
