"""Market research Pydantic schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class MarketResearchOut(BaseModel):
    id: int
    idea_id: int
    research_data: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
