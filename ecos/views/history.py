"""Schemas for the recent queries list."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RecentQueryResponse(BaseModel):
    """History entry describing a previously researched query."""

    location: str
    date: Optional[str] = None
    scenario_id: str = Field(..., alias="scenarioId")
    created_at: datetime = Field(..., alias="createdAt")

    model_config = ConfigDict(populate_by_name=True)
