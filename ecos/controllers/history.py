"""Recent queries endpoints."""

from typing import List

from fastapi import APIRouter, status

from ecos.controllers.dependencies import HistoryDep
from ecos.views import RecentQueryResponse

router = APIRouter(prefix="/history", tags=["history"])


@router.get("/", response_model=List[RecentQueryResponse])
async def list_recent_queries(history: HistoryDep) -> List[RecentQueryResponse]:
    """Most recent first, one entry per (location, date) pair."""

    return [
        RecentQueryResponse(
            location=entry.location,
            date=entry.period,
            scenario_id=entry.scenario_id,
            created_at=entry.created_at,
        )
        for entry in history.list()
    ]


@router.delete("/", status_code=status.HTTP_204_NO_CONTENT)
async def clear_recent_queries(history: HistoryDep) -> None:
    history.clear()
