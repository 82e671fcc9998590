"""Common FastAPI dependencies reused across controllers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from ecos.pipelines.scenario import ScenarioPipeline
from ecos.services import RecentQueryStore


def get_scenario_pipeline(request: Request) -> ScenarioPipeline:
    """Return the orchestrator built once in ``create_app``."""

    return request.app.state.scenario_pipeline


def get_recent_history(request: Request) -> RecentQueryStore:
    return request.app.state.recent_history


PipelineDep = Annotated[ScenarioPipeline, Depends(get_scenario_pipeline)]
HistoryDep = Annotated[RecentQueryStore, Depends(get_recent_history)]


__all__ = ["get_scenario_pipeline", "get_recent_history", "PipelineDep", "HistoryDep"]
