"""Pydantic schemas used as views in the MVC architecture."""

from .common import ErrorResponse
from .history import RecentQueryResponse
from .scenarios import (
    AudioInfoView,
    AudioRegenerationRequest,
    CharacterView,
    DialogueLineView,
    PipelineStateResponse,
    ScenarioRequest,
    ScenarioView,
    SourceView,
)

__all__ = [
    "AudioInfoView",
    "AudioRegenerationRequest",
    "CharacterView",
    "DialogueLineView",
    "ErrorResponse",
    "PipelineStateResponse",
    "RecentQueryResponse",
    "ScenarioRequest",
    "ScenarioView",
    "SourceView",
]
