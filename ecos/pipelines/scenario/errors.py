"""Failure taxonomy of the scenario pipeline."""

from __future__ import annotations

from typing import Iterable


class ScenarioPipelineError(RuntimeError):
    """Base class for pipeline failures."""


class ResearchFailed(ScenarioPipelineError):
    """The research stage could not produce a scenario. Blocks the run."""


class MalformedResponse(ResearchFailed):
    """No decodable JSON object could be located in the model output."""


class SchemaViolation(ResearchFailed):
    """The JSON object is missing required fields or has invalid ones."""

    def __init__(self, fields: Iterable[str], message: str | None = None) -> None:
        self.fields = tuple(fields)
        super().__init__(message or f"Campos requeridos ausentes o inválidos: {', '.join(self.fields)}")


class SynthesisFailed(ScenarioPipelineError):
    """The speech stage returned no playable audio."""


class PortraitFailed(ScenarioPipelineError):
    """A single portrait could not be generated. Never leaves the portrait stage."""


class NoActiveScenario(ScenarioPipelineError):
    """An operation needs a scenario but none is loaded."""


class PipelineBusy(ScenarioPipelineError):
    """An operation conflicts with work still in flight."""


__all__ = [
    "MalformedResponse",
    "NoActiveScenario",
    "PipelineBusy",
    "PortraitFailed",
    "ResearchFailed",
    "ScenarioPipelineError",
    "SchemaViolation",
    "SynthesisFailed",
]
