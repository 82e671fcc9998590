"""Typed containers shared across the scenario pipeline.

These dataclasses live in their own module so the stages (`research`,
`speech`, `portraits`, `orchestrator`) can import them without creating
circular dependencies. Every container is frozen: the only sanctioned
mutation, attaching a portrait, produces a new ``Scenario`` via
:meth:`Scenario.with_avatar`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Literal, Optional

Gender = Literal["male", "female"]

VOICE_NAMES: tuple[str, ...] = (
    "achernar", "achird", "algenib", "algieba", "alnilam", "aoede",
    "autonoe", "callirrhoe", "charon", "despina", "enceladus", "erinome",
    "fenrir", "gacrux", "iapetus", "kore", "laomedeia", "leda",
    "orus", "puck", "pulcherrima", "rasalgethi", "sadachbia", "sadaltager",
    "schedar", "sulafat", "umbriel", "vindemiatrix", "zephyr", "zubenelgenubi",
)

DEFAULT_VOICE_BY_GENDER: dict[str, str] = {"female": "kore", "male": "puck"}


@dataclass(frozen=True)
class Annotation:
    phrase: str
    explanation: str


@dataclass(frozen=True)
class DialogueLine:
    speaker: str
    text: str
    translation: str
    annotations: tuple[Annotation, ...] = ()


@dataclass(frozen=True)
class Character:
    name: str
    gender: Gender
    voice: str
    visual_description: str = ""
    bio: str = ""
    avatar_url: Optional[str] = None


@dataclass(frozen=True)
class Source:
    title: str
    uri: str


@dataclass(frozen=True)
class Scenario:
    """Historical scene produced by the research stage."""

    id: str
    created_at: datetime
    location_input: str
    date_input: Optional[str]
    context: str
    accent_profile: str
    characters: tuple[Character, ...]
    script: tuple[DialogueLine, ...]
    narrator_intro: Optional[str] = None
    sources: tuple[Source, ...] = field(default_factory=tuple)

    def with_avatar(self, index: int, avatar_url: str) -> "Scenario":
        """Copy-on-write patch of a single character's ``avatar_url``."""

        if not 0 <= index < len(self.characters):
            raise IndexError(f"character index {index} out of range")
        characters = list(self.characters)
        characters[index] = replace(characters[index], avatar_url=avatar_url)
        return replace(self, characters=tuple(characters))


@dataclass(frozen=True)
class ScenarioQuery:
    """User submission that starts a pipeline run."""

    location: str
    period: Optional[str] = None
    generate_portraits: bool = True


@dataclass(frozen=True)
class PipelineCapabilities:
    """Feature switches resolved once at startup and injected into the pipeline."""

    portraits_enabled: bool = True
    grounding_enabled: bool = True


__all__ = [
    "Annotation",
    "Character",
    "DEFAULT_VOICE_BY_GENDER",
    "DialogueLine",
    "Gender",
    "PipelineCapabilities",
    "Scenario",
    "ScenarioQuery",
    "Source",
    "VOICE_NAMES",
]
