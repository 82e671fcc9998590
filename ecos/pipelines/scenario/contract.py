"""Pydantic models and extraction helpers for the research response.

The text model is asked for a JSON scenario but routinely wraps it in
Markdown fences or prose (grounded calls cannot request JSON mode). The
extraction runs a real JSON decoder over each top-level brace span first and
only falls back to slicing from the first ``{`` to the last ``}``. Broken JSON
ends in ``MalformedResponse``; a nested fragment is never validated on its own.
"""

from __future__ import annotations

import json
import re
from typing import Any, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .errors import MalformedResponse, SchemaViolation
from .types import DEFAULT_VOICE_BY_GENDER

_FENCE_PATTERN = re.compile(r"```(?:json)?", re.IGNORECASE)
_DECODER = json.JSONDecoder()
_FEMALE_TOKENS = frozenset({"female", "f", "femenino", "femenina", "mujer", "woman"})


def _blank_if_none(value: Any) -> Any:
    return "" if value is None else value


class AnnotationPayload(BaseModel):
    phrase: str
    explanation: str = ""

    model_config = {"extra": "ignore"}

    @field_validator("explanation", mode="before")
    @classmethod
    def blank_explanation(cls, value: Any) -> Any:
        return _blank_if_none(value)


class DialogueLinePayload(BaseModel):
    speaker: str
    text: str
    translation: str
    annotations: List[AnnotationPayload] = Field(default_factory=list)

    model_config = {"extra": "ignore"}

    @field_validator("annotations", mode="before")
    @classmethod
    def drop_unusable_annotations(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, dict) and item.get("phrase")]


class CharacterPayload(BaseModel):
    name: str = Field(min_length=1)
    gender: str = "male"
    voice: Optional[str] = None
    visual_description: str = Field(default="", alias="visualDescription")
    bio: str = ""

    model_config = {"populate_by_name": True, "extra": "ignore"}

    @field_validator("gender", mode="before")
    @classmethod
    def normalize_gender(cls, value: Any) -> str:
        token = str(value or "").strip().lower()
        return "female" if token in _FEMALE_TOKENS else "male"

    @field_validator("voice", mode="before")
    @classmethod
    def normalize_voice(cls, value: Any) -> Optional[str]:
        token = str(value or "").strip().lower()
        return token or None

    @field_validator("visual_description", "bio", mode="before")
    @classmethod
    def blank_optional_text(cls, value: Any) -> Any:
        return _blank_if_none(value)

    @model_validator(mode="after")
    def default_voice(self) -> "CharacterPayload":
        if self.voice is None:
            self.voice = DEFAULT_VOICE_BY_GENDER[self.gender]
        return self


class ScenarioPayload(BaseModel):
    context: str = Field(min_length=1)
    narrator_intro: Optional[str] = Field(default=None, alias="narratorIntro")
    accent_profile: str = Field(default="", alias="accentProfile")
    characters: List[CharacterPayload]
    script: List[DialogueLinePayload]

    model_config = {"populate_by_name": True, "extra": "ignore", "str_strip_whitespace": True}

    @field_validator("accent_profile", mode="before")
    @classmethod
    def blank_accent_profile(cls, value: Any) -> Any:
        return _blank_if_none(value)

    @field_validator("narrator_intro", mode="before")
    @classmethod
    def empty_intro_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


def _clean_json_payload(payload: str) -> str:
    """Strip Markdown code fence markers wherever they appear."""

    if not payload:
        return ""
    return _FENCE_PATTERN.sub("", payload).strip()


def _balanced_end(text: str, start: int) -> int:
    """Index just past the brace closing the one at ``start``, or -1."""

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index + 1
    return -1


def _locate_json_object(text: str) -> dict[str, Any]:
    try:
        whole = json.loads(text)
    except json.JSONDecodeError:
        whole = None
    if isinstance(whole, dict):
        return whole

    start = text.find("{")
    if start == -1:
        raise MalformedResponse("La respuesta no contiene un objeto JSON.")

    # Only top-level spans are decoded; a nested object is never returned alone.
    position = start
    while position != -1:
        try:
            candidate, _ = _DECODER.raw_decode(text, position)
        except json.JSONDecodeError:
            candidate = None
        if isinstance(candidate, dict):
            return candidate
        span_end = _balanced_end(text, position)
        if span_end == -1:
            break
        position = text.find("{", span_end)

    end = text.rfind("}")
    if end <= start:
        raise MalformedResponse("La respuesta no contiene un objeto JSON balanceado.")
    try:
        sliced = json.loads(text[start : end + 1])
    except json.JSONDecodeError as exc:
        raise MalformedResponse(f"JSON inválido en la respuesta: {exc}") from exc
    if not isinstance(sliced, dict):
        raise MalformedResponse("El JSON de la respuesta no es un objeto.")
    return sliced


def _error_fields(exc: ValidationError) -> list[str]:
    fields: list[str] = []
    for error in exc.errors():
        path = ".".join(str(part) for part in error.get("loc", ())) or "__root__"
        if path not in fields:
            fields.append(path)
    return fields


def parse_scenario_payload(raw_text: str) -> ScenarioPayload:
    """Extract and validate the scenario JSON embedded in ``raw_text``."""

    data = _locate_json_object(_clean_json_payload(raw_text))
    try:
        return ScenarioPayload.model_validate(data)
    except ValidationError as exc:
        raise SchemaViolation(_error_fields(exc)) from exc


__all__ = [
    "AnnotationPayload",
    "CharacterPayload",
    "DialogueLinePayload",
    "ScenarioPayload",
    "parse_scenario_payload",
]
