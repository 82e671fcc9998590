"""Shared fixtures: a scripted stand-in for the GenAI client and sample data."""

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timezone
from pathlib import Path
import sys
from typing import Any, Optional

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from ecos.pipelines.scenario import Character, DialogueLine, Scenario  # noqa: E402
from ecos.services.genai_client import (  # noqa: E402
    Citation,
    InlinePayload,
    TextGeneration,
)

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-portrait"
PCM_BYTES = b"\x00\x80\xff\x7f\x00\x00\x00\x40"


def scenario_json(**overrides: Any) -> str:
    payload: dict[str, Any] = {
        "context": "Mercado de Tlatelolco, 1519. Comerciantes regatean bajo el sol.",
        "narratorIntro": "Estamos en el gran mercado de Tlatelolco.",
        "accentProfile": "Náhuatl clásico con préstamos del castellano",
        "characters": [
            {
                "name": "Citlali",
                "gender": "female",
                "voice": "Kore",
                "visualDescription": "Vendedora de cacao con huipil bordado",
                "bio": "Comerciante de cacao.",
            },
            {
                "name": "Tochtli",
                "gender": "male",
                "voice": "Puck",
                "visualDescription": "Pochteca con manto de algodón",
                "bio": "Mercader viajero.",
            },
        ],
        "script": [
            {
                "speaker": "Citlali",
                "text": "¡Cacao fresco!",
                "translation": "Fresh cacao!",
                "annotations": [{"phrase": "cacao", "explanation": "Usado como moneda."}],
            },
            {"speaker": "Tochtli", "text": "¿Cuánto por diez?", "translation": "How much for ten?"},
        ],
    }
    payload.update(overrides)
    return json.dumps(payload, ensure_ascii=False)


THIRD_CHARACTER = {
    "name": "Ehecatl",
    "gender": "male",
    "voice": "charon",
    "visualDescription": "Sacerdote con tocado de plumas",
    "bio": "Guardián del templo.",
}


def three_character_json() -> str:
    characters = json.loads(scenario_json())["characters"] + [THIRD_CHARACTER]
    return scenario_json(characters=characters)


def make_scenario(
    *,
    characters: Optional[tuple[Character, ...]] = None,
    script: Optional[tuple[DialogueLine, ...]] = None,
    narrator_intro: Optional[str] = "Bienvenidos al mercado.",
) -> Scenario:
    if characters is None:
        characters = (
            Character(name="Citlali", gender="female", voice="kore", visual_description="huipil"),
            Character(name="Tochtli", gender="male", voice="puck"),
        )
    if script is None:
        script = (
            DialogueLine(speaker="Citlali", text="¡Cacao fresco!", translation="Fresh cacao!"),
            DialogueLine(speaker="Tochtli", text="¿Cuánto?", translation="How much?"),
        )
    return Scenario(
        id="scenario-1",
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        location_input="Tlatelolco",
        date_input="1519",
        context="Mercado de Tlatelolco",
        accent_profile="Náhuatl",
        characters=characters,
        script=script,
        narrator_intro=narrator_intro,
    )


class FakeGenAiClient:
    """Mimics ``GenAiClient``; every call is recorded and may be gated.

    ``text``/``speech``/``image`` hold the value to return, or an exception
    instance to raise. ``image_outcomes`` overrides ``image`` for prompts
    containing one of its keys. Setting a gate (``asyncio.Event``) makes the
    matching call block until the test releases it.
    """

    def __init__(
        self,
        *,
        text: Any = None,
        citations: tuple[Citation, ...] = (),
        speech: Any = None,
        image: Any = None,
    ) -> None:
        self.text = scenario_json() if text is None else text
        self.citations = citations
        self.speech = InlinePayload("audio/L16;rate=24000", PCM_BYTES) if speech is None else speech
        self.image = InlinePayload("image/png", PNG_BYTES) if image is None else image
        self.text_gate: Optional[asyncio.Event] = None
        self.speech_gate: Optional[asyncio.Event] = None
        self.image_gates: dict[str, asyncio.Event] = {}
        self.image_outcomes: dict[str, Any] = {}
        self.text_calls: list[dict[str, Any]] = []
        self.speech_calls: list[dict[str, Any]] = []
        self.image_calls: list[str] = []

    @staticmethod
    def _resolve(value: Any) -> Any:
        if isinstance(value, BaseException):
            raise value
        return value

    async def generate_text(self, prompt, *, grounded=False, json_output=False):
        self.text_calls.append({"prompt": prompt, "grounded": grounded, "json_output": json_output})
        if self.text_gate is not None:
            await self.text_gate.wait()
        text = self._resolve(self.text)
        return TextGeneration(text=text, citations=self.citations)

    async def synthesize_speech(self, transcript, speakers):
        self.speech_calls.append({"transcript": transcript, "speakers": list(speakers)})
        if self.speech_gate is not None:
            await self.speech_gate.wait()
        return self._resolve(self.speech)

    async def generate_image(self, prompt):
        self.image_calls.append(prompt)
        for marker, gate in self.image_gates.items():
            if marker in prompt:
                await gate.wait()
        for marker, outcome in self.image_outcomes.items():
            if marker in prompt:
                return self._resolve(outcome)
        return self._resolve(self.image)


@pytest.fixture
def fake_client() -> FakeGenAiClient:
    return FakeGenAiClient()

