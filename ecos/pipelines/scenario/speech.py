"""Speech synthesis stage: speaker-tagged transcript to decoded audio.

The speech service accepts at most two distinct voices per call, so the cast
is mapped onto two voice slots. The narrator shares slot 0 with the first
character, and any line whose speaker is unknown (or beyond the second
character) also falls back to slot 0.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from ecos.services.audio_decoder import DEFAULT_SAMPLE_RATE, DecodedAudio, decode_pcm16
from ecos.services.genai_client import GenAiClient, GenAiInvocationError

from .errors import SynthesisFailed
from .types import Character, Scenario

logger = logging.getLogger("ecos.pipeline")

MAX_VOICE_SLOTS = 2
NARRATOR_SLOT = 0


@dataclass(frozen=True)
class VoiceSlot:
    label: str
    voice: str


@dataclass(frozen=True)
class SpeechTurn:
    slot: int
    text: str


@dataclass(frozen=True)
class SpeechPlan:
    slots: tuple[VoiceSlot, ...]
    turns: tuple[SpeechTurn, ...]

    @property
    def transcript(self) -> str:
        return "\n".join(f"{self.slots[turn.slot].label}: {turn.text}" for turn in self.turns)

    @property
    def speakers(self) -> list[tuple[str, str]]:
        return [(slot.label, slot.voice) for slot in self.slots]


def _slot_label(index: int) -> str:
    return f"Speaker {chr(ord('A') + index)}"


def assign_voice_slots(
    characters: Sequence[Character],
    default_voice: str,
) -> tuple[VoiceSlot, ...]:
    """One slot per leading character, padded with ``default_voice``."""

    slots: list[VoiceSlot] = []
    for index in range(MAX_VOICE_SLOTS):
        if index < len(characters) and characters[index].voice:
            voice = characters[index].voice
        else:
            voice = default_voice
        slots.append(VoiceSlot(label=_slot_label(index), voice=voice.strip().lower()))
    return tuple(slots)


def resolve_speaker_slot(characters: Sequence[Character], speaker: str) -> int:
    for index, character in enumerate(characters[:MAX_VOICE_SLOTS]):
        if character.name == speaker:
            return index
    return NARRATOR_SLOT


def build_speech_plan(
    scenario: Scenario,
    *,
    include_narrator: bool = True,
    default_voice: str = "zephyr",
) -> SpeechPlan:
    """Order is narrator intro (optional) then the script, exactly as written."""

    turns: list[SpeechTurn] = []
    if include_narrator and scenario.narrator_intro:
        turns.append(SpeechTurn(slot=NARRATOR_SLOT, text=scenario.narrator_intro.strip()))
    for line in scenario.script:
        text = line.text.strip()
        if not text:
            continue
        turns.append(
            SpeechTurn(slot=resolve_speaker_slot(scenario.characters, line.speaker), text=text)
        )
    return SpeechPlan(
        slots=assign_voice_slots(scenario.characters, default_voice),
        turns=tuple(turns),
    )


async def synthesize_scenario_audio(
    client: GenAiClient,
    scenario: Scenario,
    *,
    include_narrator: bool = True,
    default_voice: str = "zephyr",
    sample_rate_hz: int = DEFAULT_SAMPLE_RATE,
    channels: int = 1,
) -> DecodedAudio:
    """Voice the scenario in one multi-speaker call and decode the PCM payload."""

    plan = build_speech_plan(
        scenario,
        include_narrator=include_narrator,
        default_voice=default_voice,
    )
    if not plan.turns:
        raise SynthesisFailed("El escenario no tiene texto para narrar.")

    try:
        payload = await client.synthesize_speech(plan.transcript, plan.speakers)
    except GenAiInvocationError as exc:
        logger.warning("Fallo en síntesis de voz scenario=%s: %s", scenario.id, exc)
        raise SynthesisFailed(f"Audio no generado: {exc}") from exc

    if payload is None or not payload.data:
        logger.warning("Síntesis sin audio scenario=%s", scenario.id)
        raise SynthesisFailed("Audio no generado")

    audio = decode_pcm16(payload.data, sample_rate_hz=sample_rate_hz, channels=channels)
    logger.info(
        "Audio sintetizado scenario=%s turnos=%s duracion=%.2fs",
        scenario.id,
        len(plan.turns),
        audio.duration_seconds,
    )
    return audio


__all__ = [
    "MAX_VOICE_SLOTS",
    "NARRATOR_SLOT",
    "SpeechPlan",
    "SpeechTurn",
    "VoiceSlot",
    "assign_voice_slots",
    "build_speech_plan",
    "resolve_speaker_slot",
    "synthesize_scenario_audio",
]
