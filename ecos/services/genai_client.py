"""Thin Google GenAI client wrapper for text, speech and image generation."""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
import time
from dataclasses import dataclass
from typing import Any, Sequence

from google import genai
from google.genai import types

from ecos.config.settings import GenAiConfig
from ecos.telemetry import observe_generation

logger = logging.getLogger(__name__)


class GenAiInvocationError(RuntimeError):
    """Raised when a generation call fails, times out or cannot be issued."""


@dataclass(frozen=True)
class Citation:
    """Web source reported by a grounded text generation."""

    title: str | None
    uri: str | None


@dataclass(frozen=True)
class TextGeneration:
    text: str
    citations: tuple[Citation, ...] = ()


@dataclass(frozen=True)
class InlinePayload:
    """Binary payload (audio or image) returned inline by the service."""

    mime_type: str
    data: bytes


def _coerce_bytes(data: Any) -> bytes | None:
    """Inline data arrives as raw bytes from the SDK or as a base64 string."""

    if data is None:
        return None
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    if isinstance(data, str):
        try:
            return base64.b64decode(data, validate=False)
        except (binascii.Error, ValueError):
            logger.warning("Inline payload is not valid base64")
            return None
    return None


def _first_candidate(response: Any) -> Any | None:
    candidates = getattr(response, "candidates", None) or []
    return candidates[0] if candidates else None


def extract_inline_payload(response: Any) -> InlinePayload | None:
    """Return the first non-empty inline data part of the first candidate."""

    candidate = _first_candidate(response)
    content = getattr(candidate, "content", None)
    parts = getattr(content, "parts", None) or []
    for part in parts:
        inline_data = getattr(part, "inline_data", None)
        if inline_data is None:
            continue
        data = _coerce_bytes(getattr(inline_data, "data", None))
        if data:
            mime_type = getattr(inline_data, "mime_type", None) or "application/octet-stream"
            return InlinePayload(mime_type=mime_type, data=data)
    return None


def extract_citations(response: Any) -> tuple[Citation, ...]:
    """Collect (title, uri) pairs from the grounding metadata, in order."""

    candidate = _first_candidate(response)
    metadata = getattr(candidate, "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []
    citations: list[Citation] = []
    for chunk in chunks:
        web = getattr(chunk, "web", None)
        if web is None:
            continue
        citations.append(
            Citation(title=getattr(web, "title", None), uri=getattr(web, "uri", None))
        )
    return tuple(citations)


class GenAiClient:
    """Invoke Gemini models with one shared SDK client and caller-side timeouts."""

    def __init__(self, config: GenAiConfig, *, sdk_client: Any | None = None) -> None:
        self._config = config
        self._client = sdk_client
        if self._client is not None:
            return

        if config.api_key is None:
            logger.warning("GEMINI_API_KEY no configurada; el cliente GenAI queda deshabilitado")
            return

        try:
            self._client = genai.Client(
                api_key=config.api_key.get_secret_value(),
                http_options=types.HttpOptions(timeout=int(config.timeout_seconds * 1000)),
            )
        except Exception as exc:  # pragma: no cover - configuration issue
            logger.warning("No se pudo inicializar GenAI: %s", exc)
            self._client = None

    @property
    def configured(self) -> bool:
        return self._client is not None

    async def _generate(
        self,
        capability: str,
        *,
        model: str,
        contents: Any,
        config: types.GenerateContentConfig,
    ) -> Any:
        if self._client is None:
            observe_generation(capability, "unconfigured", 0.0)
            raise GenAiInvocationError("GenAI client is not configured.")

        start_time = time.perf_counter()
        try:
            response = await asyncio.wait_for(
                self._client.aio.models.generate_content(
                    model=model,
                    contents=contents,
                    config=config,
                ),
                timeout=self._config.timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            observe_generation(capability, "timeout", time.perf_counter() - start_time)
            raise GenAiInvocationError(
                f"{capability} call timed out after {self._config.timeout_seconds}s"
            ) from exc
        except Exception as exc:  # pragma: no cover - external dependency
            observe_generation(capability, "error", time.perf_counter() - start_time)
            raise GenAiInvocationError(str(exc)) from exc

        observe_generation(capability, "ok", time.perf_counter() - start_time)
        return response

    async def generate_text(
        self,
        prompt: str,
        *,
        grounded: bool = False,
        json_output: bool = False,
    ) -> TextGeneration:
        """Run a text completion, optionally with Google Search grounding.

        The service rejects JSON output mode together with search grounding, so
        ``json_output`` is ignored when ``grounded`` is set.
        """

        config_kwargs: dict[str, Any] = {"temperature": self._config.temperature}
        if grounded:
            config_kwargs["tools"] = [types.Tool(google_search=types.GoogleSearch())]
        elif json_output:
            config_kwargs["response_mime_type"] = "application/json"

        response = await self._generate(
            "text",
            model=self._config.text_model,
            contents=prompt,
            config=types.GenerateContentConfig(**config_kwargs),
        )
        text = getattr(response, "text", None) or ""
        return TextGeneration(text=text.strip(), citations=extract_citations(response))

    async def synthesize_speech(
        self,
        transcript: str,
        speakers: Sequence[tuple[str, str]],
    ) -> InlinePayload | None:
        """Multi-speaker TTS; ``speakers`` holds (label, voice) pairs."""

        speaker_voice_configs = [
            types.SpeakerVoiceConfig(
                speaker=label,
                voice_config=types.VoiceConfig(
                    prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=voice)
                ),
            )
            for label, voice in speakers
        ]
        response = await self._generate(
            "speech",
            model=self._config.tts_model,
            contents=[types.Content(parts=[types.Part(text=transcript)])],
            config=types.GenerateContentConfig(
                response_modalities=["AUDIO"],
                speech_config=types.SpeechConfig(
                    multi_speaker_voice_config=types.MultiSpeakerVoiceConfig(
                        speaker_voice_configs=speaker_voice_configs
                    )
                ),
            ),
        )
        return extract_inline_payload(response)

    async def generate_image(self, prompt: str) -> InlinePayload | None:
        response = await self._generate(
            "image",
            model=self._config.image_model,
            contents=[types.Content(parts=[types.Part(text=prompt)])],
            config=types.GenerateContentConfig(response_modalities=["IMAGE"]),
        )
        return extract_inline_payload(response)


__all__ = [
    "Citation",
    "GenAiClient",
    "GenAiInvocationError",
    "InlinePayload",
    "TextGeneration",
    "extract_citations",
    "extract_inline_payload",
]
