"""Service layer helpers for external integrations."""

from .audio_decoder import DEFAULT_SAMPLE_RATE, DecodedAudio, decode_pcm16
from .genai_client import (
    Citation,
    GenAiClient,
    GenAiInvocationError,
    InlinePayload,
    TextGeneration,
)
from .recent_history import RecentQuery, RecentQueryStore

__all__ = [
    "DEFAULT_SAMPLE_RATE",
    "DecodedAudio",
    "decode_pcm16",
    "Citation",
    "GenAiClient",
    "GenAiInvocationError",
    "InlinePayload",
    "TextGeneration",
    "RecentQuery",
    "RecentQueryStore",
]
