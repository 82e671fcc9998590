"""Portrait synthesis stage. Failures never leave this module."""

from __future__ import annotations

import base64
import logging
from typing import Optional

from ecos.services.genai_client import GenAiClient, GenAiInvocationError

from .errors import PortraitFailed
from .prompts import build_portrait_prompt
from .types import Character

logger = logging.getLogger("ecos.pipeline")


def portrait_description(character: Character) -> str:
    return character.visual_description.strip() or character.name


async def _request_portrait(client: GenAiClient, description: str, context: str) -> str:
    try:
        payload = await client.generate_image(build_portrait_prompt(description, context))
    except GenAiInvocationError as exc:
        raise PortraitFailed(str(exc)) from exc
    if payload is None or not payload.data:
        raise PortraitFailed("El modelo no devolvió imagen.")
    encoded = base64.b64encode(payload.data).decode("ascii")
    return f"data:{payload.mime_type};base64,{encoded}"


async def synthesize_portrait(
    client: GenAiClient,
    description: str,
    context: str,
) -> Optional[str]:
    """Return a data URI for the portrait, or ``None`` if it could not be made."""

    try:
        return await _request_portrait(client, description, context)
    except PortraitFailed as exc:
        logger.warning("Retrato no generado: %s", exc)
        return None


__all__ = ["portrait_description", "synthesize_portrait"]
