"""Research stage: turn a place/period query into a Scenario."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional
from uuid import uuid4

from ecos.services.genai_client import Citation, GenAiClient, GenAiInvocationError

from .contract import ScenarioPayload, parse_scenario_payload
from .errors import MalformedResponse, ResearchFailed, SchemaViolation
from .prompts import build_research_prompt
from .types import Annotation, Character, DialogueLine, Scenario, Source

logger = logging.getLogger("ecos.pipeline")

DEFAULT_SOURCE_TITLE = "Fuente"


def _truncate(value: str, max_length: int = 500) -> str:
    if len(value) <= max_length:
        return value
    return value[: max_length - 3] + "..."


def collect_sources(citations: Iterable[Citation], limit: int) -> tuple[Source, ...]:
    """Keep citations with a URI, first occurrence wins, capped at ``limit``."""

    sources: list[Source] = []
    seen: set[str] = set()
    for citation in citations:
        if len(sources) >= limit:
            break
        uri = (citation.uri or "").strip()
        if not uri or uri in seen:
            continue
        seen.add(uri)
        title = (citation.title or "").strip() or DEFAULT_SOURCE_TITLE
        sources.append(Source(title=title, uri=uri))
    return tuple(sources)


def _build_scenario(
    payload: ScenarioPayload,
    *,
    location: str,
    period: Optional[str],
    sources: tuple[Source, ...],
) -> Scenario:
    characters = tuple(
        Character(
            name=item.name,
            gender=item.gender,
            voice=item.voice,
            visual_description=item.visual_description,
            bio=item.bio,
        )
        for item in payload.characters
    )
    script = tuple(
        DialogueLine(
            speaker=line.speaker,
            text=line.text,
            translation=line.translation,
            annotations=tuple(
                Annotation(phrase=note.phrase, explanation=note.explanation)
                for note in line.annotations
            ),
        )
        for line in payload.script
    )
    return Scenario(
        id=uuid4().hex,
        created_at=datetime.now(timezone.utc),
        location_input=location,
        date_input=period,
        context=payload.context,
        narrator_intro=payload.narrator_intro,
        accent_profile=payload.accent_profile,
        characters=characters,
        script=script,
        sources=sources,
    )


async def research_scenario(
    client: GenAiClient,
    location: str,
    period: Optional[str] = None,
    *,
    grounded: bool = True,
    max_sources: int = 3,
) -> Scenario:
    """Invoke the text model once and validate its scenario. Never retried."""

    if not location or not location.strip():
        raise ResearchFailed("Se requiere un lugar o evento para investigar.")
    period = period.strip() if period and period.strip() else None

    prompt = build_research_prompt(location, period)
    try:
        generation = await client.generate_text(
            prompt,
            grounded=grounded,
            json_output=not grounded,
        )
    except GenAiInvocationError as exc:
        logger.warning("Fallo en investigación location=%s: %s", location, exc)
        raise ResearchFailed(f"Fallo en la llamada de investigación: {exc}") from exc

    if not generation.text:
        raise ResearchFailed("El modelo devolvió una respuesta vacía.")

    logger.info(
        "Respuesta de investigación cruda location=%s: %s",
        location,
        _truncate(generation.text),
    )

    try:
        payload = parse_scenario_payload(generation.text)
    except MalformedResponse as exc:
        logger.warning("Respuesta sin JSON utilizable location=%s: %s", location, exc)
        raise
    except SchemaViolation as exc:
        logger.warning("Respuesta con esquema inválido location=%s campos=%s", location, exc.fields)
        raise

    if not payload.characters:
        logger.warning("Escenario sin personajes location=%s", location)
        raise SchemaViolation(["characters"], "El escenario no incluye personajes.")

    sources = collect_sources(generation.citations, max_sources) if grounded else ()
    scenario = _build_scenario(payload, location=location, period=period, sources=sources)
    logger.info(
        "Escenario creado id=%s personajes=%s lineas=%s fuentes=%s",
        scenario.id,
        len(scenario.characters),
        len(scenario.script),
        len(scenario.sources),
    )
    return scenario


__all__ = ["DEFAULT_SOURCE_TITLE", "collect_sources", "research_scenario"]
