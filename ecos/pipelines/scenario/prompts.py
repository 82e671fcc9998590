"""Prompt builders for the research and portrait stages."""

from __future__ import annotations

from typing import Optional

from .types import VOICE_NAMES

_SUGGESTED_VOICES = ("kore", "puck", "zephyr", "callirrhoe")

_RESEARCH_SCHEMA = """{
  "context": "Descripción rica del ambiente y del momento exacto.",
  "narratorIntro": "Introducción breve, en voz de narrador, para escuchar antes del diálogo.",
  "accentProfile": "Breve descripción del lenguaje y acento usados.",
  "characters": [
    {"name": "Nombre realista", "gender": "male|female", "voice": "%(voices)s", "visualDescription": "Ropa y rasgos físicos detallados", "bio": "Rol social"}
  ],
  "script": [
    {"speaker": "Nombre", "text": "Diálogo en idioma o variante original (ej: náhuatl, maya, español de 1800)", "translation": "Traducción al español moderno", "annotations": [{"phrase": "palabra clave", "explanation": "significado cultural"}]}
  ]
}"""


def build_research_prompt(location: str, period: Optional[str] = None) -> str:
    """Ask the text model for one scenario as a JSON object."""

    location_text = location.strip()
    period_text = (period or "").strip()
    period_clause = f" en la fecha o época de {period_text}" if period_text else ""
    schema = _RESEARCH_SCHEMA % {"voices": "|".join(_SUGGESTED_VOICES)}
    return (
        "Actúa como un historiador experto. "
        f'Investiga el suceso o lugar: "{location_text}"{period_clause}.\n'
        "Genera un escenario histórico inmersivo con uno o dos personajes "
        "y un diálogo breve entre ellos.\n"
        f"Las voces válidas son: {', '.join(VOICE_NAMES)}; elige una acorde al género.\n"
        "Responde únicamente con un objeto JSON con este esquema:\n"
        f"{schema}"
    )


def build_portrait_prompt(description: str, context: str) -> str:
    return (
        "Cinematic period portrait, extreme detail, oil painting style: "
        f"{description.strip()}. Historical setting: {context.strip()}. 4k resolution."
    )


__all__ = ["build_portrait_prompt", "build_research_prompt"]
