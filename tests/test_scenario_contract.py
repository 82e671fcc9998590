"""Tests for extracting and validating the research JSON."""

from __future__ import annotations

import json

import pytest

from conftest import scenario_json
from ecos.pipelines.scenario import MalformedResponse, SchemaViolation, parse_scenario_payload


def test_fenced_payload_is_unwrapped():
    raw = '```json\n{"context":"x","characters":[],"script":[]}\n```'

    payload = parse_scenario_payload(raw)

    assert payload.context == "x"
    assert payload.characters == []
    assert payload.script == []
    assert payload.narrator_intro is None
    assert payload.accent_profile == ""


def test_object_is_found_inside_prose():
    raw = "Claro, aquí está el escenario:\n" + scenario_json() + "\n¡Espero que te guste!"

    payload = parse_scenario_payload(raw)

    assert [c.name for c in payload.characters] == ["Citlali", "Tochtli"]
    assert payload.script[0].annotations[0].phrase == "cacao"


def test_braces_in_prose_before_object_are_skipped():
    raw = "Nota {sin JSON} previa. " + scenario_json() + " y un cierre }"

    payload = parse_scenario_payload(raw)

    assert payload.context.startswith("Mercado de Tlatelolco")


def test_braces_inside_string_values_survive():
    raw = scenario_json(context="Una llave { suelta en el texto")

    payload = parse_scenario_payload(raw)

    assert payload.context == "Una llave { suelta en el texto"


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "no hay objeto aquí",
        "[1, 2, 3]",
        '{"context": "sin cerrar"',
        '{"context": "x", "characters": [{"name": "A"}], "script": [],}',
        'Aquí va: {"context": "x", "characters": [{"name": "A"}] "script": []} fin',
    ],
)
def test_missing_object_is_malformed(raw):
    with pytest.raises(MalformedResponse):
        parse_scenario_payload(raw)


def test_broken_outer_object_never_yields_nested_fragment():
    raw = scenario_json()[:-1] + ",}"

    with pytest.raises(MalformedResponse):
        parse_scenario_payload(raw)


def test_missing_required_fields_are_listed():
    raw = json.dumps({"characters": [], "script": [{"speaker": "A", "text": "hola"}]})

    with pytest.raises(SchemaViolation) as excinfo:
        parse_scenario_payload(raw)

    assert "context" in excinfo.value.fields
    assert "script.0.translation" in excinfo.value.fields


def test_blank_context_is_a_schema_violation():
    with pytest.raises(SchemaViolation) as excinfo:
        parse_scenario_payload(scenario_json(context="   "))

    assert excinfo.value.fields == ("context",)


def test_character_without_name_is_rejected():
    raw = scenario_json(characters=[{"gender": "female"}])

    with pytest.raises(SchemaViolation) as excinfo:
        parse_scenario_payload(raw)

    assert excinfo.value.fields == ("characters.0.name",)


def test_character_fields_are_normalized():
    raw = scenario_json(
        characters=[
            {"name": "Xóchitl", "gender": "Femenino"},
            {"name": "Juan", "gender": "male", "voice": " Charon "},
            {"name": "Anónimo", "gender": None, "visualDescription": None},
        ]
    )

    first, second, third = parse_scenario_payload(raw).characters

    assert (first.gender, first.voice) == ("female", "kore")
    assert (second.gender, second.voice) == ("male", "charon")
    assert (third.gender, third.voice, third.visual_description) == ("male", "puck", "")


def test_unusable_annotations_are_dropped():
    raw = scenario_json(
        script=[
            {
                "speaker": "Citlali",
                "text": "Niltze",
                "translation": "Hola",
                "annotations": [{"explanation": "sin frase"}, "texto", {"phrase": "niltze"}],
            }
        ]
    )

    (line,) = parse_scenario_payload(raw).script

    assert [(a.phrase, a.explanation) for a in line.annotations] == [("niltze", "")]
