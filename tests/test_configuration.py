"""Tests for settings parsing and pipeline wiring."""

from __future__ import annotations

from conftest import FakeGenAiClient
from ecos.config.dependencies import build_scenario_pipeline
from ecos.config.settings import Settings


def test_environment_overrides_pipeline_switches(monkeypatch):
    monkeypatch.setenv("PIPELINE_PORTRAITS_ENABLED", "false")
    monkeypatch.setenv("PIPELINE_MAX_SOURCES", "1")
    monkeypatch.setenv("GENAI_GROUNDING_ENABLED", "false")
    monkeypatch.setenv("GENAI_TEXT_MODEL", "custom-text")

    config = Settings(_env_file=None)

    assert config.pipeline.portraits_enabled is False
    assert config.pipeline.max_sources == 1
    assert config.genai.grounding_enabled is False
    assert config.genai.text_model == "custom-text"


def test_pipeline_receives_capabilities_from_settings(monkeypatch):
    monkeypatch.setenv("PIPELINE_PORTRAITS_ENABLED", "false")
    config = Settings(_env_file=None)

    pipeline = build_scenario_pipeline(config, client=FakeGenAiClient())

    assert pipeline.capabilities.portraits_enabled is False
    assert pipeline.capabilities.grounding_enabled is True
    assert pipeline.snapshot().status.value == "idle"
