"""Schemas for scenario requests and pipeline state responses."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ecos.pipelines.scenario import PipelineSnapshot, Scenario, ScenarioQuery


class ScenarioRequest(BaseModel):
    """Request schema for starting a new scenario run."""

    location: str = Field(..., min_length=1, description="Place or event to research")
    date: Optional[str] = Field(None, description="Optional period or date hint")
    generate_portraits: bool = Field(
        True, alias="generatePortraits", description="Request AI portraits of the cast"
    )

    model_config = ConfigDict(populate_by_name=True)

    def to_query(self) -> ScenarioQuery:
        period = self.date.strip() if self.date and self.date.strip() else None
        return ScenarioQuery(
            location=self.location.strip(),
            period=period,
            generate_portraits=self.generate_portraits,
        )


class AudioRegenerationRequest(BaseModel):
    include_narrator: bool = Field(True, alias="includeNarrator")

    model_config = ConfigDict(populate_by_name=True)


class AnnotationView(BaseModel):
    phrase: str
    explanation: str


class DialogueLineView(BaseModel):
    speaker: str
    text: str
    translation: str
    annotations: List[AnnotationView] = Field(default_factory=list)


class CharacterView(BaseModel):
    name: str
    gender: str
    voice: str
    visual_description: str = Field("", alias="visualDescription")
    bio: str = ""
    avatar_url: Optional[str] = Field(None, alias="avatarUrl")

    model_config = ConfigDict(populate_by_name=True)


class SourceView(BaseModel):
    title: str
    uri: str


class ScenarioView(BaseModel):
    id: str
    created_at: datetime = Field(..., alias="createdAt")
    location_input: str = Field(..., alias="locationInput")
    date_input: Optional[str] = Field(None, alias="dateInput")
    context: str
    narrator_intro: Optional[str] = Field(None, alias="narratorIntro")
    accent_profile: str = Field("", alias="accentProfile")
    characters: List[CharacterView]
    script: List[DialogueLineView]
    sources: List[SourceView] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_scenario(cls, scenario: Scenario) -> "ScenarioView":
        return cls(
            id=scenario.id,
            created_at=scenario.created_at,
            location_input=scenario.location_input,
            date_input=scenario.date_input,
            context=scenario.context,
            narrator_intro=scenario.narrator_intro,
            accent_profile=scenario.accent_profile,
            characters=[
                CharacterView(
                    name=character.name,
                    gender=character.gender,
                    voice=character.voice,
                    visual_description=character.visual_description,
                    bio=character.bio,
                    avatar_url=character.avatar_url,
                )
                for character in scenario.characters
            ],
            script=[
                DialogueLineView(
                    speaker=line.speaker,
                    text=line.text,
                    translation=line.translation,
                    annotations=[
                        AnnotationView(phrase=note.phrase, explanation=note.explanation)
                        for note in line.annotations
                    ],
                )
                for line in scenario.script
            ],
            sources=[SourceView(title=source.title, uri=source.uri) for source in scenario.sources],
        )


class AudioInfoView(BaseModel):
    sample_rate: int = Field(..., alias="sampleRate")
    channels: int
    frames: int
    duration_seconds: float = Field(..., alias="durationSeconds")

    model_config = ConfigDict(populate_by_name=True)


class PipelineStateResponse(BaseModel):
    """Response schema describing the current pipeline run."""

    generation: int
    status: str
    busy: bool
    scenario: Optional[ScenarioView] = None
    audio: Optional[AudioInfoView] = None
    audio_pending: bool = Field(False, alias="audioPending")
    audio_warning: Optional[str] = Field(None, alias="audioWarning")
    error: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_snapshot(cls, snapshot: PipelineSnapshot) -> "PipelineStateResponse":
        audio = None
        if snapshot.audio is not None:
            audio = AudioInfoView(
                sample_rate=snapshot.audio.sample_rate,
                channels=snapshot.audio.channels,
                frames=snapshot.audio.frame_count,
                duration_seconds=round(snapshot.audio.duration_seconds, 3),
            )
        return cls(
            generation=snapshot.generation,
            status=snapshot.status.value,
            busy=snapshot.busy,
            scenario=ScenarioView.from_scenario(snapshot.scenario) if snapshot.scenario else None,
            audio=audio,
            audio_pending=snapshot.audio_pending,
            audio_warning=snapshot.audio_warning,
            error=snapshot.error,
        )
