"""Scenario generation pipeline package.

Modules are organised by the order in which a query executes:

1. `prompts` – assemble the research and portrait prompts.
2. `research` – call the text model and validate its JSON (`contract`).
3. `speech` – map the cast onto two voice slots and decode the PCM audio.
4. `portraits` – one image request per character, failures swallowed.
5. `orchestrator` – sequence the stages and merge results into shared state.

The FastAPI controllers import from here so contributors can jump straight
to the relevant stage.
"""

from .contract import ScenarioPayload, parse_scenario_payload
from .errors import (
    MalformedResponse,
    NoActiveScenario,
    PipelineBusy,
    PortraitFailed,
    ResearchFailed,
    ScenarioPipelineError,
    SchemaViolation,
    SynthesisFailed,
)
from .orchestrator import PipelineSnapshot, PipelineStatus, ScenarioPipeline
from .portraits import synthesize_portrait
from .research import research_scenario
from .speech import (
    assign_voice_slots,
    build_speech_plan,
    resolve_speaker_slot,
    synthesize_scenario_audio,
)
from .types import (
    Annotation,
    Character,
    DialogueLine,
    PipelineCapabilities,
    Scenario,
    ScenarioQuery,
    Source,
    VOICE_NAMES,
)

__all__ = [
    "Annotation",
    "Character",
    "DialogueLine",
    "MalformedResponse",
    "NoActiveScenario",
    "PipelineBusy",
    "PipelineCapabilities",
    "PipelineSnapshot",
    "PipelineStatus",
    "PortraitFailed",
    "ResearchFailed",
    "Scenario",
    "ScenarioPayload",
    "ScenarioPipeline",
    "ScenarioPipelineError",
    "ScenarioQuery",
    "SchemaViolation",
    "Source",
    "SynthesisFailed",
    "VOICE_NAMES",
    "assign_voice_slots",
    "build_speech_plan",
    "parse_scenario_payload",
    "research_scenario",
    "resolve_speaker_slot",
    "synthesize_portrait",
    "synthesize_scenario_audio",
]
