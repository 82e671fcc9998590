"""Process-wide service construction, done once at application startup."""

from ecos.pipelines.scenario import PipelineCapabilities, ScenarioPipeline
from ecos.services import GenAiClient, RecentQueryStore

from .settings import Settings, settings


def build_genai_client(config: Settings = settings) -> GenAiClient:
    """Create the single GenAI client shared by every pipeline stage."""

    return GenAiClient(config.genai)


def build_scenario_pipeline(
    config: Settings = settings,
    *,
    client: GenAiClient | None = None,
    history: RecentQueryStore | None = None,
) -> ScenarioPipeline:
    """Wire the orchestrator with explicit configuration and capabilities."""

    capabilities = PipelineCapabilities(
        portraits_enabled=config.pipeline.portraits_enabled,
        grounding_enabled=config.genai.grounding_enabled,
    )
    return ScenarioPipeline(
        client or build_genai_client(config),
        capabilities=capabilities,
        history=history if history is not None else RecentQueryStore(config.pipeline.recent_queries_limit),
        default_voice=config.pipeline.default_voice,
        sample_rate_hz=config.pipeline.sample_rate_hz,
        channels=config.pipeline.channels,
        max_sources=config.pipeline.max_sources,
    )
