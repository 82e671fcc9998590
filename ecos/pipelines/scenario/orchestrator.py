"""Pipeline orchestrator: research, then speech and portraits concurrently.

State machine::

    idle -> researching -> awaiting_media -> complete
                 \\
                  -> failed

Every run is tagged with a generation number. State changes coming from a
run whose generation is no longer current are dropped, so a late result from
an abandoned query can never overwrite the state of the newer one. Portrait
completions are merged one by one as copy-on-write patches on the current
scenario; audio is replaced wholesale.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Coroutine, Optional

from ecos.services.audio_decoder import DEFAULT_SAMPLE_RATE, DecodedAudio
from ecos.services.genai_client import GenAiClient
from ecos.services.recent_history import RecentQuery, RecentQueryStore
from ecos.telemetry import increment_pipeline_run

from .errors import NoActiveScenario, PipelineBusy, ResearchFailed, SynthesisFailed
from .portraits import portrait_description, synthesize_portrait
from .research import research_scenario
from .speech import synthesize_scenario_audio
from .types import Character, PipelineCapabilities, Scenario, ScenarioQuery

logger = logging.getLogger("ecos.pipeline")

RESEARCH_ERROR_MESSAGE = (
    "Falla en la sintonización temporal. Verifique su conexión con el presente: {detail}"
)
AUDIO_WARNING_MESSAGE = "Audio no disponible: {detail}"


class PipelineStatus(str, Enum):
    IDLE = "idle"
    RESEARCHING = "researching"
    AWAITING_MEDIA = "awaiting_media"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass(frozen=True)
class PipelineSnapshot:
    """Everything the presentation layer needs to render the current run."""

    generation: int
    status: PipelineStatus
    query: Optional[ScenarioQuery] = None
    scenario: Optional[Scenario] = None
    audio: Optional[DecodedAudio] = None
    audio_pending: bool = False
    audio_warning: Optional[str] = None
    error: Optional[str] = None

    @property
    def busy(self) -> bool:
        return self.audio_pending or self.status in (
            PipelineStatus.RESEARCHING,
            PipelineStatus.AWAITING_MEDIA,
        )


def _current_task() -> Optional[asyncio.Task]:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None


class ScenarioPipeline:
    """Owns the single shared scenario state of the application."""

    def __init__(
        self,
        client: GenAiClient,
        *,
        capabilities: PipelineCapabilities = PipelineCapabilities(),
        history: Optional[RecentQueryStore] = None,
        default_voice: str = "zephyr",
        sample_rate_hz: int = DEFAULT_SAMPLE_RATE,
        channels: int = 1,
        max_sources: int = 3,
    ) -> None:
        self._client = client
        self._capabilities = capabilities
        self._history = history
        self._default_voice = default_voice
        self._sample_rate_hz = sample_rate_hz
        self._channels = channels
        self._max_sources = max_sources

        self._generation = 0
        self._state = PipelineSnapshot(generation=0, status=PipelineStatus.IDLE)
        self._task: Optional[asyncio.Task] = None
        self._media_tasks: set[asyncio.Task] = set()

    @property
    def capabilities(self) -> PipelineCapabilities:
        return self._capabilities

    def snapshot(self) -> PipelineSnapshot:
        return self._state

    # -- run lifecycle -------------------------------------------------

    def submit(self, query: ScenarioQuery) -> int:
        """Start a run in the background and return its generation."""

        generation = self._start_generation(query)
        self._task = asyncio.create_task(
            self._execute(generation, query),
            name=f"scenario-pipeline-{generation}",
        )
        return generation

    async def run(self, query: ScenarioQuery) -> PipelineSnapshot:
        """Run the whole pipeline in the caller's task."""

        generation = self._start_generation(query)
        await self._execute(generation, query)
        return self._state

    async def wait(self) -> PipelineSnapshot:
        """Block until the background run (if any) has settled."""

        while self._task is not None and not self._task.done():
            await asyncio.wait({self._task})
        return self._state

    def reset(self) -> PipelineSnapshot:
        """Abandon any in-flight work and go back to idle."""

        self._cancel_inflight()
        self._generation += 1
        self._state = PipelineSnapshot(generation=self._generation, status=PipelineStatus.IDLE)
        return self._state

    async def aclose(self) -> None:
        pending = [task for task in self._inflight_tasks() if not task.done()]
        self._cancel_inflight()
        if pending:
            await asyncio.wait(pending)

    async def regenerate_audio(self, *, include_narrator: bool = True) -> PipelineSnapshot:
        """Re-voice the current scenario without running research again."""

        state = self._state
        if state.scenario is None:
            raise NoActiveScenario("No hay escenario cargado.")
        if state.busy:
            raise PipelineBusy("El escenario todavía se está generando.")

        generation = state.generation
        self._update(generation, audio=None, audio_pending=True, audio_warning=None)
        task = self._spawn_media(self._speech_job(generation, state.scenario, include_narrator))
        try:
            await asyncio.wait({task})
        finally:
            self._media_tasks.discard(task)
        if not task.cancelled() and task.result() is False:
            raise SynthesisFailed(self._state.audio_warning or "Audio no generado")
        return self._state

    # -- internals -----------------------------------------------------

    def _inflight_tasks(self) -> list[asyncio.Task]:
        tasks = list(self._media_tasks)
        if self._task is not None:
            tasks.append(self._task)
        return tasks

    def _cancel_inflight(self) -> None:
        current = _current_task()
        for task in self._inflight_tasks():
            if task is not current and not task.done():
                task.cancel()
        self._media_tasks.clear()
        self._task = None

    def _start_generation(self, query: ScenarioQuery) -> int:
        self._cancel_inflight()
        self._generation += 1
        self._state = PipelineSnapshot(
            generation=self._generation,
            status=PipelineStatus.RESEARCHING,
            query=query,
        )
        logger.info(
            "Nueva consulta generation=%s location=%s period=%s",
            self._generation,
            query.location,
            query.period,
        )
        return self._generation

    def _update(self, generation: int, **changes: Any) -> bool:
        if generation != self._generation:
            logger.debug(
                "Resultado obsoleto descartado generation=%s actual=%s",
                generation,
                self._generation,
            )
            return False
        self._state = replace(self._state, **changes)
        return True

    def _patch_avatar(self, generation: int, index: int, avatar_url: str) -> bool:
        if generation != self._generation or self._state.scenario is None:
            return False
        scenario = self._state.scenario.with_avatar(index, avatar_url)
        self._state = replace(self._state, scenario=scenario)
        return True

    def _spawn_media(self, coroutine: Coroutine[Any, Any, Any]) -> asyncio.Task:
        task = asyncio.create_task(coroutine)
        self._media_tasks.add(task)
        return task

    def _remember(self, query: ScenarioQuery, scenario: Scenario) -> None:
        if self._history is None:
            return
        self._history.remember(
            RecentQuery(
                location=query.location,
                period=query.period,
                scenario_id=scenario.id,
                created_at=scenario.created_at,
            )
        )

    async def _execute(self, generation: int, query: ScenarioQuery) -> None:
        try:
            scenario = await research_scenario(
                self._client,
                query.location,
                query.period,
                grounded=self._capabilities.grounding_enabled,
                max_sources=self._max_sources,
            )
        except ResearchFailed as exc:
            self._fail(generation, exc)
            return
        except Exception as exc:
            logger.exception("Fallo inesperado en investigación generation=%s", generation)
            self._fail(generation, exc)
            return

        if not self._update(
            generation,
            status=PipelineStatus.AWAITING_MEDIA,
            scenario=scenario,
            audio_pending=True,
        ):
            return
        self._remember(query, scenario)

        tasks = [self._spawn_media(self._speech_job(generation, scenario, True))]
        if query.generate_portraits and self._capabilities.portraits_enabled:
            tasks.extend(
                self._spawn_media(
                    self._portrait_job(generation, index, character, scenario.context)
                )
                for index, character in enumerate(scenario.characters)
            )

        try:
            results = await asyncio.gather(*tasks, return_exceptions=True)
        finally:
            self._media_tasks.difference_update(tasks)

        for result in results:
            if isinstance(result, Exception):
                logger.error(
                    "Tarea de medios terminó con error generation=%s: %r",
                    generation,
                    result,
                )

        if self._update(generation, status=PipelineStatus.COMPLETE, audio_pending=False):
            increment_pipeline_run("complete")
            logger.info(
                "Escenario completo generation=%s audio=%s retratos=%s",
                generation,
                self._state.audio is not None,
                sum(1 for c in self._state.scenario.characters if c.avatar_url),
            )

    def _fail(self, generation: int, exc: Exception) -> None:
        if self._update(
            generation,
            status=PipelineStatus.FAILED,
            scenario=None,
            audio=None,
            audio_pending=False,
            error=RESEARCH_ERROR_MESSAGE.format(detail=exc),
        ):
            increment_pipeline_run("failed")
            logger.warning(
                "Investigación fallida generation=%s tipo=%s: %s",
                generation,
                type(exc).__name__,
                exc,
            )

    async def _speech_job(
        self,
        generation: int,
        scenario: Scenario,
        include_narrator: bool,
    ) -> bool:
        try:
            audio = await synthesize_scenario_audio(
                self._client,
                scenario,
                include_narrator=include_narrator,
                default_voice=self._default_voice,
                sample_rate_hz=self._sample_rate_hz,
                channels=self._channels,
            )
        except SynthesisFailed as exc:
            self._update(
                generation,
                audio=None,
                audio_pending=False,
                audio_warning=AUDIO_WARNING_MESSAGE.format(detail=exc),
            )
            return False
        except Exception as exc:
            logger.exception("Fallo inesperado en síntesis de voz generation=%s", generation)
            self._update(
                generation,
                audio=None,
                audio_pending=False,
                audio_warning=AUDIO_WARNING_MESSAGE.format(detail=exc),
            )
            return False
        self._update(generation, audio=audio, audio_pending=False, audio_warning=None)
        return True

    async def _portrait_job(
        self,
        generation: int,
        index: int,
        character: Character,
        context: str,
    ) -> bool:
        avatar_url = await synthesize_portrait(
            self._client,
            portrait_description(character),
            context,
        )
        if avatar_url is None:
            return False
        return self._patch_avatar(generation, index, avatar_url)


__all__ = [
    "AUDIO_WARNING_MESSAGE",
    "PipelineSnapshot",
    "PipelineStatus",
    "RESEARCH_ERROR_MESSAGE",
    "ScenarioPipeline",
]
