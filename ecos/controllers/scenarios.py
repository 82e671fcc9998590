"""Scenario pipeline endpoints.

For a stage-by-stage map see `ecos.pipelines.scenario`. A POST to
`/scenarios` only starts the run; clients poll `/scenarios/current` to watch
the scenario appear, portraits arrive one by one and the audio become
available at `/scenarios/current/audio`.
"""

import logging

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import Response

from ecos.controllers.dependencies import PipelineDep
from ecos.pipelines.scenario import NoActiveScenario, PipelineBusy, SynthesisFailed
from ecos.views import (
    AudioRegenerationRequest,
    ErrorResponse,
    PipelineStateResponse,
    ScenarioRequest,
)

router = APIRouter(prefix="/scenarios", tags=["scenarios"])

logger = logging.getLogger(__name__)


@router.post(
    "/",
    response_model=PipelineStateResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def submit_scenario(
    payload: ScenarioRequest,
    pipeline: PipelineDep,
) -> PipelineStateResponse:
    """Start a new run, discarding whatever the previous one produced."""

    query = payload.to_query()
    if not query.location:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="location must not be blank",
        )
    generation = pipeline.submit(query)
    logger.info("Consulta aceptada generation=%s location=%s", generation, query.location)
    return PipelineStateResponse.from_snapshot(pipeline.snapshot())


@router.get("/current", response_model=PipelineStateResponse)
async def get_current_scenario(pipeline: PipelineDep) -> PipelineStateResponse:
    return PipelineStateResponse.from_snapshot(pipeline.snapshot())


@router.delete("/current", response_model=PipelineStateResponse)
async def reset_current_scenario(pipeline: PipelineDep) -> PipelineStateResponse:
    """Dismiss the current scenario or error and return to idle."""

    return PipelineStateResponse.from_snapshot(pipeline.reset())


@router.get(
    "/current/audio",
    response_class=Response,
    responses={404: {"model": ErrorResponse}},
)
async def get_current_audio(pipeline: PipelineDep) -> Response:
    """Return the decoded dialogue audio as a 16-bit WAV file."""

    snapshot = pipeline.snapshot()
    if snapshot.audio is None:
        detail = snapshot.audio_warning or "Audio not available"
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)
    return Response(content=snapshot.audio.to_wav_bytes(), media_type="audio/wav")


@router.post(
    "/current/audio",
    response_model=PipelineStateResponse,
    responses={409: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def regenerate_current_audio(
    payload: AudioRegenerationRequest,
    pipeline: PipelineDep,
) -> PipelineStateResponse:
    """Re-voice the loaded scenario, e.g. with the narrator switched off."""

    try:
        snapshot = await pipeline.regenerate_audio(include_narrator=payload.include_narrator)
    except (NoActiveScenario, PipelineBusy) as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except SynthesisFailed as exc:
        logger.warning("Regeneración de audio fallida: %s", exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return PipelineStateResponse.from_snapshot(snapshot)
