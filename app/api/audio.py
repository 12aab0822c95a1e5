from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from app.api.dependencies import get_services
from app.core.errors import build_error
from app.schemas.generation import (
    AudioGenerateRequest,
    ErrorResponse,
    StoryNarrationRequest,
    StoryNarrationResponse,
)
from app.services.generation_services import GenerationServices
from app.services.request_context import log_event
from generators.tts.tts_generator import NarrationAsset
from generators.tts.tts_text import clean_text_for_narration

router = APIRouter(prefix="/api/audio", tags=["audio"])


async def _narrate(
    services: GenerationServices,
    text: str,
    voice: str,
    speed: float,
) -> NarrationAsset:
    try:
        return await services.narration.generate_audio(text, voice=voice, speed=speed)
    except ValueError as exc:
        raise HTTPException(
            status_code=422,
            detail=build_error(code="VALIDATION_ERROR", message=str(exc)),
        ) from exc


@router.post(
    "/generate",
    response_model=NarrationAsset,
    responses={422: {"model": ErrorResponse}},
)
async def generate_audio(
    payload: AudioGenerateRequest,
    services: GenerationServices = Depends(get_services),
) -> NarrationAsset:
    asset = await _narrate(services, payload.text, payload.voice, payload.speed)
    log_event(
        event="audio.generated",
        provider=asset.provider,
        voice=asset.voice,
        estimated_duration_seconds=asset.estimated_duration_seconds,
        is_placeholder=asset.is_placeholder,
    )
    return asset


@router.post(
    "/narrate",
    response_model=StoryNarrationResponse,
    responses={422: {"model": ErrorResponse}},
)
async def narrate_story(
    payload: StoryNarrationRequest,
    services: GenerationServices = Depends(get_services),
) -> StoryNarrationResponse:
    asset = await _narrate(services, payload.story_text, payload.voice, payload.speed)
    character_count = len(clean_text_for_narration(payload.story_text))
    log_event(
        event="audio.narrated",
        story_id=payload.story_id,
        provider=asset.provider,
        character_count=character_count,
        is_placeholder=asset.is_placeholder,
    )
    return StoryNarrationResponse(
        story_id=payload.story_id,
        character_count=character_count,
        narration=asset,
    )
