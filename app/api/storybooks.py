from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.dependencies import get_services
from app.schemas.generation import (
    ErrorResponse,
    StorybookFromPromptRequest,
    StorybookGenerateRequest,
)
from app.services.generation_services import GenerationServices
from app.services.request_context import log_event
from generators.storybook.storybook_model import STORYBOOK_STYLES, StyleInfo, Storybook

router = APIRouter(prefix="/api/storybooks", tags=["storybooks"])


def _log_storybook(storybook: Storybook) -> None:
    log_event(
        event="storybook.generated",
        storybook_id=storybook.id,
        total_pages=storybook.total_pages,
        has_images=storybook.has_images,
        has_audio=storybook.has_audio,
        errors=len(storybook.metadata.errors),
    )


@router.post(
    "/generate",
    response_model=Storybook,
    responses={422: {"model": ErrorResponse}},
)
async def generate_storybook(
    payload: StorybookGenerateRequest,
    services: GenerationServices = Depends(get_services),
) -> Storybook:
    storybook = await services.storybooks.generate_storybook(
        payload.story_text,
        payload.title,
        genre=payload.genre,
        style=payload.style,
        scene_count=payload.resolved_scene_count(),
        include_images=payload.include_images,
        include_audio=payload.include_audio,
        story_id=payload.story_id,
        voice=payload.voice,
    )
    _log_storybook(storybook)
    return storybook


@router.post(
    "/create-from-prompt",
    response_model=Storybook,
    responses={422: {"model": ErrorResponse}},
)
async def create_storybook_from_prompt(
    payload: StorybookFromPromptRequest,
    services: GenerationServices = Depends(get_services),
) -> Storybook:
    storybook = await services.storybooks.create_from_prompt(
        services.stories,
        payload.prompt,
        genre=payload.genre,
        length=payload.length,
        style=payload.style,
        scene_count=payload.resolved_scene_count(),
        include_images=payload.include_images,
        include_audio=payload.include_audio,
        voice=payload.voice,
    )
    _log_storybook(storybook)
    return storybook


@router.get("/info/styles", response_model=list[StyleInfo])
def list_styles() -> tuple[StyleInfo, ...]:
    return STORYBOOK_STYLES
