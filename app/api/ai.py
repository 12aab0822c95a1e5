from __future__ import annotations

from collections import Counter
from typing import Any

from fastapi import APIRouter, Depends

from app.api.dependencies import get_services
from app.schemas.generation import (
    ErrorResponse,
    PromptEnhanceRequest,
    ProvidersResponse,
    StoryGenerateRequest,
)
from app.services.generation_services import GenerationServices
from app.services.request_context import log_event
from generators.providers.provider_model import Capability
from generators.story.story_model import PromptEnhancement, TextGeneration

router = APIRouter(prefix="/api/ai", tags=["ai"])


@router.post(
    "/generate",
    response_model=TextGeneration,
    responses={422: {"model": ErrorResponse}},
)
async def generate_story(
    payload: StoryGenerateRequest,
    services: GenerationServices = Depends(get_services),
) -> TextGeneration:
    story = await services.stories.generate_text(payload.prompt, payload.genre, payload.length)
    log_event(
        event="story.generated",
        provider=story.provider,
        genre=story.genre,
        length=story.length,
        word_count=story.word_count,
        failures=len(story.failures),
    )
    return story


@router.post(
    "/enhance-prompt",
    response_model=PromptEnhancement,
    responses={422: {"model": ErrorResponse}},
)
async def enhance_prompt(
    payload: PromptEnhanceRequest,
    services: GenerationServices = Depends(get_services),
) -> PromptEnhancement:
    enhancement = await services.stories.enhance_prompt(
        payload.prompt, payload.genre, payload.length
    )
    log_event(
        event="prompt.enhanced",
        provider=enhancement.provider,
        fallback_used=enhancement.fallback_used,
    )
    return enhancement


@router.get("/providers", response_model=ProvidersResponse)
def list_providers(services: GenerationServices = Depends(get_services)) -> dict[str, Any]:
    rows = services.registry.describe()
    configured = Counter(row["capability"] for row in rows if row["configured"])
    summary = {
        capability.value: {
            "configured": configured.get(capability.value, 0),
            "registered": len(services.registry.registered(capability)),
        }
        for capability in Capability
    }
    summary["fallback_available"] = True
    return {"providers": rows, "summary": summary}
