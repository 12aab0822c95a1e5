from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.dependencies import get_services
from app.schemas.generation import ErrorResponse, ImageGenerateRequest
from app.services.generation_services import GenerationServices
from app.services.request_context import log_event
from generators.illustration.illustration_generator import ImageAsset

router = APIRouter(prefix="/api/images", tags=["images"])


@router.post(
    "/generate",
    response_model=ImageAsset,
    responses={422: {"model": ErrorResponse}},
)
async def generate_image(
    payload: ImageGenerateRequest,
    services: GenerationServices = Depends(get_services),
) -> ImageAsset:
    asset = await services.illustrations.generate_image(
        payload.description,
        payload.style,
        size=payload.size,
    )
    log_event(
        event="image.generated",
        provider=asset.provider,
        style=asset.style,
        is_placeholder=asset.is_placeholder,
    )
    return asset
