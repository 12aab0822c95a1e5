import base64
import logging

from pydantic import BaseModel, ConfigDict, Field

from generators.fallback.fallback_generator import PlaceholderImage
from generators.fallback.fallback_templates import normalize_style
from generators.illustration.illustration_prompt_builder import build_image_prompt
from generators.providers.provider_model import Capability, GenerationRequest
from generators.providers.router import GenerationRouter

logger = logging.getLogger(__name__)


def to_data_url(payload: bytes, mime_type: str | None) -> str:
    encoded = base64.b64encode(payload).decode("ascii")
    return f"data:{mime_type or 'application/octet-stream'};base64,{encoded}"


class ImageAsset(BaseModel):
    model_config = ConfigDict(frozen=True)

    data_url: str = Field(..., description="Image bytes or placeholder SVG as a base64 data URL")
    mime_type: str
    prompt: str
    style: str
    provider: str
    is_placeholder: bool = False
    placeholder: PlaceholderImage | None = None
    failures: list[str] = Field(default_factory=list)


class IllustrationGenerator:
    def __init__(self, router: GenerationRouter):
        self.router = router

    async def generate_image(
        self,
        description: str,
        style: str | None = None,
        size: str = "1024x1024",
        scene_index: int | None = None,
        deadline: float | None = None,
    ) -> ImageAsset:
        style_key = normalize_style(style)
        prompt = build_image_prompt(description, style_key)
        result = await self.router.route(
            GenerationRequest(
                capability=Capability.IMAGE,
                prompt=prompt,
                style=style_key,
                target_size=size,
                scene_index=scene_index,
            ),
            deadline=deadline,
        )

        if isinstance(result.content, PlaceholderImage):
            logger.info("PLACEHOLDER scene_index=%s style=%s", scene_index, style_key)
            return ImageAsset(
                data_url=result.content.to_data_url(),
                mime_type="image/svg+xml",
                prompt=prompt,
                style=style_key,
                provider=result.provider_name,
                is_placeholder=True,
                placeholder=result.content,
                failures=list(result.failures),
            )

        mime_type = result.mime_type or "image/png"
        return ImageAsset(
            data_url=to_data_url(result.content, mime_type),
            mime_type=mime_type,
            prompt=prompt,
            style=style_key,
            provider=result.provider_name,
            failures=list(result.failures),
        )
