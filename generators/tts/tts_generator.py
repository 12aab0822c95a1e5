import logging
import uuid
from typing import Callable

from pydantic import BaseModel, ConfigDict, Field

from generators.fallback.fallback_generator import NarrationPlaceholder, estimate_narration_seconds
from generators.illustration.illustration_generator import to_data_url
from generators.providers.provider_model import Capability, GenerationRequest
from generators.providers.router import GenerationRouter
from generators.tts.tts_text import clamp_speed, clean_text_for_narration

logger = logging.getLogger(__name__)

VOICES = ("male", "female", "child", "elderly")


def _narration_id() -> str:
    return f"narration-{uuid.uuid4().hex[:12]}"


class NarrationAsset(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    data_url: str | None = Field(default=None, description="Audio as a base64 data URL; None for placeholders")
    mime_type: str | None = None
    provider: str
    voice: str
    speed: float
    estimated_duration_seconds: int = Field(..., ge=0)
    transcript: str
    is_placeholder: bool = False
    failures: list[str] = Field(default_factory=list)


class NarrationGenerator:
    def __init__(
        self,
        router: GenerationRouter,
        id_factory: Callable[[], str] | None = None,
    ):
        self.router = router
        self.id_factory = id_factory or _narration_id

    async def generate_audio(
        self,
        text: str,
        voice: str = "female",
        speed: float = 1.0,
        deadline: float | None = None,
    ) -> NarrationAsset:
        cleaned = clean_text_for_narration(text)
        if not cleaned:
            raise ValueError("Narration text is required.")

        speed = clamp_speed(speed)
        result = await self.router.route(
            GenerationRequest(
                capability=Capability.AUDIO,
                prompt=cleaned,
                voice=voice,
                speed=speed,
            ),
            deadline=deadline,
        )
        duration = estimate_narration_seconds(text)

        if isinstance(result.content, NarrationPlaceholder):
            logger.info("PLACEHOLDER narration estimated_sec=%s", duration)
            return NarrationAsset(
                id=self.id_factory(),
                provider=result.provider_name,
                voice=voice,
                speed=speed,
                estimated_duration_seconds=duration,
                transcript=result.content.transcript,
                is_placeholder=True,
                failures=list(result.failures),
            )

        return NarrationAsset(
            id=self.id_factory(),
            data_url=to_data_url(result.content, result.mime_type),
            mime_type=result.mime_type,
            provider=result.provider_name,
            voice=voice,
            speed=speed,
            estimated_duration_seconds=duration,
            transcript=cleaned,
            failures=list(result.failures),
        )
