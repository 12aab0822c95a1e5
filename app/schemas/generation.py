from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from app.core.config import get_settings
from generators.tts.tts_generator import NarrationAsset


def _normalize_choice(value: str) -> str:
    return value.strip().lower().replace("_", "-").replace(" ", "-")


def _check_choice(field_name: str, value: str, allowed: tuple[str, ...]) -> str:
    normalized = _normalize_choice(value)
    if normalized not in allowed:
        raise ValueError(f"{field_name} must be one of {list(allowed)}")
    return normalized


def _check_text(field_name: str, value: str, max_len: int) -> str:
    normalized = value.strip()
    if not normalized:
        raise ValueError(f"{field_name} must not be empty")
    if len(normalized) > max_len:
        raise ValueError(f"{field_name} must be <= {max_len} characters")
    return normalized


class GenreLengthMixin(BaseModel):
    genre: str = Field(default="fantasy")
    length: str = Field(default="medium")

    @field_validator("genre")
    @classmethod
    def validate_genre(cls, value: str) -> str:
        return _check_choice("genre", value, get_settings().allowed_genres)

    @field_validator("length")
    @classmethod
    def validate_length(cls, value: str) -> str:
        return _check_choice("length", value, get_settings().allowed_lengths)


class StoryGenerateRequest(GenreLengthMixin):
    prompt: str = Field(..., min_length=1)

    @field_validator("prompt")
    @classmethod
    def validate_prompt(cls, value: str) -> str:
        return _check_text("prompt", value, get_settings().prompt_max_len)


class PromptEnhanceRequest(StoryGenerateRequest):
    pass


class ImageGenerateRequest(BaseModel):
    description: str = Field(..., min_length=1)
    style: str = Field(default="children-book")
    size: str = Field(default="1024x1024")

    @field_validator("description")
    @classmethod
    def validate_description(cls, value: str) -> str:
        return _check_text("description", value, get_settings().prompt_max_len)

    @field_validator("style")
    @classmethod
    def validate_style(cls, value: str) -> str:
        return _check_choice("style", value, get_settings().allowed_styles)

    @field_validator("size")
    @classmethod
    def validate_size(cls, value: str) -> str:
        normalized = value.strip().lower()
        allowed = get_settings().allowed_image_sizes
        if normalized not in allowed:
            raise ValueError(f"size must be one of {list(allowed)}")
        return normalized


class AudioGenerateRequest(BaseModel):
    text: str = Field(..., min_length=1)
    voice: str = Field(default="female")
    speed: float = Field(default=1.0, ge=0.25, le=4.0)

    @field_validator("text")
    @classmethod
    def validate_text(cls, value: str) -> str:
        return _check_text("text", value, get_settings().narration_text_max_len)

    @field_validator("voice")
    @classmethod
    def validate_voice(cls, value: str) -> str:
        return _check_choice("voice", value, get_settings().allowed_voices)


class StoryNarrationRequest(BaseModel):
    story_text: str = Field(..., min_length=1)
    story_id: str | None = None
    voice: str = Field(default="female")
    speed: float = Field(default=1.0, ge=0.25, le=4.0)

    @field_validator("story_text")
    @classmethod
    def validate_story_text(cls, value: str) -> str:
        return _check_text("story_text", value, get_settings().story_narration_max_len)

    @field_validator("voice")
    @classmethod
    def validate_voice(cls, value: str) -> str:
        return _check_choice("voice", value, get_settings().allowed_voices)


class StoryNarrationResponse(BaseModel):
    story_id: str | None = None
    character_count: int = Field(..., ge=0, description="Length of the cleaned narration script")
    narration: NarrationAsset


class StorybookOptions(BaseModel):
    style: str = Field(default="children-book")
    scene_count: int | None = Field(default=None, description="Defaults to the configured scene count")
    include_images: bool = True
    include_audio: bool = True
    voice: str = Field(default="female")

    @field_validator("style")
    @classmethod
    def validate_style(cls, value: str) -> str:
        return _check_choice("style", value, get_settings().allowed_styles)

    @field_validator("scene_count")
    @classmethod
    def validate_scene_count(cls, value: int | None) -> int | None:
        if value is None:
            return value
        max_scene_count = get_settings().max_scene_count
        if value < 1 or value > max_scene_count:
            raise ValueError(f"scene_count must be between 1 and {max_scene_count}")
        return value

    @field_validator("voice")
    @classmethod
    def validate_voice(cls, value: str) -> str:
        return _check_choice("voice", value, get_settings().allowed_voices)

    def resolved_scene_count(self) -> int:
        return self.scene_count or get_settings().default_scene_count


class StorybookGenerateRequest(StorybookOptions):
    story_text: str = Field(..., min_length=1)
    title: str = Field(default="Untitled Story")
    genre: str = Field(default="fantasy")
    story_id: str | None = None

    @field_validator("story_text")
    @classmethod
    def validate_story_text(cls, value: str) -> str:
        return _check_text("story_text", value, get_settings().story_text_max_len)

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str) -> str:
        return value.strip() or "Untitled Story"

    @field_validator("genre")
    @classmethod
    def validate_genre(cls, value: str) -> str:
        return _check_choice("genre", value, get_settings().allowed_genres)


class StorybookFromPromptRequest(StorybookOptions, GenreLengthMixin):
    prompt: str = Field(..., min_length=1)

    @field_validator("prompt")
    @classmethod
    def validate_prompt(cls, value: str) -> str:
        return _check_text("prompt", value, get_settings().prompt_max_len)


class ProviderStatusRow(BaseModel):
    name: str
    capability: str
    priority: int
    configured: bool
    reason: str | None = None
    masked_key: str | None = None
    timeout: float


class ProvidersResponse(BaseModel):
    providers: list[ProviderStatusRow]
    summary: dict[str, Any]


class ErrorBody(BaseModel):
    code: str
    message: str
    detail: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    error: ErrorBody
