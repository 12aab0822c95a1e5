from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _parse_float_env(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    if value <= 0:
        return default
    return value


def _parse_int_env(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    if value < 1:
        return default
    return value


def _parse_str_env(name: str, default: str) -> str:
    return (os.getenv(name) or "").strip() or default


@dataclass(frozen=True)
class ProviderSettings:
    text_timeout_sec: float = 30.0
    enhancement_timeout_sec: float = 15.0
    image_timeout_sec: float = 90.0
    audio_timeout_sec: float = 60.0
    max_concurrency: int = 4
    breaker_failure_threshold: int = 5
    breaker_cooldown_sec: float = 300.0
    storybook_deadline_sec: float = 600.0
    min_text_length: int = 100
    min_binary_length: int = 100
    openai_text_model: str = "gpt-4o-mini"
    openai_image_model: str = "dall-e-3"
    openai_tts_model: str = "tts-1-hd"
    huggingface_text_model: str = "meta-llama/Llama-3.1-8B-Instruct"
    huggingface_image_model: str = "stabilityai/stable-diffusion-xl-base-1.0"
    google_text_model: str = "gemini-2.5-flash"
    google_image_model: str = "gemini-2.5-flash-image"
    google_tts_model: str = "gemini-2.5-flash-preview-tts"
    elevenlabs_model: str = "eleven_multilingual_v2"


def get_provider_settings() -> ProviderSettings:
    return ProviderSettings(
        text_timeout_sec=_parse_float_env("STORYFORGE_TEXT_TIMEOUT_SEC", 30.0),
        enhancement_timeout_sec=_parse_float_env("STORYFORGE_ENHANCEMENT_TIMEOUT_SEC", 15.0),
        image_timeout_sec=_parse_float_env("STORYFORGE_IMAGE_TIMEOUT_SEC", 90.0),
        audio_timeout_sec=_parse_float_env("STORYFORGE_AUDIO_TIMEOUT_SEC", 60.0),
        max_concurrency=_parse_int_env("STORYFORGE_MAX_CONCURRENCY", 4),
        breaker_failure_threshold=_parse_int_env("STORYFORGE_BREAKER_FAILURE_THRESHOLD", 5),
        breaker_cooldown_sec=_parse_float_env("STORYFORGE_BREAKER_COOLDOWN_SEC", 300.0),
        storybook_deadline_sec=_parse_float_env("STORYFORGE_STORYBOOK_DEADLINE_SEC", 600.0),
        min_text_length=_parse_int_env("STORYFORGE_MIN_TEXT_LENGTH", 100),
        min_binary_length=_parse_int_env("STORYFORGE_MIN_BINARY_LENGTH", 100),
        openai_text_model=_parse_str_env("STORYFORGE_OPENAI_TEXT_MODEL", "gpt-4o-mini"),
        openai_image_model=_parse_str_env("STORYFORGE_OPENAI_IMAGE_MODEL", "dall-e-3"),
        openai_tts_model=_parse_str_env("STORYFORGE_OPENAI_TTS_MODEL", "tts-1-hd"),
        huggingface_text_model=_parse_str_env(
            "STORYFORGE_HUGGINGFACE_TEXT_MODEL",
            "meta-llama/Llama-3.1-8B-Instruct",
        ),
        huggingface_image_model=_parse_str_env(
            "STORYFORGE_HUGGINGFACE_IMAGE_MODEL",
            "stabilityai/stable-diffusion-xl-base-1.0",
        ),
        google_text_model=_parse_str_env("STORYFORGE_GOOGLE_TEXT_MODEL", "gemini-2.5-flash"),
        google_image_model=_parse_str_env(
            "STORYFORGE_GOOGLE_IMAGE_MODEL",
            "gemini-2.5-flash-image",
        ),
        google_tts_model=_parse_str_env(
            "STORYFORGE_GOOGLE_TTS_MODEL",
            "gemini-2.5-flash-preview-tts",
        ),
        elevenlabs_model=_parse_str_env("STORYFORGE_ELEVENLABS_MODEL", "eleven_multilingual_v2"),
    )
