from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from generators.fallback.fallback_templates import GENRES, STYLES, TARGET_WORDS
from generators.storybook.scene_splitter import MAX_SCENES

load_dotenv()


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


def _parse_optional_int_env(name: str) -> int | None:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def _parse_csv_env(name: str, default: list[str]) -> tuple[str, ...]:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return tuple(default)
    values = tuple(item.strip() for item in raw.split(",") if item.strip())
    return values if values else tuple(default)


@dataclass(frozen=True)
class Settings:
    project_root: Path
    outputs_dir: Path
    prompt_max_len: int = 2000
    story_text_max_len: int = 60000
    narration_text_max_len: int = 4096
    story_narration_max_len: int = 16000
    default_scene_count: int = 8
    max_scene_count: int = MAX_SCENES
    fallback_seed: int | None = None
    allowed_genres: tuple[str, ...] = GENRES
    allowed_lengths: tuple[str, ...] = tuple(TARGET_WORDS)
    allowed_styles: tuple[str, ...] = STYLES
    allowed_voices: tuple[str, ...] = ("male", "female", "child", "elderly")
    allowed_image_sizes: tuple[str, ...] = ("1024x1024", "1792x1024", "1024x1792")


def get_settings() -> Settings:
    project_root = Path(__file__).resolve().parents[2]
    outputs_override = (os.getenv("STORYFORGE_OUTPUTS_DIR") or "").strip()
    outputs_dir = (
        Path(outputs_override).resolve() if outputs_override else project_root / "outputs"
    )
    return Settings(
        project_root=project_root,
        outputs_dir=outputs_dir,
        prompt_max_len=_parse_int_env("STORYFORGE_PROMPT_MAX_LEN", default=2000),
        story_text_max_len=_parse_int_env("STORYFORGE_STORY_TEXT_MAX_LEN", default=60000),
        narration_text_max_len=_parse_int_env("STORYFORGE_NARRATION_TEXT_MAX_LEN", default=4096),
        story_narration_max_len=_parse_int_env(
            "STORYFORGE_STORY_NARRATION_MAX_LEN", default=16000
        ),
        default_scene_count=min(
            _parse_int_env("STORYFORGE_DEFAULT_SCENE_COUNT", default=8),
            MAX_SCENES,
        ),
        fallback_seed=_parse_optional_int_env("STORYFORGE_FALLBACK_SEED"),
        allowed_genres=_parse_csv_env("STORYFORGE_ALLOWED_GENRES", default=list(GENRES)),
        allowed_lengths=_parse_csv_env("STORYFORGE_ALLOWED_LENGTHS", default=list(TARGET_WORDS)),
        allowed_styles=_parse_csv_env("STORYFORGE_ALLOWED_STYLES", default=list(STYLES)),
    )
