from __future__ import annotations

import base64
import math
import random
from xml.sax.saxutils import escape

from pydantic import BaseModel, ConfigDict, Field

from .fallback_templates import (
    CLOSING_PARAGRAPH,
    CONFLICT_BODY,
    CONFLICT_CONNECTIVES,
    ENHANCEMENT_ELEMENTS,
    FILLER_PARAGRAPHS,
    GENRE_ELEMENTS,
    GENRE_ENHANCEMENTS,
    OPENING_TEMPLATE,
    PLACEHOLDER_PALETTE,
    RESOLUTION_BODY,
    RESOLUTION_CONNECTIVES,
    TARGET_WORDS,
    TITLE_ADJECTIVES,
    TITLE_SUBJECTS,
    normalize_genre,
    normalize_length,
    normalize_style,
)

OVERLAY_MAX_CHARS = 30
NARRATION_WORDS_PER_MINUTE = 150


def count_words(text: str) -> int:
    return len(text.split())


def estimate_narration_seconds(text: str) -> int:
    words = count_words(text)
    if words == 0:
        return 0
    return math.ceil(words * 60 / NARRATION_WORDS_PER_MINUTE)


class PlaceholderImage(BaseModel):
    """Vector description of a stand-in illustration, rendered by the client."""

    model_config = ConfigDict(frozen=True)

    kind: str = "svg-placeholder"
    scene_number: int
    palette_index: int
    color: str
    overlay_text: str
    style: str
    width: int = 800
    height: int = 600

    def to_svg(self) -> str:
        style_label = escape(self.style.replace("-", " "))
        return (
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{self.width}" height="{self.height}" '
            f'viewBox="0 0 {self.width} {self.height}">'
            '<defs><linearGradient id="grad" x1="0%" y1="0%" x2="100%" y2="100%">'
            f'<stop offset="0%" style="stop-color:{self.color};stop-opacity:1" />'
            f'<stop offset="100%" style="stop-color:{self.color}dd;stop-opacity:1" />'
            "</linearGradient></defs>"
            f'<rect width="{self.width}" height="{self.height}" fill="url(#grad)"/>'
            f'<text x="{self.width // 2}" y="{self.height // 2 - 20}" text-anchor="middle" '
            'font-family="Arial" font-size="24" fill="white" font-weight="bold">'
            f"Scene {self.scene_number}</text>"
            f'<text x="{self.width // 2}" y="{self.height // 2 + 20}" text-anchor="middle" '
            f'font-family="Arial" font-size="16" fill="white">{escape(self.overlay_text)}</text>'
            f'<text x="{self.width // 2}" y="{self.height // 2 + 50}" text-anchor="middle" '
            'font-family="Arial" font-size="14" fill="rgba(255,255,255,0.8)">'
            f"Style: {style_label}</text>"
            "</svg>"
        )

    def to_data_url(self) -> str:
        encoded = base64.b64encode(self.to_svg().encode("utf-8")).decode("ascii")
        return f"data:image/svg+xml;base64,{encoded}"


class NarrationPlaceholder(BaseModel):
    """Narration script for client-side speech when no audio provider answered."""

    model_config = ConfigDict(frozen=True)

    kind: str = "speech-synthesis-transcript"
    transcript: str
    estimated_duration_seconds: int = Field(default=0, ge=0)


class FallbackGenerator:
    def __init__(self, seed: int | None = None, rng: random.Random | None = None):
        self.rng = rng or random.Random(seed)

    def generate_text(self, prompt: str, genre: str | None, length: str | None) -> str:
        genre_key = normalize_genre(genre)
        target_words = TARGET_WORDS[normalize_length(length)]
        element = GENRE_ELEMENTS[genre_key]
        subject = (prompt or "").strip().rstrip(".!?") or "an unexpected hero"

        paragraphs = [OPENING_TEMPLATE.format(prompt=subject, setting=element["setting"])]
        word_count = count_words(paragraphs[0])

        while word_count < target_words * 0.7:
            conflict = self.rng.choice(CONFLICT_CONNECTIVES).format(conflict=element["conflict"])
            paragraphs.append(f"{conflict} {CONFLICT_BODY}")
            word_count += count_words(paragraphs[-1])
            if word_count >= target_words * 0.7:
                break
            resolution = self.rng.choice(RESOLUTION_CONNECTIVES).format(
                resolution=element["resolution"]
            )
            paragraphs.append(f"{resolution} {RESOLUTION_BODY}")
            word_count += count_words(paragraphs[-1])

        while word_count < target_words:
            paragraphs.append(self.rng.choice(FILLER_PARAGRAPHS))
            word_count += count_words(paragraphs[-1])

        paragraphs.append(CLOSING_PARAGRAPH)
        return "\n\n".join(paragraphs)

    def enhance_prompt(self, prompt: str, genre: str | None) -> str:
        enhancement = GENRE_ENHANCEMENTS[normalize_genre(genre)]
        return (
            f"{(prompt or '').strip()}\n\n"
            f"Enhanced narrative direction: {enhancement}\n\n"
            f"{ENHANCEMENT_ELEMENTS}"
        )

    def generate_title(self, prompt: str, genre: str | None) -> str:
        adjective = self.rng.choice(TITLE_ADJECTIVES[normalize_genre(genre)])
        subject = self.rng.choice(TITLE_SUBJECTS)
        return f"{adjective} {subject}"

    def placeholder_image(
        self,
        description: str,
        scene_index: int | None,
        style: str | None,
    ) -> PlaceholderImage:
        index = scene_index if scene_index is not None and scene_index >= 0 else 0
        palette_index = index % len(PLACEHOLDER_PALETTE)
        text = (description or "").strip()
        overlay = text[:OVERLAY_MAX_CHARS] + ("..." if len(text) > OVERLAY_MAX_CHARS else "")
        return PlaceholderImage(
            scene_number=index + 1,
            palette_index=palette_index,
            color=PLACEHOLDER_PALETTE[palette_index],
            overlay_text=overlay,
            style=normalize_style(style),
        )

    def narration_placeholder(self, text: str) -> NarrationPlaceholder:
        transcript = (text or "").strip()
        return NarrationPlaceholder(
            transcript=transcript,
            estimated_duration_seconds=estimate_narration_seconds(transcript),
        )
