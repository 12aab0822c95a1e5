import random
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field

from generators.fallback.fallback_templates import STYLE_AGE_GROUPS
from generators.illustration.illustration_generator import ImageAsset
from generators.storybook.scene_splitter import Scene
from generators.tts.tts_generator import NarrationAsset

READING_WORDS_PER_MINUTE = 200
DEFAULT_AGE_GROUP = "6-12 years"
DEFAULT_BACKGROUND_MUSIC = "gentle-ambient"

BACKGROUND_MUSIC: dict[str, str] = {
    "fantasy": "magical-ambient",
    "adventure": "epic-orchestral",
    "mystery": "suspenseful-ambient",
    "romance": "gentle-piano",
    "sci-fi": "futuristic-synth",
    "horror": "dark-ambient",
    "comedy": "playful-upbeat",
    "drama": "emotional-strings",
    "thriller": "tense-orchestral",
}

SPARKLE_KEYWORDS = ("magic", "enchanted", "spell")
FLOAT_KEYWORDS = ("gentle", "peaceful", "calm")


class StyleInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    age_group: str
    features: list[str]
    recommended: bool = False


STORYBOOK_STYLES: tuple[StyleInfo, ...] = (
    StyleInfo(
        id="children-book",
        name="Children's Book",
        description="Bright, colorful illustrations perfect for young readers",
        age_group="3-8 years",
        features=["Large text", "Simple illustrations", "Bold colors"],
        recommended=True,
    ),
    StyleInfo(
        id="storybook",
        name="Classic Storybook",
        description="Detailed illustrations with rich storytelling elements",
        age_group="6-12 years",
        features=["Detailed art", "Complex scenes", "Rich colors"],
    ),
    StyleInfo(
        id="watercolor",
        name="Watercolor",
        description="Soft, artistic watercolor paintings",
        age_group="4-10 years",
        features=["Soft edges", "Gentle colors", "Artistic style"],
    ),
    StyleInfo(
        id="cartoon",
        name="Cartoon Style",
        description="Fun, animated cartoon illustrations",
        age_group="3-12 years",
        features=["Expressive characters", "Bright colors", "Playful style"],
    ),
    StyleInfo(
        id="realistic",
        name="Realistic",
        description="Photorealistic illustrations for older readers",
        age_group="8+ years",
        features=["Realistic details", "Professional quality", "Complex scenes"],
    ),
)


def select_background_music(genre: str) -> str:
    return BACKGROUND_MUSIC.get(genre, DEFAULT_BACKGROUND_MUSIC)


def age_group_for_style(style: str) -> str:
    return STYLE_AGE_GROUPS.get(style, DEFAULT_AGE_GROUP)


def reading_minutes(word_count: int) -> float:
    return word_count / READING_WORDS_PER_MINUTE


class AnimationElement(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    type: str
    x: float = Field(..., description="Horizontal position, percent of page width")
    y: float = Field(..., description="Vertical position, percent of page height")
    width: float
    height: float
    animation: dict


def build_animation_elements(scene: Scene) -> list[AnimationElement]:
    """Decorative hints for the viewer, stable for a given scene index."""
    lowered = scene.content.lower()
    rng = random.Random(scene.index)
    elements: list[AnimationElement] = []

    if any(keyword in lowered for keyword in SPARKLE_KEYWORDS):
        elements.append(
            AnimationElement(
                id=f"sparkle-{scene.number}",
                type="magical-element",
                x=round(20 + rng.random() * 60, 2),
                y=round(20 + rng.random() * 60, 2),
                width=round(20 + rng.random() * 20, 2),
                height=round(20 + rng.random() * 20, 2),
                animation={
                    "type": "twinkle",
                    "duration_ms": int(2000 + rng.random() * 3000),
                    "delay_ms": int(rng.random() * 1000),
                    "from": {"opacity": 0, "scale": 0},
                    "to": {"opacity": 1, "scale": 1},
                },
            )
        )

    if any(keyword in lowered for keyword in FLOAT_KEYWORDS):
        elements.append(
            AnimationElement(
                id=f"float-{scene.number}",
                type="floating-element",
                x=round(15 + rng.random() * 70, 2),
                y=round(15 + rng.random() * 70, 2),
                width=round(30 + rng.random() * 20, 2),
                height=round(30 + rng.random() * 20, 2),
                animation={
                    "type": "float",
                    "duration_ms": int(4000 + rng.random() * 2000),
                    "delay_ms": 500,
                    "from": {"y": 0},
                    "to": {"y": -20},
                },
            )
        )
    return elements


class StorybookPage(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    page_number: int = Field(..., ge=1)
    scene: Scene
    image: ImageAsset
    audio_ref: str | None = Field(default=None, description="Id of the shared narration asset")
    estimated_reading_time: float = Field(..., ge=0, description="Minutes at 200 words per minute")
    background_music: str | None = None
    animation_elements: tuple[AnimationElement, ...] = ()


class GenerationCounts(BaseModel):
    model_config = ConfigDict(frozen=True)

    scenes: int = 0
    images: int = 0
    images_failed: int = 0
    audio: bool = False


class StorybookMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    generated_counts: GenerationCounts
    errors: tuple[str, ...] = ()
    style: str
    estimated_age_group: str

    @computed_field
    @property
    def partial(self) -> bool:
        return bool(self.errors)


class Storybook(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    story_id: str | None = None
    title: str
    subtitle: str
    genre: str
    style: str
    created_at: datetime
    pages: tuple[StorybookPage, ...]
    total_pages: int
    total_duration: float = Field(..., ge=0, description="Sum of page reading times in minutes")
    has_images: bool
    has_audio: bool
    audio: NarrationAsset | None = None
    metadata: StorybookMetadata
