import re

from pydantic import BaseModel, ConfigDict, Field

from generators.fallback.fallback_generator import count_words
from generators.providers.errors import StoryParseError

MAX_SCENES = 15
MIN_PARAGRAPH_CHARS = 20
DESCRIPTION_FALLBACK_CHARS = 100

PARAGRAPH = "paragraph"
SENTENCE = "sentence"

_BLANK_LINE = re.compile(r"\n\s*\n")
_SENTENCE = re.compile(r"[^.!?]+[.!?]*")
_SENTENCE_BREAK = re.compile(r"[.!?]+")
_WORD = re.compile(r"\w")

LOCATION_HINTS: tuple[tuple[str, str], ...] = (
    ("forest", "in a mystical forest"),
    ("castle", "at a grand castle"),
    ("village", "in a charming village"),
    ("mountain", "in mountainous terrain"),
    ("ocean", "by the vast ocean"),
    ("garden", "in a magical garden"),
    ("library", "in an ancient library"),
)
CHARACTER_KEYWORDS = ("young", "child", "boy", "girl")
MAGIC_KEYWORDS = ("magic", "spell", "enchanted")


class Scene(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int = Field(..., ge=0, description="Zero-based position in the story")
    content: str
    derived_image_description: str
    narration_cue: str
    word_count: int = Field(..., ge=0)

    @property
    def number(self) -> int:
        return self.index + 1


def clamp_scene_count(scene_count: int) -> int:
    return max(1, min(MAX_SCENES, int(scene_count)))


def split_into_units(text: str) -> tuple[list[str], str]:
    """Split on blank lines; fall back to sentences when no paragraph is long enough."""
    paragraphs = [
        block.strip()
        for block in _BLANK_LINE.split(text or "")
        if len(block.strip()) > MIN_PARAGRAPH_CHARS and _WORD.search(block)
    ]
    if paragraphs:
        return paragraphs, PARAGRAPH

    sentences = [match.group(0).strip() for match in _SENTENCE.finditer(text or "")]
    # Punctuation-only fragments are not sentences.
    return [sentence for sentence in sentences if _WORD.search(sentence)], SENTENCE


def _group_units(units: list[str], scene_count: int) -> list[list[str]]:
    if len(units) <= scene_count:
        return [[unit] for unit in units]

    # Contiguous buckets, sizes differ by at most one and never exceed ceil(U/N).
    base, extra = divmod(len(units), scene_count)
    buckets: list[list[str]] = []
    start = 0
    for bucket_index in range(scene_count):
        size = base + (1 if bucket_index < extra else 0)
        buckets.append(units[start : start + size])
        start += size
    return buckets[:scene_count]


def derive_image_description(content: str) -> str:
    text = (content or "").strip()
    first_sentence = _SENTENCE_BREAK.split(text, maxsplit=1)[0].strip()
    description = first_sentence or text[:DESCRIPTION_FALLBACK_CHARS]

    lowered = text.lower()
    for keyword, hint in LOCATION_HINTS:
        if keyword in lowered:
            description += f" {hint}"
            break

    if any(keyword in lowered for keyword in CHARACTER_KEYWORDS):
        description += ", featuring a young protagonist"

    if any(keyword in lowered for keyword in MAGIC_KEYWORDS):
        description += ", with magical elements"

    return description


def decompose(text: str, scene_count: int) -> list[Scene]:
    if not text or not text.strip():
        raise StoryParseError("Story text is empty.")

    units, unit_kind = split_into_units(text)
    if not units:
        raise StoryParseError("Story text could not be split into paragraphs or sentences.")

    separator = "\n\n" if unit_kind == PARAGRAPH else " "
    scenes: list[Scene] = []
    for bucket in _group_units(units, clamp_scene_count(scene_count)):
        content = separator.join(bucket).strip()
        if not content:
            continue
        index = len(scenes)
        scenes.append(
            Scene(
                index=index,
                content=content,
                derived_image_description=derive_image_description(content),
                narration_cue=f"scene-{index + 1}",
                word_count=count_words(content),
            )
        )

    if not scenes:
        raise StoryParseError("Story text produced no scenes.")
    return scenes
