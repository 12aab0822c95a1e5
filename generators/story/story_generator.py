import math
import re

from generators.fallback.fallback_generator import FallbackGenerator, count_words
from generators.fallback.fallback_templates import normalize_genre, normalize_length
from generators.providers.provider_model import Capability, GenerationRequest
from generators.providers.router import GenerationRouter
from generators.story.story_model import PromptEnhancement, TextGeneration

READING_WORDS_PER_MINUTE = 200

_TITLE_LINE = re.compile(r"^\s*(?:#{1,6}\s+|title:\s*)(?P<title>.+?)\s*$", re.IGNORECASE)


def estimate_reading_minutes(text: str) -> int:
    words = count_words(text)
    if words == 0:
        return 0
    return max(1, math.ceil(words / READING_WORDS_PER_MINUTE))


def split_title(content: str) -> tuple[str | None, str]:
    """Pull a leading ``Title: ...`` or markdown heading line off model output."""
    stripped = content.strip()
    first_line, _, rest = stripped.partition("\n")
    match = _TITLE_LINE.match(first_line)
    if not match or not rest.strip():
        return None, stripped
    title = match.group("title").strip().strip('"*').strip()
    return (title or None), rest.strip()


class StoryGenerator:
    def __init__(self, router: GenerationRouter, fallback: FallbackGenerator):
        self.router = router
        self.fallback = fallback

    async def generate_text(
        self,
        prompt: str,
        genre: str | None = None,
        length: str | None = None,
    ) -> TextGeneration:
        """
        Generates a story through the provider chain. Always returns content;
        when every provider fails the local template generator writes it.
        """
        genre_key = normalize_genre(genre)
        length_key = normalize_length(length)
        result = await self.router.route(
            GenerationRequest(
                capability=Capability.TEXT,
                prompt=prompt,
                genre=genre_key,
                length=length_key,
            )
        )

        title, content = split_title(result.content)
        if not title:
            title = self.fallback.generate_title(prompt, genre_key)

        return TextGeneration(
            title=title,
            content=content,
            word_count=count_words(content),
            estimated_reading_time=estimate_reading_minutes(content),
            genre=genre_key,
            length=length_key,
            provider=result.provider_name,
            elapsed_time=round(result.elapsed_time, 3),
            failures=list(result.failures),
        )

    async def enhance_prompt(
        self,
        prompt: str,
        genre: str | None = None,
        length: str | None = None,
    ) -> PromptEnhancement:
        genre_key = normalize_genre(genre)
        length_key = normalize_length(length)
        result = await self.router.route(
            GenerationRequest(
                capability=Capability.ENHANCEMENT,
                prompt=prompt,
                genre=genre_key,
                length=length_key,
            )
        )
        return PromptEnhancement(
            enhanced_prompt=result.content,
            original_prompt=prompt,
            genre=genre_key,
            length=length_key,
            provider=result.provider_name,
            fallback_used=result.is_fallback,
        )
