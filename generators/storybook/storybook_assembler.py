import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Callable

from generators.fallback.fallback_generator import FallbackGenerator
from generators.fallback.fallback_templates import normalize_genre, normalize_style
from generators.illustration.illustration_generator import IllustrationGenerator, ImageAsset
from generators.story.story_generator import StoryGenerator
from generators.storybook.scene_splitter import Scene, decompose
from generators.storybook.storybook_model import (
    GenerationCounts,
    Storybook,
    StorybookMetadata,
    StorybookPage,
    age_group_for_style,
    build_animation_elements,
    reading_minutes,
    select_background_music,
)
from generators.tts.tts_generator import NarrationAsset, NarrationGenerator
from generators.tts.tts_text import build_narration_text

logger = logging.getLogger(__name__)

DEFAULT_SCENE_COUNT = 8


def _storybook_id() -> str:
    return f"sb-{uuid.uuid4().hex[:16]}"


def _describe_failures(failures: list[str]) -> str:
    return "; ".join(failures) if failures else "no providers configured"


class StorybookAssembler:
    """
    Turns story text into an illustrated, narrated storybook.

    Image and narration failures never abort assembly: failed scenes get a
    placeholder illustration and an entry in ``metadata.errors``.
    """

    def __init__(
        self,
        illustrations: IllustrationGenerator,
        narration: NarrationGenerator,
        fallback: FallbackGenerator,
        max_concurrency: int = 4,
        id_factory: Callable[[], str] | None = None,
        deadline_sec: float | None = None,
    ):
        self.illustrations = illustrations
        self.narration = narration
        self.fallback = fallback
        self.max_concurrency = max(1, max_concurrency)
        self.id_factory = id_factory or _storybook_id
        self.deadline_sec = deadline_sec

    def _placeholder_asset(self, scene: Scene, style: str) -> ImageAsset:
        placeholder = self.fallback.placeholder_image(
            scene.derived_image_description, scene.index, style
        )
        return ImageAsset(
            data_url=placeholder.to_data_url(),
            mime_type="image/svg+xml",
            prompt=scene.derived_image_description,
            style=style,
            provider="fallback",
            is_placeholder=True,
            placeholder=placeholder,
        )

    async def _generate_images(
        self,
        scenes: list[Scene],
        style: str,
        semaphore: asyncio.Semaphore,
        deadline: float | None,
    ) -> dict[int, ImageAsset | Exception]:
        async def generate(scene: Scene) -> tuple[int, ImageAsset | Exception]:
            async with semaphore:
                try:
                    asset = await self.illustrations.generate_image(
                        scene.derived_image_description,
                        style,
                        scene_index=scene.index,
                        deadline=deadline,
                    )
                except Exception as error:
                    logger.warning("FAIL scene=%d image error=%s", scene.number, error)
                    return scene.index, error
                return scene.index, asset

        pairs = await asyncio.gather(*(generate(scene) for scene in scenes))
        return dict(pairs)

    async def _generate_audio(
        self,
        scenes: list[Scene],
        voice: str,
        speed: float,
        semaphore: asyncio.Semaphore,
        deadline: float | None,
    ) -> NarrationAsset | Exception:
        script = build_narration_text([scene.content for scene in scenes])
        async with semaphore:
            try:
                return await self.narration.generate_audio(
                    script, voice=voice, speed=speed, deadline=deadline
                )
            except Exception as error:
                logger.warning("FAIL narration error=%s", error)
                return error

    async def generate_storybook(
        self,
        story_text: str,
        title: str,
        genre: str | None = None,
        style: str | None = None,
        scene_count: int = DEFAULT_SCENE_COUNT,
        include_images: bool = True,
        include_audio: bool = True,
        story_id: str | None = None,
        voice: str = "female",
        speed: float = 1.0,
    ) -> Storybook:
        genre_key = normalize_genre(genre)
        style_key = normalize_style(style)
        scenes = decompose(story_text, scene_count)
        logger.info(
            "SCENES count=%d requested=%d style=%s", len(scenes), scene_count, style_key
        )

        semaphore = asyncio.Semaphore(self.max_concurrency)
        # One absolute deadline bounds every provider attempt for this storybook.
        deadline = (
            asyncio.get_running_loop().time() + self.deadline_sec if self.deadline_sec else None
        )
        image_job = (
            self._generate_images(scenes, style_key, semaphore, deadline)
            if include_images
            else None
        )
        audio_job = (
            self._generate_audio(scenes, voice, speed, semaphore, deadline)
            if include_audio
            else None
        )
        jobs = [job for job in (image_job, audio_job) if job is not None]
        outcomes = iter(await asyncio.gather(*jobs))
        image_results: dict[int, ImageAsset | Exception] = next(outcomes) if include_images else {}
        audio_result: NarrationAsset | Exception | None = next(outcomes) if include_audio else None

        errors: list[str] = []
        images_generated = 0
        images_failed = 0
        pages: list[StorybookPage] = []

        audio = audio_result if isinstance(audio_result, NarrationAsset) else None
        has_audio = audio is not None and not audio.is_placeholder

        for scene in scenes:
            image = image_results.get(scene.index)
            if not include_images:
                image = self._placeholder_asset(scene, style_key)
            elif isinstance(image, Exception) or image is None:
                images_failed += 1
                errors.append(f"Scene {scene.number}: image generation failed ({image})")
                image = self._placeholder_asset(scene, style_key)
            elif image.is_placeholder:
                images_failed += 1
                errors.append(
                    f"Scene {scene.number}: image generation failed "
                    f"({_describe_failures(image.failures)})"
                )
            else:
                images_generated += 1

            pages.append(
                StorybookPage(
                    id=f"page-{scene.number}",
                    page_number=scene.number,
                    scene=scene,
                    image=image,
                    audio_ref=audio.id if audio is not None else None,
                    estimated_reading_time=reading_minutes(scene.word_count),
                    background_music=select_background_music(genre_key) if scene.index == 0 else None,
                    animation_elements=build_animation_elements(scene),
                )
            )

        if isinstance(audio_result, Exception):
            errors.append(f"Audio narration failed ({audio_result})")
        elif audio is not None and audio.is_placeholder:
            errors.append(f"Audio narration failed ({_describe_failures(audio.failures)})")

        storybook = Storybook(
            id=self.id_factory(),
            story_id=story_id,
            title=f"{(title or 'Untitled Story').strip()} - Interactive Storybook",
            subtitle=f"A {style_key.replace('-', ' ')} style storybook in {genre_key} genre",
            genre=genre_key,
            style=style_key,
            created_at=datetime.now(timezone.utc),
            pages=tuple(pages),
            total_pages=len(pages),
            total_duration=sum(page.estimated_reading_time for page in pages),
            has_images=images_generated > 0,
            has_audio=has_audio,
            audio=audio,
            metadata=StorybookMetadata(
                generated_counts=GenerationCounts(
                    scenes=len(scenes),
                    images=images_generated,
                    images_failed=images_failed,
                    audio=has_audio,
                ),
                errors=tuple(errors),
                style=style_key,
                estimated_age_group=age_group_for_style(style_key),
            ),
        )
        logger.info(
            "STORYBOOK id=%s pages=%d images=%d audio=%s errors=%d",
            storybook.id,
            storybook.total_pages,
            images_generated,
            has_audio,
            len(errors),
        )
        return storybook

    async def create_from_prompt(
        self,
        story_generator: StoryGenerator,
        prompt: str,
        genre: str | None = None,
        length: str | None = None,
        style: str | None = None,
        scene_count: int = DEFAULT_SCENE_COUNT,
        include_images: bool = True,
        include_audio: bool = True,
        voice: str = "female",
    ) -> Storybook:
        story = await story_generator.generate_text(prompt, genre, length)
        return await self.generate_storybook(
            story.content,
            story.title,
            genre=story.genre,
            style=style,
            scene_count=scene_count,
            include_images=include_images,
            include_audio=include_audio,
            voice=voice,
        )
