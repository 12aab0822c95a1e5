import argparse
import asyncio
import base64
import datetime
import logging
import os
import re
import sys

from app.core.config import get_settings
from app.services.generation_services import build_generation_services
from app.services.request_context import configure_logging
from generators.config import get_provider_settings
from generators.fallback.fallback_templates import GENRES, STYLES, TARGET_WORDS
from generators.providers.errors import StoryParseError
from generators.storybook.scene_splitter import MAX_SCENES

AUDIO_EXTENSIONS = {"audio/mpeg": ".mp3", "audio/wav": ".wav", "audio/ogg": ".ogg"}


def slugify(text):
    """Converts text to a safe filename slug."""
    text = text.lower()
    text = re.sub(r'[^a-z0-9]+', '-', text)
    return text.strip('-') or "storybook"


def build_parser():
    parser = argparse.ArgumentParser(description="Generate an illustrated, narrated storybook.")
    parser.add_argument("--prompt", help="Story idea. Ignored when --story_file is given.")
    parser.add_argument("--story_file", help="Use existing story text from this file instead of generating it.")
    parser.add_argument("--title", default="Untitled Story", help="Title used with --story_file")
    parser.add_argument("--genre", default="fantasy", choices=GENRES)
    parser.add_argument("--length", default="medium", choices=tuple(TARGET_WORDS))
    parser.add_argument("--style", default="children-book", choices=STYLES)
    parser.add_argument(
        "--scene_count",
        type=int,
        default=None,
        help=f"Number of storybook pages (1-{MAX_SCENES}). Defaults to STORYFORGE_DEFAULT_SCENE_COUNT.",
    )
    parser.add_argument("--voice", default="female", choices=("male", "female", "child", "elderly"))
    parser.add_argument("--no_images", action="store_true", help="Use placeholder illustrations only.")
    parser.add_argument("--no_audio", action="store_true", help="Skip narration.")
    parser.add_argument(
        "--output_dir",
        default=None,
        help="Directory for the storybook JSON. Defaults to STORYFORGE_OUTPUTS_DIR or ./outputs.",
    )
    return parser


async def run(args):
    settings = get_settings()
    services = build_generation_services(settings, get_provider_settings())
    scene_count = args.scene_count or settings.default_scene_count
    try:
        return await _generate(services, args, scene_count)
    finally:
        await services.aclose()


async def _generate(services, args, scene_count):
    if args.story_file:
        with open(args.story_file, "r", encoding="utf-8") as file:
            story_text = file.read()
        return await services.storybooks.generate_storybook(
            story_text,
            args.title,
            genre=args.genre,
            style=args.style,
            scene_count=scene_count,
            include_images=not args.no_images,
            include_audio=not args.no_audio,
            voice=args.voice,
        )

    return await services.storybooks.create_from_prompt(
        services.stories,
        args.prompt,
        genre=args.genre,
        length=args.length,
        style=args.style,
        scene_count=scene_count,
        include_images=not args.no_images,
        include_audio=not args.no_audio,
        voice=args.voice,
    )


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.story_file and not (args.prompt or "").strip():
        parser.error("one of --prompt or --story_file is required")
    if args.scene_count is not None and not 1 <= args.scene_count <= MAX_SCENES:
        parser.error(f"--scene_count must be between 1 and {MAX_SCENES}")

    configure_logging(logging.INFO)
    print("Generating storybook...")

    try:
        storybook = asyncio.run(run(args))
    except StoryParseError as e:
        print(f"Error: {e}")
        return 1

    timestamp = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
    base_dir = args.output_dir or str(get_settings().outputs_dir)
    output_dir = os.path.join(base_dir, f"{timestamp}_storybook_{slugify(storybook.title)}")
    os.makedirs(output_dir, exist_ok=True)

    filepath = os.path.join(output_dir, "storybook.json")
    with open(filepath, "w", encoding="utf-8") as f:
        f.write(storybook.model_dump_json(indent=4))
    print(f"Storybook saved to: {filepath}")

    if storybook.has_audio and storybook.audio and storybook.audio.data_url:
        extension = AUDIO_EXTENSIONS.get(storybook.audio.mime_type or "", ".bin")
        audio_path = os.path.join(output_dir, f"narration{extension}")
        encoded = storybook.audio.data_url.split(",", 1)[1]
        with open(audio_path, "wb") as f:
            f.write(base64.b64decode(encoded))
        print(f"Narration saved to: {audio_path}")

    print(
        f"pages={storybook.total_pages} images={storybook.metadata.generated_counts.images} "
        f"audio={storybook.has_audio} errors={len(storybook.metadata.errors)}"
    )
    for error in storybook.metadata.errors:
        print(f"[warn] {error}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
