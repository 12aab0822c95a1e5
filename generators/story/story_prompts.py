from __future__ import annotations

from generators.fallback.fallback_templates import TARGET_WORDS, normalize_genre, normalize_length

STORY_SYSTEM_INSTRUCTION = (
    "You are a creative and engaging storyteller. You write family-friendly stories with "
    "vivid descriptions, compelling characters, natural dialogue, and a clear beginning, "
    "middle, and end. Separate paragraphs with a blank line."
)

ENHANCER_SYSTEM_INSTRUCTION = (
    "You are an expert story enhancer and writing coach. Enhance story prompts to be more "
    "detailed and compelling. Reply with the enhanced prompt only."
)


def target_word_count(length: str | None) -> int:
    return TARGET_WORDS[normalize_length(length)]


def build_story_prompt(prompt: str, genre: str | None, length: str | None) -> str:
    length_key = normalize_length(length)
    genre_key = normalize_genre(genre)
    return (
        f"Write a {length_key.replace('-', ' ')} story (approximately "
        f"{TARGET_WORDS[length_key]} words) in the {genre_key} genre.\n\n"
        f'Story prompt: "{prompt.strip()}"\n\n'
        "Requirements:\n"
        "- Create an engaging, well-structured narrative\n"
        "- Include vivid descriptions and compelling characters\n"
        "- Develop a clear beginning, middle, and end\n"
        "- Make it age-appropriate and family-friendly\n"
        "- Use rich, descriptive language and dialogue where appropriate\n\n"
        "Please write the complete story now."
    )


def build_enhancement_prompt(prompt: str, genre: str | None, length: str | None) -> str:
    length_key = normalize_length(length)
    genre_key = normalize_genre(genre)
    return (
        f"Enhance this {genre_key} story prompt for a {length_key.replace('-', ' ')} story "
        f"({TARGET_WORDS[length_key]} words):\n\n"
        f'Original prompt: "{prompt.strip()}"\n\n'
        "Please enhance it by adding:\n"
        "1. Narrative structure guidance (beginning, middle, end)\n"
        "2. Character development suggestions\n"
        "3. Dialogue and interaction prompts\n"
        "4. Atmospheric and environmental descriptions\n"
        "5. Plot development elements\n"
        "6. Themes and meaningful messages\n"
        "7. Age-appropriate content guidelines\n\n"
        f"Make the enhanced prompt detailed enough to guide the creation of a compelling "
        f"{genre_key} story."
    )


def max_output_tokens(length: str | None, ceiling: int = 4000) -> int:
    return min(int(target_word_count(length) * 1.5), ceiling)
