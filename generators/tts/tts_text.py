import re

MAX_NARRATION_CHARS = 16000

OPENAI_VOICES = {
    "male": "onyx",
    "female": "alloy",
    "child": "nova",
    "elderly": "echo",
}
OPENAI_VOICE_NAMES = {"alloy", "ash", "coral", "echo", "fable", "nova", "onyx", "sage", "shimmer"}

ELEVENLABS_VOICES = {
    "male": "21m00Tcm4TlvDq8ikWAM",
    "female": "21m00Tcm4TlvDq8ikWAM",
    "child": "pNInz6obpgDQGcFmaJgB",
    "elderly": "AZnzlk1XvdvUeBnXmlld",
}

GEMINI_VOICES = {
    "male": "Charon",
    "female": "Achernar",
    "child": "Leda",
    "elderly": "Gacrux",
}


def openai_voice(voice: str) -> str:
    normalized = (voice or "").strip().lower()
    if normalized in OPENAI_VOICE_NAMES:
        return normalized
    return OPENAI_VOICES.get(normalized, "alloy")


def elevenlabs_voice_id(voice: str) -> str:
    return ELEVENLABS_VOICES.get((voice or "").strip().lower(), ELEVENLABS_VOICES["female"])


def gemini_voice(voice: str) -> str:
    return GEMINI_VOICES.get((voice or "").strip().lower(), GEMINI_VOICES["female"])


def clamp_speed(speed: float) -> float:
    return max(0.25, min(4.0, speed))


_NARRATION_RULES: tuple[tuple[str, str], ...] = (
    (r"\*\*(.*?)\*\*", r"\1"),
    (r"\*(.*?)\*", r"\1"),
    (r"`(.*?)`", r"\1"),
    (r"#{1,6}\s", ""),
    (r"\[(.*?)\]\(.*?\)", r"\1"),
    (r"\n\s*\n", "\n\n"),
    (r"[ \t]+", " "),
    (r"\.{3,}", "..."),
    (r"\bMr\.", "Mister"),
    (r"\bMrs\.", "Missus"),
    (r"\bDr\.", "Doctor"),
    (r"\bProf\.", "Professor"),
    (r"(?<!\.)([.!?:])\s", r"\1 ... "),
)


def clean_text_for_narration(text: str) -> str:
    cleaned = text or ""
    for pattern, replacement in _NARRATION_RULES:
        cleaned = re.sub(pattern, replacement, cleaned)
    return cleaned.strip()


def build_narration_text(scene_texts: list[str], max_chars: int = MAX_NARRATION_CHARS) -> str:
    parts = ["Welcome to this interactive storybook."]
    for index, text in enumerate(scene_texts):
        parts.append(f"Page {index + 1}. {text.strip()}")
        if index < len(scene_texts) - 1:
            parts.append("Let's turn the page and continue our adventure.")
    parts.append("The End. Thank you for joining us on this magical journey!")
    script = " ".join(parts)
    if len(script) <= max_chars:
        return script

    clipped = script[:max_chars]
    boundary = max(clipped.rfind(". "), clipped.rfind("! "), clipped.rfind("? "))
    return clipped[: boundary + 1] if boundary > 0 else clipped
