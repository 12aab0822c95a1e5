from generators.fallback.fallback_templates import STYLE_PROMPTS, normalize_style

CHILD_SAFE_SUFFIX = "suitable for children"


def build_image_prompt(description: str, style: str | None) -> str:
    style_prompt = STYLE_PROMPTS[normalize_style(style)]
    scene = (description or "").strip().rstrip(",.")
    if not scene:
        raise ValueError("Image description is required.")
    return f"{scene}, {style_prompt}, {CHILD_SAFE_SUFFIX}"
