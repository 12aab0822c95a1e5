from .story_generator import StoryGenerator
from .story_model import PromptEnhancement, TextGeneration
from .story_prompts import build_enhancement_prompt, build_story_prompt

__all__ = [
    "PromptEnhancement",
    "StoryGenerator",
    "TextGeneration",
    "build_enhancement_prompt",
    "build_story_prompt",
]
