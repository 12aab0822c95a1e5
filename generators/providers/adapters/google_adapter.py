from __future__ import annotations

from typing import Any, Callable

from google import genai
from google.genai import types

from generators.config import ProviderSettings
from generators.providers.errors import ProviderUnavailable
from generators.providers.provider_model import Capability, GenerationRequest, ProviderOutput
from generators.story.story_prompts import (
    ENHANCER_SYSTEM_INSTRUCTION,
    STORY_SYSTEM_INSTRUCTION,
    build_enhancement_prompt,
    build_story_prompt,
    max_output_tokens,
)
from generators.tts.tts_audio import to_playable_audio
from generators.tts.tts_text import gemini_voice

from .base import SdkProviderAdapter, aspect_ratio_for_size


def _safe_text(response) -> str:
    text = getattr(response, "text", "")
    return text if isinstance(text, str) else ""


def _response_parts(response) -> list:
    parts = getattr(response, "parts", None)
    if parts:
        return list(parts)
    candidates = getattr(response, "candidates", None) or []
    if candidates and getattr(candidates[0], "content", None):
        return list(candidates[0].content.parts or [])
    return []


class GoogleAIAdapter(SdkProviderAdapter):
    name = "google"
    capabilities = (Capability.TEXT, Capability.ENHANCEMENT, Capability.IMAGE, Capability.AUDIO)

    def __init__(
        self,
        settings: ProviderSettings,
        client_factory: Callable[[str], genai.Client] | None = None,
    ):
        super().__init__(
            settings,
            client_factory or (lambda api_key: genai.Client(api_key=api_key)),
        )

    async def generate_text(self, request: GenerationRequest, api_key: str) -> ProviderOutput:
        if request.capability is Capability.ENHANCEMENT:
            system_instruction = ENHANCER_SYSTEM_INSTRUCTION
            contents = build_enhancement_prompt(request.prompt, request.genre, request.length)
            config = types.GenerateContentConfig(
                system_instruction=system_instruction,
                temperature=0.7,
                max_output_tokens=1000,
            )
        else:
            contents = build_story_prompt(request.prompt, request.genre, request.length)
            config = types.GenerateContentConfig(
                system_instruction=STORY_SYSTEM_INSTRUCTION,
                temperature=0.8,
                top_p=0.95,
                max_output_tokens=max_output_tokens(request.length),
            )

        client = self._client_for(api_key)
        response = await client.aio.models.generate_content(
            model=self.settings.google_text_model,
            contents=contents,
            config=config,
        )
        return self.normalize(response, request.capability)

    async def generate_image(self, request: GenerationRequest, api_key: str) -> ProviderOutput:
        client = self._client_for(api_key)
        response = await client.aio.models.generate_content(
            model=self.settings.google_image_model,
            contents=request.prompt,
            config=types.GenerateContentConfig(
                response_modalities=["IMAGE"],
                image_config=types.ImageConfig(
                    aspect_ratio=aspect_ratio_for_size(request.target_size)
                ),
            ),
        )
        return self.normalize(response, Capability.IMAGE)

    async def generate_audio(self, request: GenerationRequest, api_key: str) -> ProviderOutput:
        client = self._client_for(api_key)
        response = await client.aio.models.generate_content(
            model=self.settings.google_tts_model,
            contents=f"Read in a warm storytelling tone.\n{request.prompt}",
            config=types.GenerateContentConfig(
                response_modalities=["AUDIO"],
                speech_config=types.SpeechConfig(
                    voice_config=types.VoiceConfig(
                        prebuilt_voice_config=types.PrebuiltVoiceConfig(
                            voice_name=gemini_voice(request.voice)
                        )
                    )
                ),
            ),
        )
        return self.normalize(response, Capability.AUDIO)

    def normalize(self, raw: Any, capability: Capability) -> ProviderOutput:
        if capability in (Capability.TEXT, Capability.ENHANCEMENT):
            return ProviderOutput(content=_safe_text(raw).strip(), mime_type="text/plain")

        chunks: list[bytes] = []
        mime_type: str | None = None
        for part in _response_parts(raw):
            inline_data = getattr(part, "inline_data", None)
            if inline_data and inline_data.data:
                chunks.append(inline_data.data)
                mime_type = mime_type or inline_data.mime_type

        if not chunks:
            reason = _safe_text(raw).strip() or "no inline data parts found"
            raise ProviderUnavailable(f"Google AI returned no media: {reason}", self.name)

        if capability is Capability.IMAGE:
            return ProviderOutput(content=chunks[0], mime_type=mime_type or "image/png")

        audio_bytes, playable_mime = to_playable_audio(b"".join(chunks), mime_type)
        return ProviderOutput(content=audio_bytes, mime_type=playable_mime)
