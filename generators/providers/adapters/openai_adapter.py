from __future__ import annotations

import base64
from typing import Any, Callable

import openai
from openai import AsyncOpenAI

from generators.config import ProviderSettings
from generators.providers.errors import ProviderTimeout, ProviderUnavailable
from generators.providers.provider_model import Capability, GenerationRequest, ProviderOutput
from generators.story.story_prompts import (
    ENHANCER_SYSTEM_INSTRUCTION,
    STORY_SYSTEM_INSTRUCTION,
    build_enhancement_prompt,
    build_story_prompt,
    max_output_tokens,
)
from generators.tts.tts_audio import sniff_audio_mime
from generators.tts.tts_text import clamp_speed, openai_voice

from .base import SdkProviderAdapter

DALLE_SIZES = {"1024x1024", "1792x1024", "1024x1792"}

ClientFactory = Callable[[str], AsyncOpenAI]


def _default_client_factory(api_key: str) -> AsyncOpenAI:
    # Failover replaces SDK retries; the router owns the timeout.
    return AsyncOpenAI(api_key=api_key, max_retries=0)


class OpenAIAdapter(SdkProviderAdapter):
    name = "openai"
    capabilities = (Capability.TEXT, Capability.ENHANCEMENT, Capability.IMAGE, Capability.AUDIO)

    def __init__(self, settings: ProviderSettings, client_factory: ClientFactory | None = None):
        super().__init__(settings, client_factory or _default_client_factory)

    async def invoke(self, request: GenerationRequest, api_key: str) -> ProviderOutput:
        try:
            return await super().invoke(request, api_key)
        except openai.APITimeoutError as error:
            raise ProviderTimeout(str(error), self.name) from error

    async def generate_text(self, request: GenerationRequest, api_key: str) -> ProviderOutput:
        if request.capability is Capability.ENHANCEMENT:
            system_prompt = ENHANCER_SYSTEM_INSTRUCTION
            user_prompt = build_enhancement_prompt(request.prompt, request.genre, request.length)
            max_tokens, temperature = 1000, 0.7
        else:
            system_prompt = STORY_SYSTEM_INSTRUCTION
            user_prompt = build_story_prompt(request.prompt, request.genre, request.length)
            max_tokens, temperature = max_output_tokens(request.length), 0.8

        client = self._client_for(api_key)
        completion = await client.chat.completions.create(
            model=self.settings.openai_text_model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            max_tokens=max_tokens,
            temperature=temperature,
        )
        return self.normalize(completion, request.capability)

    async def generate_image(self, request: GenerationRequest, api_key: str) -> ProviderOutput:
        size = request.target_size if request.target_size in DALLE_SIZES else "1024x1024"
        client = self._client_for(api_key)
        result = await client.images.generate(
            model=self.settings.openai_image_model,
            prompt=request.prompt,
            size=size,
            n=1,
            response_format="b64_json",
        )
        return self.normalize(result, Capability.IMAGE)

    async def generate_audio(self, request: GenerationRequest, api_key: str) -> ProviderOutput:
        client = self._client_for(api_key)
        response = await client.audio.speech.create(
            model=self.settings.openai_tts_model,
            voice=openai_voice(request.voice),
            input=request.prompt,
            speed=clamp_speed(request.speed),
            response_format="mp3",
        )
        return self.normalize(response, Capability.AUDIO)

    async def _close_client(self, client: AsyncOpenAI) -> None:
        await client.close()

    def normalize(self, raw: Any, capability: Capability) -> ProviderOutput:
        if capability in (Capability.TEXT, Capability.ENHANCEMENT):
            choices = getattr(raw, "choices", None) or []
            message = getattr(choices[0], "message", None) if choices else None
            content = (getattr(message, "content", None) or "").strip()
            return ProviderOutput(content=content, mime_type="text/plain")

        if capability is Capability.IMAGE:
            data = getattr(raw, "data", None) or []
            encoded = getattr(data[0], "b64_json", None) if data else None
            if not encoded:
                raise ProviderUnavailable("OpenAI returned no image data", self.name)
            return ProviderOutput(content=base64.b64decode(encoded), mime_type="image/png")

        audio_bytes = raw.content if hasattr(raw, "content") else bytes(raw)
        return ProviderOutput(content=audio_bytes, mime_type=sniff_audio_mime(audio_bytes))
