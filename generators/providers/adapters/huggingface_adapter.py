from __future__ import annotations

from typing import Any

import httpx

from generators.providers.errors import ProviderUnavailable
from generators.providers.provider_model import Capability, GenerationRequest, ProviderOutput
from generators.story.story_prompts import (
    ENHANCER_SYSTEM_INSTRUCTION,
    STORY_SYSTEM_INSTRUCTION,
    build_enhancement_prompt,
    build_story_prompt,
    max_output_tokens,
)

from .base import HttpProviderAdapter

HF_CHAT_URL = "https://router.huggingface.co/v1/chat/completions"
HF_INFERENCE_URL = "https://router.huggingface.co/hf-inference/models/{model}"


class HuggingFaceAdapter(HttpProviderAdapter):
    name = "huggingface"
    capabilities = (Capability.TEXT, Capability.ENHANCEMENT, Capability.IMAGE)

    def _headers(self, api_key: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {api_key}"}

    async def generate_text(self, request: GenerationRequest, api_key: str) -> ProviderOutput:
        if request.capability is Capability.ENHANCEMENT:
            messages = [
                {"role": "system", "content": ENHANCER_SYSTEM_INSTRUCTION},
                {
                    "role": "user",
                    "content": build_enhancement_prompt(
                        request.prompt, request.genre, request.length
                    ),
                },
            ]
            max_tokens = 1000
        else:
            messages = [
                {"role": "system", "content": STORY_SYSTEM_INSTRUCTION},
                {
                    "role": "user",
                    "content": build_story_prompt(request.prompt, request.genre, request.length),
                },
            ]
            max_tokens = max_output_tokens(request.length)

        response = await self._post(
            HF_CHAT_URL,
            headers=self._headers(api_key),
            json={
                "model": self.settings.huggingface_text_model,
                "messages": messages,
                "max_tokens": max_tokens,
                "temperature": 0.8,
            },
        )
        return self.normalize(response, request.capability)

    async def generate_image(self, request: GenerationRequest, api_key: str) -> ProviderOutput:
        width, height = _dimensions(request.target_size)
        response = await self._post(
            HF_INFERENCE_URL.format(model=self.settings.huggingface_image_model),
            headers={**self._headers(api_key), "Accept": "image/png"},
            json={
                "inputs": request.prompt,
                "parameters": {"width": width, "height": height},
            },
        )
        return self.normalize(response, Capability.IMAGE)

    def normalize(self, raw: Any, capability: Capability) -> ProviderOutput:
        response: httpx.Response = raw
        if capability in (Capability.TEXT, Capability.ENHANCEMENT):
            payload = response.json()
            choices = payload.get("choices") or []
            if not choices:
                raise ProviderUnavailable("Hugging Face returned no choices", self.name)
            content = (choices[0].get("message") or {}).get("content") or ""
            return ProviderOutput(content=content.strip(), mime_type="text/plain")

        mime_type = response.headers.get("content-type", "").split(";")[0].strip()
        if not mime_type.startswith("image/"):
            raise ProviderUnavailable(
                f"Hugging Face returned {mime_type or 'unknown content'} instead of an image",
                self.name,
            )
        return ProviderOutput(content=response.content, mime_type=mime_type)


def _dimensions(target_size: str) -> tuple[int, int]:
    try:
        width, height = (int(part) for part in target_size.lower().split("x", 1))
    except ValueError:
        return 1024, 1024
    return width, height
