from __future__ import annotations

from typing import Any

import httpx

from generators.providers.errors import ProviderUnavailable
from generators.providers.provider_model import Capability, GenerationRequest, ProviderOutput

from .base import HttpProviderAdapter, aspect_ratio_for_size

STABILITY_URL = "https://api.stability.ai/v2beta/stable-image/generate/core"


class StabilityAdapter(HttpProviderAdapter):
    name = "stability"
    capabilities = (Capability.IMAGE,)

    async def generate_image(self, request: GenerationRequest, api_key: str) -> ProviderOutput:
        response = await self._post(
            STABILITY_URL,
            headers={"Authorization": f"Bearer {api_key}", "Accept": "image/*"},
            files={"none": (None, "")},
            data={
                "prompt": request.prompt,
                "aspect_ratio": aspect_ratio_for_size(request.target_size),
                "output_format": "png",
            },
        )
        return self.normalize(response, Capability.IMAGE)

    def normalize(self, raw: Any, capability: Capability) -> ProviderOutput:
        response: httpx.Response = raw
        mime_type = response.headers.get("content-type", "").split(";")[0].strip() or "image/png"
        if not mime_type.startswith("image/"):
            raise ProviderUnavailable(f"Stability returned {mime_type}", self.name)
        return ProviderOutput(content=response.content, mime_type=mime_type)
