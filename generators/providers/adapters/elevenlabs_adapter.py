from __future__ import annotations

from typing import Any

import httpx

from generators.providers.provider_model import Capability, GenerationRequest, ProviderOutput
from generators.tts.tts_audio import sniff_audio_mime
from generators.tts.tts_text import elevenlabs_voice_id

from .base import HttpProviderAdapter

ELEVENLABS_TTS_URL = "https://api.elevenlabs.io/v1/text-to-speech/{voice_id}"


class ElevenLabsAdapter(HttpProviderAdapter):
    name = "elevenlabs"
    capabilities = (Capability.AUDIO,)

    async def generate_audio(self, request: GenerationRequest, api_key: str) -> ProviderOutput:
        response = await self._post(
            ELEVENLABS_TTS_URL.format(voice_id=elevenlabs_voice_id(request.voice)),
            headers={
                "xi-api-key": api_key,
                "Accept": "audio/mpeg",
                "Content-Type": "application/json",
            },
            json={
                "text": request.prompt,
                "model_id": self.settings.elevenlabs_model,
                "voice_settings": {
                    "stability": 0.5,
                    "similarity_boost": 0.75,
                    "style": 0.0,
                    "use_speaker_boost": True,
                },
            },
        )
        return self.normalize(response, Capability.AUDIO)

    def normalize(self, raw: Any, capability: Capability) -> ProviderOutput:
        response: httpx.Response = raw
        return ProviderOutput(content=response.content, mime_type=sniff_audio_mime(response.content))
