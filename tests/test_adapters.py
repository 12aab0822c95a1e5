import base64
import json
import unittest
from types import SimpleNamespace
from unittest.mock import AsyncMock

import httpx

from generators.config import ProviderSettings
from generators.providers.adapters import (
    ElevenLabsAdapter,
    GoogleAIAdapter,
    HuggingFaceAdapter,
    OpenAIAdapter,
    StabilityAdapter,
)
from generators.providers.adapters.base import aspect_ratio_for_size
from generators.providers.errors import ProviderUnavailable, RateLimited, classify_error
from generators.providers.provider_model import Capability, GenerationRequest

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 200


def _transport(handler, seen):
    def record(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    return httpx.MockTransport(record)


class TestAspectRatio(unittest.TestCase):
    def test_sizes(self):
        self.assertEqual(aspect_ratio_for_size("1024x1024"), "1:1")
        self.assertEqual(aspect_ratio_for_size("1792x1024"), "16:9")
        self.assertEqual(aspect_ratio_for_size("1024x1792"), "9:16")
        self.assertEqual(aspect_ratio_for_size("bogus"), "1:1")


class TestHuggingFaceAdapter(unittest.IsolatedAsyncioTestCase):
    async def test_text_uses_chat_endpoint(self):
        seen = []
        transport = _transport(
            lambda request: httpx.Response(
                200, json={"choices": [{"message": {"content": "  A tale.  "}}]}
            ),
            seen,
        )
        adapter = HuggingFaceAdapter(ProviderSettings(), transport=transport)

        output = await adapter.invoke(
            GenerationRequest(Capability.TEXT, "otters", genre="comedy", length="short"), "hf_key"
        )

        self.assertEqual(output.content, "A tale.")
        self.assertEqual(seen[0].headers["Authorization"], "Bearer hf_key")
        body = json.loads(seen[0].content)
        self.assertEqual(body["model"], ProviderSettings().huggingface_text_model)
        self.assertIn("otters", body["messages"][1]["content"])

    async def test_image_returns_bytes(self):
        seen = []
        transport = _transport(
            lambda request: httpx.Response(
                200, content=PNG_BYTES, headers={"content-type": "image/png"}
            ),
            seen,
        )
        adapter = HuggingFaceAdapter(ProviderSettings(), transport=transport)

        output = await adapter.invoke(GenerationRequest(Capability.IMAGE, "a red kite"), "hf_key")

        self.assertEqual(output.content, PNG_BYTES)
        self.assertEqual(output.mime_type, "image/png")
        self.assertIn("stable-diffusion-xl-base-1.0", str(seen[0].url))

    async def test_json_instead_of_image_is_rejected(self):
        transport = _transport(
            lambda request: httpx.Response(200, json={"error": "model loading"}), []
        )
        adapter = HuggingFaceAdapter(ProviderSettings(), transport=transport)

        with self.assertRaises(ProviderUnavailable):
            await adapter.invoke(GenerationRequest(Capability.IMAGE, "a red kite"), "hf_key")

    async def test_http_429_classifies_as_rate_limited(self):
        transport = _transport(lambda request: httpx.Response(429, json={"error": "slow"}), [])
        adapter = HuggingFaceAdapter(ProviderSettings(), transport=transport)

        with self.assertRaises(httpx.HTTPStatusError) as context:
            await adapter.invoke(GenerationRequest(Capability.TEXT, "otters"), "hf_key")

        self.assertIsInstance(classify_error(context.exception, "huggingface"), RateLimited)


class TestStabilityAdapter(unittest.IsolatedAsyncioTestCase):
    async def test_multipart_request(self):
        seen = []
        transport = _transport(
            lambda request: httpx.Response(
                200, content=PNG_BYTES, headers={"content-type": "image/png"}
            ),
            seen,
        )
        adapter = StabilityAdapter(ProviderSettings(), transport=transport)

        output = await adapter.invoke(
            GenerationRequest(Capability.IMAGE, "a castle", target_size="1792x1024"), "sk-stab"
        )

        self.assertEqual(output.content, PNG_BYTES)
        request = seen[0]
        self.assertEqual(request.headers["Accept"], "image/*")
        self.assertIn("multipart/form-data", request.headers["content-type"])
        self.assertIn(b"16:9", request.content)

    async def test_text_is_not_supported(self):
        adapter = StabilityAdapter(ProviderSettings())
        with self.assertRaises(ProviderUnavailable):
            await adapter.invoke(GenerationRequest(Capability.TEXT, "story"), "sk-stab")


class TestElevenLabsAdapter(unittest.IsolatedAsyncioTestCase):
    async def test_voice_id_and_header(self):
        seen = []
        audio = b"ID3" + b"\x00" * 300
        transport = _transport(lambda request: httpx.Response(200, content=audio), seen)
        adapter = ElevenLabsAdapter(ProviderSettings(), transport=transport)

        output = await adapter.invoke(
            GenerationRequest(Capability.AUDIO, "Hello reader.", voice="child"), "el-key"
        )

        self.assertEqual(output.content, audio)
        self.assertEqual(output.mime_type, "audio/mpeg")
        self.assertTrue(str(seen[0].url).endswith("/pNInz6obpgDQGcFmaJgB"))
        self.assertEqual(seen[0].headers["xi-api-key"], "el-key")
        body = json.loads(seen[0].content)
        self.assertEqual(body["model_id"], "eleven_multilingual_v2")


class TestOpenAIAdapter(unittest.IsolatedAsyncioTestCase):
    def _adapter(self, client):
        self.keys = []

        def factory(api_key):
            self.keys.append(api_key)
            return client

        return OpenAIAdapter(ProviderSettings(), client_factory=factory)

    async def test_text(self):
        create = AsyncMock(
            return_value=SimpleNamespace(
                choices=[SimpleNamespace(message=SimpleNamespace(content="  Story body  "))]
            )
        )
        client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
        adapter = self._adapter(client)

        output = await adapter.invoke(
            GenerationRequest(Capability.TEXT, "a brave snail", length="long"), "sk-test"
        )

        self.assertEqual(output.content, "Story body")
        self.assertEqual(self.keys, ["sk-test"])
        kwargs = create.await_args.kwargs
        self.assertEqual(kwargs["model"], "gpt-4o-mini")
        self.assertEqual(kwargs["max_tokens"], 4000)

    async def test_image_size_falls_back_to_square(self):
        encoded = base64.b64encode(PNG_BYTES).decode("ascii")
        generate = AsyncMock(return_value=SimpleNamespace(data=[SimpleNamespace(b64_json=encoded)]))
        adapter = self._adapter(SimpleNamespace(images=SimpleNamespace(generate=generate)))

        output = await adapter.invoke(
            GenerationRequest(Capability.IMAGE, "a fox", target_size="512x512"), "sk-test"
        )

        self.assertEqual(output.content, PNG_BYTES)
        self.assertEqual(generate.await_args.kwargs["size"], "1024x1024")

    async def test_speech_voice_mapping(self):
        create = AsyncMock(return_value=SimpleNamespace(content=b"ID3" + b"\x00" * 200))
        adapter = self._adapter(
            SimpleNamespace(audio=SimpleNamespace(speech=SimpleNamespace(create=create)))
        )

        output = await adapter.invoke(
            GenerationRequest(Capability.AUDIO, "Hi.", voice="child", speed=9.0), "sk-test"
        )

        self.assertEqual(output.mime_type, "audio/mpeg")
        kwargs = create.await_args.kwargs
        self.assertEqual(kwargs["voice"], "nova")
        self.assertEqual(kwargs["speed"], 4.0)
        self.assertEqual(kwargs["model"], "tts-1-hd")


    async def test_client_is_reused_per_key_and_closed(self):
        create = AsyncMock(
            return_value=SimpleNamespace(
                choices=[SimpleNamespace(message=SimpleNamespace(content="x" * 150))]
            )
        )
        close = AsyncMock()
        client = SimpleNamespace(
            chat=SimpleNamespace(completions=SimpleNamespace(create=create)),
            close=close,
        )
        adapter = self._adapter(client)
        request = GenerationRequest(Capability.TEXT, "a brave snail")

        await adapter.invoke(request, "sk-test")
        await adapter.invoke(request, "sk-test")
        await adapter.invoke(request, "sk-rotated")

        self.assertEqual(self.keys, ["sk-test", "sk-rotated"])
        self.assertEqual(create.await_count, 3)

        await adapter.aclose()

        self.assertEqual(close.await_count, 2)
        await adapter.invoke(request, "sk-test")
        self.assertEqual(self.keys, ["sk-test", "sk-rotated", "sk-test"])

class TestGoogleAIAdapter(unittest.IsolatedAsyncioTestCase):
    def _adapter(self, generate_content):
        client = SimpleNamespace(aio=SimpleNamespace(models=SimpleNamespace(generate_content=generate_content)))
        return GoogleAIAdapter(ProviderSettings(), client_factory=lambda api_key: client)

    async def test_text(self):
        generate = AsyncMock(return_value=SimpleNamespace(text="  Gemini story  ", parts=None))
        adapter = self._adapter(generate)

        output = await adapter.invoke(GenerationRequest(Capability.ENHANCEMENT, "idea"), "AIzaKey")

        self.assertEqual(output.content, "Gemini story")
        self.assertEqual(generate.await_args.kwargs["model"], "gemini-2.5-flash")

    async def test_image_inline_data(self):
        part = SimpleNamespace(inline_data=SimpleNamespace(data=PNG_BYTES, mime_type="image/png"))
        adapter = self._adapter(AsyncMock(return_value=SimpleNamespace(text=None, parts=[part])))

        output = await adapter.invoke(GenerationRequest(Capability.IMAGE, "a moon"), "AIzaKey")

        self.assertEqual(output.content, PNG_BYTES)
        self.assertEqual(output.mime_type, "image/png")

    async def test_audio_pcm_is_wrapped_as_wav(self):
        parts = [
            SimpleNamespace(inline_data=SimpleNamespace(data=b"\x00\x01" * 60, mime_type="audio/L16;rate=24000")),
            SimpleNamespace(inline_data=SimpleNamespace(data=b"\x02\x03" * 60, mime_type="audio/L16;rate=24000")),
        ]
        adapter = self._adapter(AsyncMock(return_value=SimpleNamespace(text=None, parts=parts)))

        output = await adapter.invoke(GenerationRequest(Capability.AUDIO, "Hello."), "AIzaKey")

        self.assertEqual(output.mime_type, "audio/wav")
        self.assertTrue(output.content.startswith(b"RIFF"))
        self.assertEqual(len(output.content), 44 + 240)

    async def test_missing_media_raises(self):
        adapter = self._adapter(
            AsyncMock(return_value=SimpleNamespace(text="blocked by safety", parts=[], candidates=[]))
        )

        with self.assertRaises(ProviderUnavailable) as context:
            await adapter.invoke(GenerationRequest(Capability.IMAGE, "a moon"), "AIzaKey")

        self.assertIn("blocked by safety", str(context.exception))


    async def test_client_is_built_once_per_key(self):
        built = []
        generate = AsyncMock(return_value=SimpleNamespace(text="  Gemini story  ", parts=None))

        def factory(api_key):
            built.append(api_key)
            return SimpleNamespace(aio=SimpleNamespace(models=SimpleNamespace(generate_content=generate)))

        adapter = GoogleAIAdapter(ProviderSettings(), client_factory=factory)
        for _ in range(3):
            await adapter.invoke(GenerationRequest(Capability.TEXT, "idea"), "AIzaKey")

        self.assertEqual(built, ["AIzaKey"])
        self.assertEqual(generate.await_count, 3)


if __name__ == "__main__":
    unittest.main()
