import asyncio
import unittest
from types import SimpleNamespace
from unittest.mock import AsyncMock

import httpx

from generators.config import ProviderSettings
from generators.fallback.fallback_generator import (
    FallbackGenerator,
    NarrationPlaceholder,
    PlaceholderImage,
    count_words,
)
from generators.providers.credentials import CredentialStore
from generators.providers.errors import (
    AuthExpired,
    CredentialInvalid,
    ProviderTimeout,
    ProviderUnavailable,
    QuotaExceeded,
    RateLimited,
    classify_error,
)
from generators.providers.provider_model import (
    Capability,
    GenerationRequest,
    ProviderDescriptor,
    ProviderOutput,
)
from generators.providers.registry import ProviderRegistry
from generators.providers.router import GenerationRouter, ProviderCircuitBreaker

LONG_STORY = "Once upon a time a brave fox crossed the hills. " * 10


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def _status_error(status_code: int, message: str = "provider said no"):
    error = RuntimeError(message)
    error.status_code = status_code
    return error


def _descriptor(name, priority, invoke, capability=Capability.TEXT, timeout=5.0, min_length=100):
    return ProviderDescriptor(
        name=name,
        capability=capability,
        priority=priority,
        credential_key=f"{name.upper()}_KEY",
        invoke=invoke,
        validator=lambda capability, provider_name, key: True,
        min_acceptable_length=min_length,
        timeout=timeout,
    )


def _router(*descriptors, breaker=None, seed=3):
    environ = {descriptor.credential_key: f"{descriptor.name}-secret-key" for descriptor in descriptors}
    registry = ProviderRegistry(CredentialStore(environ))
    for descriptor in descriptors:
        registry.register(descriptor)
    return GenerationRouter(registry, FallbackGenerator(seed=seed), breaker=breaker)


class TestGenerationRouter(unittest.IsolatedAsyncioTestCase):
    async def test_no_providers_returns_fallback_story(self):
        router = _router()

        result = await router.route(
            GenerationRequest(Capability.TEXT, "dragon", genre="fantasy", length="short")
        )

        self.assertEqual(result.provider_name, "fallback")
        self.assertTrue(result.is_fallback)
        self.assertGreaterEqual(count_words(result.content), 800)
        self.assertIn("dragon", result.content)

    async def test_first_successful_provider_wins(self):
        first = AsyncMock(return_value=ProviderOutput(LONG_STORY, "text/plain"))
        second = AsyncMock(return_value=ProviderOutput(LONG_STORY, "text/plain"))
        router = _router(_descriptor("p1", 1, first), _descriptor("p2", 2, second))

        result = await router.route(GenerationRequest(Capability.TEXT, "fox"))

        self.assertEqual(result.provider_name, "p1")
        self.assertEqual(result.content, LONG_STORY)
        first.assert_awaited_once()
        second.assert_not_awaited()
        args = first.await_args.args
        self.assertEqual(args[1], "p1-secret-key")

    async def test_short_output_is_a_soft_failure(self):
        short = AsyncMock(return_value=ProviderOutput("Too short.", "text/plain"))
        good = AsyncMock(return_value=ProviderOutput(LONG_STORY, "text/plain"))
        router = _router(_descriptor("p1", 1, short), _descriptor("p2", 2, good))

        result = await router.route(GenerationRequest(Capability.TEXT, "fox"))

        self.assertEqual(result.provider_name, "p2")
        self.assertEqual(len(result.failures), 1)
        self.assertTrue(result.failures[0].startswith("p1: QualityGateFailed"))

    async def test_exceptions_are_classified_and_absorbed(self):
        failing = AsyncMock(side_effect=_status_error(429))
        good = AsyncMock(return_value=ProviderOutput(LONG_STORY, "text/plain"))
        router = _router(_descriptor("p1", 1, failing), _descriptor("p2", 2, good))

        result = await router.route(GenerationRequest(Capability.TEXT, "fox"))

        self.assertEqual(result.provider_name, "p2")
        self.assertIn("RateLimited", result.failures[0])

    async def test_every_provider_failing_falls_back(self):
        router = _router(
            _descriptor("p1", 1, AsyncMock(side_effect=_status_error(401))),
            _descriptor("p2", 2, AsyncMock(side_effect=ValueError("boom"))),
        )

        result = await router.route(GenerationRequest(Capability.TEXT, "fox", length="short"))

        self.assertEqual(result.provider_name, "fallback")
        self.assertEqual(len(result.failures), 2)
        self.assertIn("AuthExpired", result.failures[0])
        self.assertIn("ProviderUnavailable", result.failures[1])

    async def test_slow_provider_times_out(self):
        async def slow(request, api_key):
            await asyncio.sleep(5)
            return ProviderOutput(LONG_STORY)

        good = AsyncMock(return_value=ProviderOutput(LONG_STORY, "text/plain"))
        router = _router(
            _descriptor("slow", 1, slow, timeout=0.01),
            _descriptor("p2", 2, good),
        )

        result = await router.route(GenerationRequest(Capability.TEXT, "fox"))

        self.assertEqual(result.provider_name, "p2")
        self.assertIn("ProviderTimeout", result.failures[0])

    async def test_expired_deadline_goes_straight_to_fallback(self):
        invoke = AsyncMock(return_value=ProviderOutput(LONG_STORY))
        router = _router(_descriptor("p1", 1, invoke))
        loop = asyncio.get_running_loop()

        result = await router.route(
            GenerationRequest(Capability.TEXT, "fox", length="short"),
            deadline=loop.time() - 1,
        )

        self.assertTrue(result.is_fallback)
        invoke.assert_not_awaited()
        self.assertIn("deadline", result.failures[0])

    async def test_cancellation_propagates_to_caller(self):
        started = asyncio.Event()

        async def hanging(request, api_key):
            started.set()
            await asyncio.sleep(60)

        router = _router(_descriptor("p1", 1, hanging, timeout=120))
        task = asyncio.create_task(router.route(GenerationRequest(Capability.TEXT, "fox")))
        await started.wait()
        task.cancel()

        with self.assertRaises(asyncio.CancelledError):
            await task

    async def test_enhancement_must_grow_the_prompt(self):
        prompt = "A lighthouse keeper befriends a whale."
        echo = AsyncMock(return_value=ProviderOutput(prompt + " More.", "text/plain"))
        router = _router(
            _descriptor("p1", 1, echo, capability=Capability.ENHANCEMENT, min_length=1)
        )

        result = await router.route(
            GenerationRequest(Capability.ENHANCEMENT, prompt, genre="adventure")
        )

        self.assertTrue(result.is_fallback)
        self.assertTrue(result.content.startswith(prompt))
        self.assertGreater(len(result.content), len(prompt) * 1.5)
        self.assertIn("QualityGateFailed", result.failures[0])

    async def test_image_fallback_is_a_placeholder(self):
        router = _router()

        result = await router.route(
            GenerationRequest(Capability.IMAGE, "A castle on a hill", scene_index=12, style="cartoon")
        )

        self.assertIsInstance(result.content, PlaceholderImage)
        self.assertEqual(result.content.palette_index, 2)
        self.assertEqual(result.content.scene_number, 13)
        self.assertEqual(result.mime_type, "image/svg+xml")

    async def test_binary_output_must_meet_minimum_size(self):
        tiny = AsyncMock(return_value=ProviderOutput(b"\x89PNG", "image/png"))
        router = _router(_descriptor("p1", 1, tiny, capability=Capability.IMAGE))

        result = await router.route(GenerationRequest(Capability.IMAGE, "A castle"))

        self.assertTrue(result.is_fallback)
        self.assertIn("too small", result.failures[0])

    async def test_audio_fallback_is_a_transcript(self):
        router = _router()

        result = await router.route(GenerationRequest(Capability.AUDIO, "Hello there, reader."))

        self.assertIsInstance(result.content, NarrationPlaceholder)
        self.assertEqual(result.content.transcript, "Hello there, reader.")

    async def test_open_circuit_skips_provider(self):
        clock = FakeClock()
        breaker = ProviderCircuitBreaker(failure_threshold=2, cooldown_sec=300, clock=clock)
        failing = AsyncMock(side_effect=_status_error(500))
        router = _router(_descriptor("p1", 1, failing), breaker=breaker)
        request = GenerationRequest(Capability.TEXT, "fox", length="short")

        await router.route(request)
        await router.route(request)
        self.assertEqual(failing.await_count, 2)

        result = await router.route(request)
        self.assertEqual(failing.await_count, 2)
        self.assertIn("circuit open", result.failures[0])

        clock.now = 301
        await router.route(request)
        self.assertEqual(failing.await_count, 3)

    async def test_quality_gate_failures_do_not_trip_breaker(self):
        breaker = ProviderCircuitBreaker(failure_threshold=1, cooldown_sec=300)
        short = AsyncMock(return_value=ProviderOutput("tiny"))
        router = _router(_descriptor("p1", 1, short), breaker=breaker)

        await router.route(GenerationRequest(Capability.TEXT, "fox", length="short"))

        self.assertEqual(breaker.failure_count(Capability.TEXT, "p1"), 0)
        self.assertFalse(breaker.is_open(Capability.TEXT, "p1"))


class TestProviderCircuitBreaker(unittest.TestCase):
    def test_success_resets_counter(self):
        breaker = ProviderCircuitBreaker(failure_threshold=5)
        for _ in range(4):
            breaker.record_failure(Capability.IMAGE, "openai")
        breaker.record_success(Capability.IMAGE, "openai")
        breaker.record_failure(Capability.IMAGE, "openai")

        self.assertEqual(breaker.failure_count(Capability.IMAGE, "openai"), 1)
        self.assertFalse(breaker.is_open(Capability.IMAGE, "openai"))

    def test_counters_are_per_capability(self):
        breaker = ProviderCircuitBreaker(failure_threshold=1)
        breaker.record_failure(Capability.IMAGE, "openai")

        self.assertTrue(breaker.is_open(Capability.IMAGE, "openai"))
        self.assertFalse(breaker.is_open(Capability.TEXT, "openai"))

    def test_half_open_failure_reopens(self):
        clock = FakeClock()
        breaker = ProviderCircuitBreaker(failure_threshold=3, cooldown_sec=10, clock=clock)
        for _ in range(3):
            breaker.record_failure(Capability.AUDIO, "elevenlabs")
        clock.now = 11
        self.assertFalse(breaker.is_open(Capability.AUDIO, "elevenlabs"))

        breaker.record_failure(Capability.AUDIO, "elevenlabs")
        self.assertTrue(breaker.is_open(Capability.AUDIO, "elevenlabs"))


    def test_router_builds_breaker_from_settings(self):
        settings = ProviderSettings(breaker_failure_threshold=2, breaker_cooldown_sec=30.0)
        router = GenerationRouter(
            ProviderRegistry(CredentialStore({})), FallbackGenerator(seed=1), settings=settings
        )

        self.assertEqual(router.breaker.failure_threshold, 2)
        self.assertEqual(router.breaker.cooldown_sec, 30.0)

    def test_explicit_breaker_wins_over_settings(self):
        breaker = ProviderCircuitBreaker(failure_threshold=9)
        router = GenerationRouter(
            ProviderRegistry(CredentialStore({})),
            FallbackGenerator(seed=1),
            breaker=breaker,
            settings=ProviderSettings(),
        )

        self.assertIs(router.breaker, breaker)


class TestClassifyError(unittest.TestCase):
    def test_status_codes(self):
        self.assertIsInstance(classify_error(_status_error(401), "p"), AuthExpired)
        self.assertIsInstance(classify_error(_status_error(403), "p"), CredentialInvalid)
        self.assertIsInstance(classify_error(_status_error(402), "p"), QuotaExceeded)
        self.assertIsInstance(classify_error(_status_error(429), "p"), RateLimited)
        self.assertIsInstance(classify_error(_status_error(504), "p"), ProviderTimeout)
        self.assertIsInstance(classify_error(_status_error(500), "p"), ProviderUnavailable)

    def test_quota_message(self):
        error = RuntimeError("You exceeded your current quota")
        self.assertIsInstance(classify_error(error, "openai"), QuotaExceeded)

    def test_status_on_response_attribute(self):
        error = RuntimeError("rate limited")
        error.response = SimpleNamespace(status_code=429)
        self.assertIsInstance(classify_error(error, "p"), RateLimited)

    def test_httpx_errors(self):
        request = httpx.Request("POST", "https://example.test")
        response = httpx.Response(429, request=request)
        status_error = httpx.HTTPStatusError("too many", request=request, response=response)
        self.assertIsInstance(classify_error(status_error, "p"), RateLimited)
        self.assertIsInstance(
            classify_error(httpx.ReadTimeout("slow", request=request), "p"), ProviderTimeout
        )

    def test_provider_errors_pass_through_with_name(self):
        original = RateLimited("slow down")
        classified = classify_error(original, "stability")
        self.assertIs(classified, original)
        self.assertEqual(classified.provider_name, "stability")


if __name__ == "__main__":
    unittest.main()
