from __future__ import annotations

import asyncio
import logging
import threading
import time
from typing import Any, Callable

from generators.config import ProviderSettings
from generators.fallback.fallback_generator import FallbackGenerator

from .errors import AllProvidersExhausted, ProviderTimeout, QualityGateFailed, classify_error
from .provider_model import (
    FALLBACK_PROVIDER,
    Capability,
    GenerationRequest,
    GenerationResult,
    ProviderDescriptor,
    ProviderOutput,
)
from .registry import ProviderRegistry

logger = logging.getLogger(__name__)

ENHANCEMENT_GROWTH_FACTOR = 1.5


class ProviderCircuitBreaker:
    """Skips a provider for a cooldown after consecutive failures.

    Counters are the only state shared across concurrent requests, so every
    update goes through the lock.
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        cooldown_sec: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.failure_threshold = max(1, failure_threshold)
        self.cooldown_sec = max(0.0, cooldown_sec)
        self._clock = clock
        self._lock = threading.Lock()
        self._failures: dict[tuple[str, str], int] = {}
        self._open_until: dict[tuple[str, str], float] = {}

    @staticmethod
    def _key(capability: Capability, provider_name: str) -> tuple[str, str]:
        return capability.value, provider_name

    def is_open(self, capability: Capability, provider_name: str) -> bool:
        key = self._key(capability, provider_name)
        with self._lock:
            open_until = self._open_until.get(key)
            if open_until is None:
                return False
            if self._clock() >= open_until:
                # Half-open: one more failure re-opens immediately.
                del self._open_until[key]
                self._failures[key] = self.failure_threshold - 1
                return False
            return True

    def record_success(self, capability: Capability, provider_name: str) -> None:
        key = self._key(capability, provider_name)
        with self._lock:
            self._failures.pop(key, None)
            self._open_until.pop(key, None)

    def record_failure(self, capability: Capability, provider_name: str) -> None:
        key = self._key(capability, provider_name)
        with self._lock:
            count = self._failures.get(key, 0) + 1
            self._failures[key] = count
            if count >= self.failure_threshold:
                self._open_until[key] = self._clock() + self.cooldown_sec

    def failure_count(self, capability: Capability, provider_name: str) -> int:
        with self._lock:
            return self._failures.get(self._key(capability, provider_name), 0)

    def reset(self) -> None:
        with self._lock:
            self._failures.clear()
            self._open_until.clear()


def check_quality(
    descriptor: ProviderDescriptor,
    request: GenerationRequest,
    output: ProviderOutput,
) -> None:
    content = output.content
    minimum = descriptor.min_acceptable_length

    if request.capability in (Capability.TEXT, Capability.ENHANCEMENT):
        if not isinstance(content, str):
            raise QualityGateFailed("expected text content", descriptor.name)
        stripped = content.strip()
        if len(stripped) < minimum:
            raise QualityGateFailed(
                f"generated content too short ({len(stripped)} chars, need {minimum})",
                descriptor.name,
            )
        if request.capability is Capability.ENHANCEMENT:
            required = len(request.prompt.strip()) * ENHANCEMENT_GROWTH_FACTOR
            if len(stripped) <= required:
                raise QualityGateFailed(
                    f"enhanced prompt not substantially longer ({len(stripped)} chars)",
                    descriptor.name,
                )
        return

    if not isinstance(content, (bytes, bytearray)):
        raise QualityGateFailed("expected binary content", descriptor.name)
    if len(content) < minimum:
        raise QualityGateFailed(
            f"binary payload too small ({len(content)} bytes, need {minimum})",
            descriptor.name,
        )


class GenerationRouter:
    def __init__(
        self,
        registry: ProviderRegistry,
        fallback: FallbackGenerator,
        breaker: ProviderCircuitBreaker | None = None,
        settings: ProviderSettings | None = None,
    ) -> None:
        self.registry = registry
        self.fallback = fallback
        if breaker is None and settings is not None:
            breaker = ProviderCircuitBreaker(
                failure_threshold=settings.breaker_failure_threshold,
                cooldown_sec=settings.breaker_cooldown_sec,
            )
        self.breaker = breaker

    async def route(
        self,
        request: GenerationRequest,
        deadline: float | None = None,
    ) -> GenerationResult:
        """Try each usable provider in priority order, then fall back.

        ``deadline`` is an absolute ``loop.time()`` value shared by all attempts.
        Provider failures never escape; cancellation of the caller does.
        """
        loop = asyncio.get_running_loop()
        started = time.perf_counter()
        capability = request.capability
        failures: list[str] = []

        providers = self.registry.get_ordered(capability)
        if not providers:
            logger.info("SKIP capability=%s reason=no_configured_providers", capability.value)

        for descriptor in providers:
            if self.breaker is not None and self.breaker.is_open(capability, descriptor.name):
                failures.append(f"{descriptor.name}: circuit open after repeated failures")
                logger.info(
                    "SKIP provider=%s capability=%s reason=circuit_open",
                    descriptor.name,
                    capability.value,
                )
                continue

            timeout = descriptor.timeout
            if deadline is not None:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    failures.append(f"{descriptor.name}: request deadline reached")
                    logger.warning("DEADLINE capability=%s provider=%s", capability.value, descriptor.name)
                    break
                timeout = min(timeout, remaining)

            attempt_started = time.perf_counter()
            logger.info(
                "TRY provider=%s capability=%s timeout=%.1fs",
                descriptor.name,
                capability.value,
                timeout,
            )
            try:
                api_key = self.registry.credential_for(descriptor)
                try:
                    output = await asyncio.wait_for(descriptor.invoke(request, api_key), timeout)
                except asyncio.TimeoutError as error:
                    raise ProviderTimeout(
                        f"no response within {timeout:.1f}s", descriptor.name
                    ) from error
                check_quality(descriptor, request, output)
            except Exception as error:
                classified = classify_error(error, descriptor.name)
                failures.append(
                    f"{descriptor.name}: {classified.__class__.__name__}: {classified}"
                )
                if self.breaker is not None and not isinstance(classified, QualityGateFailed):
                    self.breaker.record_failure(capability, descriptor.name)
                logger.warning(
                    "FAIL provider=%s capability=%s error=%s reason=%s",
                    descriptor.name,
                    capability.value,
                    classified.__class__.__name__,
                    classified,
                )
                continue

            if self.breaker is not None:
                self.breaker.record_success(capability, descriptor.name)
            elapsed = time.perf_counter() - attempt_started
            logger.info(
                "OK provider=%s capability=%s elapsed=%.2fs",
                descriptor.name,
                capability.value,
                elapsed,
            )
            return GenerationResult(
                capability=capability,
                content=output.content,
                provider_name=descriptor.name,
                elapsed_time=time.perf_counter() - started,
                mime_type=output.mime_type,
                failures=tuple(failures),
            )

        exhausted = AllProvidersExhausted(
            f"{len(providers)} provider(s) tried for {capability.value}"
        )
        logger.warning("FALLBACK capability=%s reason=%s", capability.value, exhausted)
        content, mime_type = self._fallback_content(request)
        return GenerationResult(
            capability=capability,
            content=content,
            provider_name=FALLBACK_PROVIDER,
            elapsed_time=time.perf_counter() - started,
            mime_type=mime_type,
            failures=tuple(failures),
        )

    def _fallback_content(self, request: GenerationRequest) -> tuple[Any, str | None]:
        capability = request.capability
        if capability is Capability.TEXT:
            return self.fallback.generate_text(request.prompt, request.genre, request.length), "text/plain"
        if capability is Capability.ENHANCEMENT:
            return self.fallback.enhance_prompt(request.prompt, request.genre), "text/plain"
        if capability is Capability.IMAGE:
            placeholder = self.fallback.placeholder_image(
                request.prompt, request.scene_index, request.style
            )
            return placeholder, "image/svg+xml"
        return self.fallback.narration_placeholder(request.prompt), None
