from __future__ import annotations

import asyncio

import httpx


class ProviderError(Exception):
    """Failure local to one provider call. Absorbed by the generation router."""

    def __init__(self, message: str, provider_name: str | None = None):
        super().__init__(message)
        self.provider_name = provider_name


class CredentialInvalid(ProviderError):
    pass


class RateLimited(ProviderError):
    pass


class AuthExpired(ProviderError):
    pass


class QuotaExceeded(ProviderError):
    pass


class ProviderTimeout(ProviderError):
    pass


class QualityGateFailed(ProviderError):
    pass


class ProviderUnavailable(ProviderError):
    pass


class AllProvidersExhausted(ProviderError):
    """Marks the hand-off to the deterministic fallback. Never leaves the router."""


class StoryParseError(ValueError):
    pass


def _status_code_of(error: BaseException) -> int | None:
    for attribute in ("status_code", "code"):
        value = getattr(error, attribute, None)
        if isinstance(value, int):
            return value
    response = getattr(error, "response", None)
    value = getattr(response, "status_code", None)
    return value if isinstance(value, int) else None


def classify_error(error: BaseException, provider_name: str | None = None) -> ProviderError:
    if isinstance(error, ProviderError):
        if error.provider_name is None:
            error.provider_name = provider_name
        return error

    message = str(error) or error.__class__.__name__
    if isinstance(error, (asyncio.TimeoutError, TimeoutError, httpx.TimeoutException)):
        return ProviderTimeout(f"request timed out: {message}", provider_name)

    status_code = _status_code_of(error)
    lowered = message.lower()
    if status_code == 401:
        return AuthExpired(f"credential rejected or expired: {message}", provider_name)
    if status_code == 403:
        return CredentialInvalid(f"credential not permitted: {message}", provider_name)
    if status_code == 402 or "quota" in lowered or "insufficient_quota" in lowered:
        return QuotaExceeded(f"quota exceeded: {message}", provider_name)
    if status_code == 429:
        return RateLimited(f"rate limit exceeded: {message}", provider_name)
    if status_code in (408, 504):
        return ProviderTimeout(f"upstream timeout: {message}", provider_name)
    return ProviderUnavailable(message, provider_name)
