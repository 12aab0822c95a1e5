from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Iterable, Mapping

from dotenv import load_dotenv

from .provider_model import Capability, CredentialValidatorFn

load_dotenv()

PROVIDER_ENV_KEYS: dict[str, str] = {
    "openai": "OPENAI_API_KEY",
    "huggingface": "HUGGINGFACE_API_KEY",
    "google": "GOOGLE_AI_API_KEY",
    "googleai": "GOOGLE_AI_API_KEY",
    "elevenlabs": "ELEVENLABS_API_KEY",
    "stability": "STABILITY_API_KEY",
}

API_KEY_PATTERNS: dict[str, re.Pattern[str]] = {
    "openai": re.compile(r"^sk-[A-Za-z0-9_-]{20,}$"),
    "huggingface": re.compile(r"^hf_[A-Za-z0-9]{32,}$"),
    "google": re.compile(r"^AIza[0-9A-Za-z_-]{35}$"),
    "googleai": re.compile(r"^AIza[0-9A-Za-z_-]{35}$"),
    "elevenlabs": re.compile(r"^(?:[0-9a-f]{32}|sk_[0-9a-f]{48})$"),
    "stability": re.compile(r"^sk-[A-Za-z0-9]{40,}$"),
}

PLACEHOLDER_MARKERS: tuple[str, ...] = (
    "your_openai_api_key",
    "your_huggingface_api_key",
    "your_google_ai_api_key",
    "your_google_api_key",
    "your_elevenlabs_api_key",
    "your_stability_api_key",
    "your_ai_api_key",
    "your_api_key",
    "change-me",
    "replace-me",
    "placeholder",
    "demo",
)

MIN_KEY_LENGTH = 10

_TRAILING_CONTROL = re.compile(r"[\s\r\n]+$")


def clean_api_key(raw: str | None) -> str:
    """Strip trailing CR/LF/whitespace runs left behind by .env files and shells."""
    if raw is None:
        return ""
    if not isinstance(raw, str):
        raw = str(raw)
    return _TRAILING_CONTROL.sub("", raw).strip()


def describe_credential_problem(provider_name: str, cleaned: str) -> str | None:
    if not cleaned:
        return "API key is required"

    lowered = cleaned.lower()
    if any(marker in lowered for marker in PLACEHOLDER_MARKERS):
        return "API key appears to be a placeholder value"

    if len(cleaned) < MIN_KEY_LENGTH:
        return "API key is too short to be valid"

    pattern = API_KEY_PATTERNS.get(provider_name.lower())
    if pattern is not None and not pattern.match(cleaned):
        return f"API key format doesn't match expected pattern for {provider_name}"
    return None


def validate_credential(capability: Capability | None, provider_name: str, cleaned: str) -> bool:
    # Key formats are per vendor; capability is accepted for adapters that need a narrower rule.
    return describe_credential_problem(provider_name, cleaned) is None


def mask_api_key(api_key: str | None) -> str:
    if not api_key or len(api_key) < 8:
        return "***"
    middle = "*" * min(len(api_key) - 8, 20)
    return f"{api_key[:4]}{middle}{api_key[-4:]}"


@dataclass(frozen=True)
class ConfigurationStatus:
    configured: bool
    reason: str | None = None


class CredentialStore:
    def __init__(self, environ: Mapping[str, str] | None = None):
        self._environ = environ if environ is not None else os.environ

    def get(self, credential_key: str) -> str:
        return clean_api_key(self._environ.get(credential_key))

    def is_configured(
        self,
        provider_name: str,
        credential_key: str | None = None,
        validator: CredentialValidatorFn | None = None,
        capability: Capability | None = None,
    ) -> ConfigurationStatus:
        env_name = credential_key or PROVIDER_ENV_KEYS.get(provider_name.lower())
        if not env_name:
            return ConfigurationStatus(False, f"Unknown provider: {provider_name}")

        api_key = self.get(env_name)
        if not api_key:
            return ConfigurationStatus(False, f"{env_name} environment variable not set")

        if validator is None:
            problem = describe_credential_problem(provider_name, api_key)
        elif not validator(capability, provider_name, api_key):
            problem = describe_credential_problem(provider_name, api_key) or (
                f"API key rejected by {provider_name} validator"
            )
        else:
            problem = None

        if problem is not None:
            return ConfigurationStatus(False, problem)
        return ConfigurationStatus(True)

    def services_status(self, provider_names: Iterable[str]) -> dict[str, ConfigurationStatus]:
        return {name: self.is_configured(name) for name in provider_names}
