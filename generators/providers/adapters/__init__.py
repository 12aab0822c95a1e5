from __future__ import annotations

from generators.config import ProviderSettings
from generators.providers.credentials import PROVIDER_ENV_KEYS, CredentialStore, validate_credential
from generators.providers.provider_model import Capability, ProviderDescriptor
from generators.providers.registry import ProviderRegistry

from .base import HttpProviderAdapter, ProviderAdapter, SdkProviderAdapter
from .elevenlabs_adapter import ElevenLabsAdapter
from .google_adapter import GoogleAIAdapter
from .huggingface_adapter import HuggingFaceAdapter
from .openai_adapter import OpenAIAdapter
from .stability_adapter import StabilityAdapter

__all__ = [
    "DEFAULT_PRIORITIES",
    "ElevenLabsAdapter",
    "GoogleAIAdapter",
    "HttpProviderAdapter",
    "HuggingFaceAdapter",
    "OpenAIAdapter",
    "ProviderAdapter",
    "SdkProviderAdapter",
    "StabilityAdapter",
    "build_default_registry",
    "default_adapters",
]

DEFAULT_PRIORITIES: dict[Capability, tuple[str, ...]] = {
    Capability.TEXT: ("openai", "huggingface", "google"),
    Capability.ENHANCEMENT: ("openai", "huggingface", "google"),
    Capability.IMAGE: ("openai", "stability", "huggingface", "google"),
    Capability.AUDIO: ("openai", "elevenlabs", "google"),
}


def _timeout_for(capability: Capability, settings: ProviderSettings) -> float:
    return {
        Capability.TEXT: settings.text_timeout_sec,
        Capability.ENHANCEMENT: settings.enhancement_timeout_sec,
        Capability.IMAGE: settings.image_timeout_sec,
        Capability.AUDIO: settings.audio_timeout_sec,
    }[capability]


def _min_length_for(capability: Capability, settings: ProviderSettings) -> int:
    if capability is Capability.TEXT:
        return settings.min_text_length
    if capability is Capability.ENHANCEMENT:
        # The growth check against the original prompt is the real gate here.
        return 1
    return settings.min_binary_length


def default_adapters(settings: ProviderSettings) -> list[ProviderAdapter]:
    return [
        OpenAIAdapter(settings),
        HuggingFaceAdapter(settings),
        GoogleAIAdapter(settings),
        StabilityAdapter(settings),
        ElevenLabsAdapter(settings),
    ]


def build_default_registry(
    credentials: CredentialStore,
    settings: ProviderSettings,
    adapters: list[ProviderAdapter] | None = None,
) -> ProviderRegistry:
    """Register every vendor adapter under its default priority per capability."""
    if adapters is None:
        adapters = default_adapters(settings)
    by_name = {adapter.name: adapter for adapter in adapters}

    registry = ProviderRegistry(credentials)
    for capability, provider_names in DEFAULT_PRIORITIES.items():
        for priority, provider_name in enumerate(provider_names, start=1):
            adapter = by_name.get(provider_name)
            if adapter is None or capability not in adapter.capabilities:
                continue
            registry.register(
                ProviderDescriptor(
                    name=provider_name,
                    capability=capability,
                    priority=priority,
                    credential_key=PROVIDER_ENV_KEYS[provider_name],
                    invoke=adapter.invoke,
                    validator=validate_credential,
                    min_acceptable_length=_min_length_for(capability, settings),
                    timeout=_timeout_for(capability, settings),
                )
            )
    return registry
