from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from app.core.config import Settings
from generators.config import ProviderSettings
from generators.fallback.fallback_generator import FallbackGenerator
from generators.illustration.illustration_generator import IllustrationGenerator
from generators.providers.adapters import ProviderAdapter, build_default_registry, default_adapters
from generators.providers.credentials import CredentialStore
from generators.providers.registry import ProviderRegistry
from generators.providers.router import GenerationRouter
from generators.story.story_generator import StoryGenerator
from generators.storybook.storybook_assembler import StorybookAssembler
from generators.tts.tts_generator import NarrationGenerator


@dataclass(frozen=True)
class GenerationServices:
    credentials: CredentialStore
    registry: ProviderRegistry
    router: GenerationRouter
    fallback: FallbackGenerator
    stories: StoryGenerator
    illustrations: IllustrationGenerator
    narration: NarrationGenerator
    storybooks: StorybookAssembler
    adapters: tuple[ProviderAdapter, ...] = ()

    async def aclose(self) -> None:
        """Release vendor SDK clients held by the adapters."""
        for adapter in self.adapters:
            await adapter.aclose()


def build_generation_services(
    settings: Settings,
    provider_settings: ProviderSettings,
    environ: Mapping[str, str] | None = None,
    adapters: list[ProviderAdapter] | None = None,
) -> GenerationServices:
    """Wire credentials, registry, router and services once at startup."""
    credentials = CredentialStore(environ)
    if adapters is None:
        adapters = default_adapters(provider_settings)
    registry = build_default_registry(credentials, provider_settings, adapters=adapters)
    fallback = FallbackGenerator(seed=settings.fallback_seed)
    router = GenerationRouter(registry, fallback, settings=provider_settings)
    illustrations = IllustrationGenerator(router)
    narration = NarrationGenerator(router)
    return GenerationServices(
        credentials=credentials,
        registry=registry,
        router=router,
        fallback=fallback,
        stories=StoryGenerator(router, fallback),
        illustrations=illustrations,
        narration=narration,
        storybooks=StorybookAssembler(
            illustrations,
            narration,
            fallback,
            max_concurrency=provider_settings.max_concurrency,
            deadline_sec=provider_settings.storybook_deadline_sec,
        ),
        adapters=tuple(adapters),
    )
