from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable

FALLBACK_PROVIDER = "fallback"


class Capability(str, Enum):
    TEXT = "text-generation"
    ENHANCEMENT = "prompt-enhancement"
    IMAGE = "image-generation"
    AUDIO = "audio-narration"


@dataclass(frozen=True)
class GenerationRequest:
    capability: Capability
    prompt: str
    genre: str = "fantasy"
    length: str = "medium"
    style: str = "children-book"
    target_size: str = "1024x1024"
    voice: str = "female"
    speed: float = 1.0
    scene_index: int | None = None


@dataclass(frozen=True)
class ProviderOutput:
    """Normalized adapter response: text for text capabilities, bytes otherwise."""

    content: str | bytes
    mime_type: str | None = None


@dataclass(frozen=True)
class GenerationResult:
    capability: Capability
    content: Any
    provider_name: str
    elapsed_time: float
    mime_type: str | None = None
    failures: tuple[str, ...] = ()

    @property
    def is_fallback(self) -> bool:
        return self.provider_name == FALLBACK_PROVIDER


CredentialValidatorFn = Callable[[Capability, str, str], bool]
InvokeFn = Callable[[GenerationRequest, str], Awaitable[ProviderOutput]]


@dataclass(frozen=True)
class ProviderDescriptor:
    name: str
    capability: Capability
    priority: int
    credential_key: str
    invoke: InvokeFn = field(compare=False)
    validator: CredentialValidatorFn | None = field(default=None, compare=False)
    min_acceptable_length: int = 1
    timeout: float = 30.0
