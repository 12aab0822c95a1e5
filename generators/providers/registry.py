from __future__ import annotations

from typing import Any

from .credentials import CredentialStore, mask_api_key
from .provider_model import Capability, ProviderDescriptor


class ProviderRegistry:
    """Per-capability provider lists. Read-mostly once startup registration is done."""

    def __init__(self, credentials: CredentialStore):
        self.credentials = credentials
        self._providers: dict[Capability, dict[str, ProviderDescriptor]] = {}

    def register(self, descriptor: ProviderDescriptor) -> None:
        self._providers.setdefault(descriptor.capability, {})[descriptor.name] = descriptor

    def registered(self, capability: Capability) -> list[ProviderDescriptor]:
        providers = self._providers.get(capability, {}).values()
        return sorted(providers, key=lambda item: (item.priority, item.name))

    def is_usable(self, descriptor: ProviderDescriptor) -> bool:
        return self.credentials.is_configured(
            descriptor.name,
            credential_key=descriptor.credential_key,
            validator=descriptor.validator,
            capability=descriptor.capability,
        ).configured

    def get_ordered(self, capability: Capability) -> list[ProviderDescriptor]:
        return [item for item in self.registered(capability) if self.is_usable(item)]

    def credential_for(self, descriptor: ProviderDescriptor) -> str:
        return self.credentials.get(descriptor.credential_key)

    def describe(self, capability: Capability | None = None) -> list[dict[str, Any]]:
        capabilities = [capability] if capability is not None else list(Capability)
        rows: list[dict[str, Any]] = []
        for current in capabilities:
            for descriptor in self.registered(current):
                status = self.credentials.is_configured(
                    descriptor.name,
                    credential_key=descriptor.credential_key,
                    validator=descriptor.validator,
                    capability=current,
                )
                api_key = self.credential_for(descriptor)
                rows.append(
                    {
                        "name": descriptor.name,
                        "capability": current.value,
                        "priority": descriptor.priority,
                        "configured": status.configured,
                        "reason": status.reason,
                        "masked_key": mask_api_key(api_key) if status.configured else None,
                        "timeout": descriptor.timeout,
                    }
                )
        return rows
