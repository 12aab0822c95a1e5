from __future__ import annotations

from typing import Any, Callable

import httpx

from generators.config import ProviderSettings
from generators.providers.errors import ProviderUnavailable
from generators.providers.provider_model import Capability, GenerationRequest, ProviderOutput


def aspect_ratio_for_size(target_size: str) -> str:
    try:
        width, height = (int(part) for part in target_size.lower().split("x", 1))
    except ValueError:
        return "1:1"
    if width <= 0 or height <= 0:
        return "1:1"
    ratio = width / height
    if ratio > 1.2:
        return "16:9"
    if ratio < 0.8:
        return "9:16"
    return "1:1"


class ProviderAdapter:
    """Uniform contract every vendor integration satisfies.

    ``invoke`` sends one outbound request for the capability and returns the
    ``normalize``d output; vendor parsing never leaks past the adapter.
    """

    name: str = ""
    capabilities: tuple[Capability, ...] = ()

    def __init__(self, settings: ProviderSettings):
        self.settings = settings

    async def invoke(self, request: GenerationRequest, api_key: str) -> ProviderOutput:
        if request.capability not in self.capabilities:
            raise ProviderUnavailable(
                f"{self.name} does not support {request.capability.value}", self.name
            )
        if request.capability in (Capability.TEXT, Capability.ENHANCEMENT):
            return await self.generate_text(request, api_key)
        if request.capability is Capability.IMAGE:
            return await self.generate_image(request, api_key)
        return await self.generate_audio(request, api_key)

    async def generate_text(self, request: GenerationRequest, api_key: str) -> ProviderOutput:
        raise NotImplementedError

    async def generate_image(self, request: GenerationRequest, api_key: str) -> ProviderOutput:
        raise NotImplementedError

    async def generate_audio(self, request: GenerationRequest, api_key: str) -> ProviderOutput:
        raise NotImplementedError

    def normalize(self, raw: Any, capability: Capability) -> ProviderOutput:
        raise NotImplementedError

    async def aclose(self) -> None:
        return None


class HttpProviderAdapter(ProviderAdapter):
    """Adapter talking to a plain JSON/binary HTTP API through httpx."""

    def __init__(
        self,
        settings: ProviderSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(settings)
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        # Overall per-call timeout is enforced by the router; this only bounds a stuck socket.
        return httpx.AsyncClient(timeout=httpx.Timeout(120.0), transport=self._transport)

    async def _post(self, url: str, **kwargs: Any) -> httpx.Response:
        async with self._client() as client:
            response = await client.post(url, **kwargs)
        response.raise_for_status()
        return response


class SdkProviderAdapter(ProviderAdapter):
    """Adapter driving a vendor SDK client; one client per API key is reused."""

    def __init__(self, settings: ProviderSettings, client_factory: Callable[[str], Any]):
        super().__init__(settings)
        self._client_factory = client_factory
        self._clients: dict[str, Any] = {}

    def _client_for(self, api_key: str) -> Any:
        client = self._clients.get(api_key)
        if client is None:
            client = self._client_factory(api_key)
            self._clients[api_key] = client
        return client

    async def _close_client(self, client: Any) -> None:
        return None

    async def aclose(self) -> None:
        clients = list(self._clients.values())
        self._clients.clear()
        for client in clients:
            await self._close_client(client)
