from __future__ import annotations

from collections.abc import Callable
from urllib.parse import unquote

import httpx

from cinesource.adapters.http_resilience import ResilientClient
from cinesource.config.http_resilience import ResilienceConfig

type Handler = Callable[[httpx.Request], httpx.Response]


def make_client_factory(handler: Handler) -> Callable[[ResilienceConfig], ResilientClient]:
    async def async_handler(request: httpx.Request) -> httpx.Response:
        return handler(request)

    def factory(resilience: ResilienceConfig) -> ResilientClient:
        client = ResilientClient(resilience)
        client._client = httpx.AsyncClient(  # noqa: SLF001  # type: ignore[reportPrivateUsage]
            base_url=resilience.base_url or "",
            transport=httpx.MockTransport(async_handler),
        )
        return client

    return factory


def uncached(name: str, base_url: str) -> ResilienceConfig:
    return ResilienceConfig(name=name, base_url=base_url, cache=None)


def request_path(request: httpx.Request) -> str:
    return unquote(request.url.path)


class Recorder:
    """Handler that answers by path and keeps every request."""

    def __init__(self, routes: dict[str, tuple[int, object]], default: int = 404) -> None:
        self.routes = routes
        self.default = default
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request_path(request)
        for suffix, (status, body) in self.routes.items():
            if path.endswith(suffix):
                return httpx.Response(status, json=body)
        return httpx.Response(self.default, json={})
