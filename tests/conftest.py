from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from seqera_flow.core.settings import Connection
from seqera_flow.infrastructure.platform import SeqeraClient, reset_client_factory

Responder = Callable[[httpx.Request], httpx.Response]


class FakePlatform:
    """Routes requests by ``(method, path)``; queued responses are served in order."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], list[Any]] = {}

    def add(self, method: str, path: str, *responses: Any) -> None:
        self._routes.setdefault((method.upper(), path), []).extend(responses)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method.upper() and r.url.path == path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self._routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"message": f"no route for {request.method} {request.url.path}"})
        reply = queue[0] if len(queue) == 1 else queue.pop(0)
        if callable(reply):
            return reply(request)
        if isinstance(reply, httpx.Response):
            return reply
        return httpx.Response(200, json=reply)

    def factory(self, connection: Connection) -> SeqeraClient:
        return SeqeraClient.from_connection(connection, transport=httpx.MockTransport(self.handler))


@pytest.fixture()
def platform() -> FakePlatform:
    return FakePlatform()


@pytest.fixture(autouse=True)
def reset_factory():
    reset_client_factory()
    yield
    reset_client_factory()


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.005)
