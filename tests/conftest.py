"""Shared pytest fixtures for deptrack tests."""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture
def raw_host() -> Callable[[dict[str, httpx.Response | Exception]], httpx.MockTransport]:
    """Build a MockTransport serving raw-content paths; unknown paths return 404.

    A value that is an exception is raised instead of returning a response.
    """

    def build(routes: dict[str, httpx.Response | Exception]) -> httpx.MockTransport:
        def handler(request: httpx.Request) -> httpx.Response:
            target = routes.get(request.url.path)
            if isinstance(target, Exception):
                raise target
            if target is None:
                return httpx.Response(404, text="404: Not Found")
            return target

        return httpx.MockTransport(handler)

    return build
