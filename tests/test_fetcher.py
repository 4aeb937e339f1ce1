"""Tests for the manifest fetcher."""

from __future__ import annotations

import httpx
import pytest

from deptrack.engines.dependency_scanner.fetcher import ManifestFetcher, manifest_url
from deptrack.engines.dependency_scanner.models import RepositoryRef
from deptrack.exceptions import (
    FailureKind,
    ManifestNetworkError,
    ManifestNotFoundError,
)

REPO = RepositoryRef("terraform-providers", "terraform-provider-aws")


class TestManifestUrl:
    def test_vendor_url(self):
        assert manifest_url(REPO, "vendor/vendor.json") == (
            "https://raw.githubusercontent.com/terraform-providers/"
            "terraform-provider-aws/master/vendor/vendor.json"
        )

    def test_go_mod_url_custom_branch(self):
        url = manifest_url(REPO, "go.mod", branch="main")
        assert url.endswith("/terraform-provider-aws/main/go.mod")

    def test_custom_host_trailing_slash(self):
        url = manifest_url(REPO, "/go.mod", raw_url="http://mirror.test/")
        assert url == "http://mirror.test/terraform-providers/terraform-provider-aws/master/go.mod"


class TestManifestFetcher:
    @pytest.mark.anyio
    async def test_returns_body(self, raw_host):
        transport = raw_host(
            {"/terraform-providers/terraform-provider-aws/master/go.mod": httpx.Response(200, content=b"module m\n")}
        )
        async with httpx.AsyncClient(transport=transport) as client:
            fetcher = ManifestFetcher(client=client)
            assert await fetcher.fetch(REPO, "go.mod") == b"module m\n"

    @pytest.mark.anyio
    async def test_non_200_is_not_found(self, raw_host):
        async with httpx.AsyncClient(transport=raw_host({})) as client:
            fetcher = ManifestFetcher(client=client)
            with pytest.raises(ManifestNotFoundError) as exc_info:
                await fetcher.fetch(REPO, "go.mod")
        assert exc_info.value.status_code == 404
        assert exc_info.value.kind is FailureKind.NOT_FOUND

    @pytest.mark.anyio
    async def test_server_error_is_not_found(self, raw_host):
        path = "/terraform-providers/terraform-provider-aws/master/go.mod"
        transport = raw_host({path: httpx.Response(500)})
        async with httpx.AsyncClient(transport=transport) as client:
            with pytest.raises(ManifestNotFoundError, match="HTTP 500"):
                await ManifestFetcher(client=client).fetch(REPO, "go.mod")

    @pytest.mark.anyio
    async def test_connection_error_is_network_error(self, raw_host):
        path = "/terraform-providers/terraform-provider-aws/master/go.mod"
        transport = raw_host({path: httpx.ConnectError("connection refused")})
        async with httpx.AsyncClient(transport=transport) as client:
            with pytest.raises(ManifestNetworkError) as exc_info:
                await ManifestFetcher(client=client).fetch(REPO, "go.mod")
        assert exc_info.value.kind is FailureKind.NETWORK

    @pytest.mark.anyio
    async def test_timeout_is_network_error(self, raw_host):
        path = "/terraform-providers/terraform-provider-aws/master/go.mod"
        transport = raw_host({path: httpx.ReadTimeout("timed out")})
        async with httpx.AsyncClient(transport=transport) as client:
            with pytest.raises(ManifestNetworkError):
                await ManifestFetcher(client=client).fetch(REPO, "go.mod")

    @pytest.mark.anyio
    async def test_single_attempt(self):
        calls: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(str(request.url))
            return httpx.Response(503)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(ManifestNotFoundError):
                await ManifestFetcher(client=client).fetch(REPO, "go.mod")
        assert len(calls) == 1

    @pytest.mark.anyio
    async def test_injected_client_not_closed(self, raw_host):
        client = httpx.AsyncClient(transport=raw_host({}))
        async with ManifestFetcher(client=client):
            pass
        assert not client.is_closed
        await client.aclose()

    @pytest.mark.anyio
    async def test_follows_redirect_to_manifest(self, raw_host):
        moved = RepositoryRef("acme", "old")
        transport = raw_host(
            {
                "/acme/old/master/go.mod": httpx.Response(
                    301, headers={"Location": "https://raw.githubusercontent.com/acme/new/master/go.mod"}
                ),
                "/acme/new/master/go.mod": httpx.Response(200, content=b"module acme/new\n"),
            }
        )
        async with httpx.AsyncClient(transport=transport) as client:
            assert await ManifestFetcher(client=client).fetch(moved, "go.mod") == b"module acme/new\n"

    @pytest.mark.anyio
    async def test_redirect_to_missing_manifest_is_not_found(self, raw_host):
        moved = RepositoryRef("acme", "old")
        transport = raw_host(
            {
                "/acme/old/master/go.mod": httpx.Response(
                    302, headers={"Location": "https://raw.githubusercontent.com/acme/gone/master/go.mod"}
                ),
            }
        )
        async with httpx.AsyncClient(transport=transport) as client:
            with pytest.raises(ManifestNotFoundError, match="HTTP 404"):
                await ManifestFetcher(client=client).fetch(moved, "go.mod")

    @pytest.mark.anyio
    async def test_undecodable_body_is_network_error(self, raw_host):
        class _CorruptGzip(httpx.AsyncByteStream):
            async def __aiter__(self):
                yield b"definitely not gzip"

        path = "/terraform-providers/terraform-provider-aws/master/go.mod"
        transport = raw_host(
            {path: httpx.Response(200, headers={"Content-Encoding": "gzip"}, stream=_CorruptGzip())}
        )
        async with httpx.AsyncClient(transport=transport) as client:
            with pytest.raises(ManifestNetworkError) as exc_info:
                await ManifestFetcher(client=client).fetch(REPO, "go.mod")
        assert exc_info.value.kind is FailureKind.NETWORK
