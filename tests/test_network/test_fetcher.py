"""Tests for the httpx-backed fetcher."""

import httpx
import pytest

from offlinegate.errors.exceptions import NetworkFailure
from offlinegate.network.fetcher import HttpxFetcher
from offlinegate.types import ProxyRequest


class TestHttpxFetcher:
    async def test_success_converted(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, headers={"content-type": "text/plain"}, content=b"hello")

        fetcher = HttpxFetcher(transport=httpx.MockTransport(handler))
        try:
            response = await fetcher.fetch(ProxyRequest(url="https://app.example/a"))
        finally:
            await fetcher.close()
        assert response.status == 200
        assert response.status_text == "OK"
        assert response.body == b"hello"
        assert response.headers["content-type"] == "text/plain"
        assert response.url == "https://app.example/a"

    async def test_error_status_is_a_response(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, content=b"oops")

        fetcher = HttpxFetcher(transport=httpx.MockTransport(handler))
        try:
            response = await fetcher.fetch(ProxyRequest(url="https://app.example/a"))
        finally:
            await fetcher.close()
        assert response.status == 500
        assert not response.ok

    async def test_method_and_headers_forwarded(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201)

        fetcher = HttpxFetcher(transport=httpx.MockTransport(handler))
        try:
            await fetcher.fetch(
                ProxyRequest(method="POST", url="https://app.example/api", headers={"x-token": "t"})
            )
        finally:
            await fetcher.close()
        assert seen[0].method == "POST"
        assert seen[0].headers["x-token"] == "t"

    async def test_transport_error_becomes_network_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        fetcher = HttpxFetcher(transport=httpx.MockTransport(handler))
        try:
            with pytest.raises(NetworkFailure) as exc_info:
                await fetcher.fetch(ProxyRequest(url="https://app.example/a"))
        finally:
            await fetcher.close()
        assert exc_info.value.url == "https://app.example/a"
        assert isinstance(exc_info.value.original, httpx.ConnectError)

    async def test_single_attempt_by_default(self):
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            raise httpx.ConnectError("down", request=request)

        fetcher = HttpxFetcher(transport=httpx.MockTransport(handler))
        try:
            with pytest.raises(NetworkFailure):
                await fetcher.fetch(ProxyRequest(url="https://app.example/a"))
        finally:
            await fetcher.close()
        assert calls == 1

    async def test_transport_errors_retried(self):
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            if calls == 1:
                raise httpx.ConnectError("flaky", request=request)
            return httpx.Response(200, content=b"ok")

        fetcher = HttpxFetcher(attempts=2, transport=httpx.MockTransport(handler))
        try:
            response = await fetcher.fetch(ProxyRequest(url="https://app.example/a"))
        finally:
            await fetcher.close()
        assert response.body == b"ok"
        assert calls == 2


    async def test_redirect_loop_becomes_network_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(302, headers={"location": str(request.url)})

        fetcher = HttpxFetcher(transport=httpx.MockTransport(handler))
        try:
            with pytest.raises(NetworkFailure) as exc_info:
                await fetcher.fetch(ProxyRequest(url="https://app.example/loop"))
        finally:
            await fetcher.close()
        assert isinstance(exc_info.value.original, httpx.TooManyRedirects)

    async def test_undecodable_body_becomes_network_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, headers={"content-encoding": "gzip"}, content=b"not gzip at all"
            )

        fetcher = HttpxFetcher(transport=httpx.MockTransport(handler))
        try:
            with pytest.raises(NetworkFailure) as exc_info:
                await fetcher.fetch(ProxyRequest(url="https://app.example/broken"))
        finally:
            await fetcher.close()
        assert isinstance(exc_info.value.original, httpx.DecodingError)
