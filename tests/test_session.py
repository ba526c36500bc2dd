"""Tests for the wallet sign-in handshake and the HTTP transport."""

import asyncio
import socket
from contextlib import asynccontextmanager
from dataclasses import replace
from unittest.mock import AsyncMock, patch

import pytest
from aiohttp import ClientResponseError, test_utils, web
from eth_account import Account
from eth_account.messages import encode_defunct

from fourbsc.errors import AuthFailure, ErrorKind, MalformedResponse, TransientNetworkError, classify_error
from fourbsc.executor import RequestExecutor
from fourbsc.session import Session, SessionClient, new_correlation_id

from .conftest import PRIVATE_KEY


@pytest.fixture
def client(config):
    with patch("fourbsc.session.FakeUserAgent") as fake_ua:
        fake_ua.return_value.random = "test-agent"
        yield SessionClient(config, PRIVATE_KEY)


class TestAuthenticate:
    @pytest.mark.asyncio
    async def test_nonce_signature_token(self, client):
        client.send = AsyncMock(side_effect=[
            {"code": 0, "data": {"nonce": "sign me 123"}},
            {"code": 0, "data": {"token": "jwt-token"}},
        ])

        session = await client.authenticate()

        assert session.token == "jwt-token"
        assert session.address == client.address

        nonce_call, auth_call = client.send.await_args_list
        assert nonce_call.args[2] == "/nonce"
        assert nonce_call.args[3] == {"addr": client.address}

        body = auth_call.args[3]
        assert auth_call.args[2] == "/auth"
        assert body["nonce"] == "sign me 123"
        recovered = Account.recover_message(encode_defunct(text="sign me 123"), signature=body["signature"])
        assert recovered == client.address

    @pytest.mark.asyncio
    async def test_nonce_rejected(self, client):
        client.send = AsyncMock(return_value={"code": 1, "message": "too many requests"})

        with pytest.raises(AuthFailure, match="too many requests"):
            await client.authenticate()
        assert client.send.await_count == 1

    @pytest.mark.asyncio
    async def test_signature_rejected(self, client):
        client.send = AsyncMock(side_effect=[
            {"code": 0, "data": {"nonce": "n"}},
            {"code": 40001, "message": "invalid signature"},
        ])

        with pytest.raises(AuthFailure, match="invalid signature"):
            await client.authenticate()

    @pytest.mark.asyncio
    async def test_close_without_transport(self, client):
        await client.close()
        assert client.http is None


class TestSession:
    def test_with_token_returns_new_session(self):
        original = Session(address="0xabc", token="old")
        renewed = original.with_token("new")

        assert renewed is not original
        assert original.token == "old"
        assert renewed.token == "new"
        assert renewed.address == "0xabc"

    def test_correlation_ids_are_unique(self):
        session = Session(address="0xabc")
        ids = {session.new_correlation_id() for _ in range(50)}
        assert len(ids) == 50

    def test_correlation_id_shape(self):
        millis, _, rest = new_correlation_id().partition("-")
        assert millis.isdigit()
        assert len(rest) == 36


def _closed_port():
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def _make_client(config, proxy_url=None, timeout=30):
    with patch("fourbsc.session.FakeUserAgent") as fake_ua:
        fake_ua.return_value.random = "test-agent"
        return SessionClient(config, PRIVATE_KEY, proxy_url, timeout=timeout)


async def _echo(request):
    return web.json_response({"code": 0, "data": {
        "tid": request.headers.get("tid"),
        "auth": request.headers.get("Authorization"),
        "body": await request.json(),
    }})


async def _unauthorized(request):
    raise web.HTTPUnauthorized()


async def _forbidden(request):
    raise web.HTTPForbidden()


async def _html(request):
    return web.Response(text="<html>maintenance</html>", content_type="text/html")


async def _slow(request):
    await asyncio.sleep(0.5)
    return web.json_response({"code": 0})


@asynccontextmanager
async def _serve(config):
    app = web.Application()
    app.router.add_post("/echo", _echo)
    app.router.add_post("/unauthorized", _unauthorized)
    app.router.add_post("/forbidden", _forbidden)
    app.router.add_post("/html", _html)
    app.router.add_post("/slow", _slow)
    server = test_utils.TestServer(app)
    await server.start_server()
    try:
        yield replace(config, base_url=str(server.make_url("")).rstrip("/"))
    finally:
        await server.close()


class TestSend:
    @pytest.mark.asyncio
    async def test_headers_and_body(self, config):
        async with _serve(config) as served:
            client = _make_client(served)
            try:
                payload = await client.send(Session(address=client.address, token="jwt"), "POST", "/echo", {"a": 1}, "tid-1")
            finally:
                await client.close()

        assert payload["data"] == {"tid": "tid-1", "auth": "Bearer jwt", "body": {"a": 1}}

    @pytest.mark.asyncio
    async def test_no_authorization_without_token(self, config):
        async with _serve(config) as served:
            client = _make_client(served)
            try:
                payload = await client.send(None, "POST", "/echo", {})
            finally:
                await client.close()

        assert payload["data"]["auth"] is None
        assert payload["data"]["tid"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path, status", [("/unauthorized", 401), ("/forbidden", 403)])
    async def test_auth_status_reaches_caller(self, config, path, status):
        async with _serve(config) as served:
            client = _make_client(served)
            try:
                with pytest.raises(ClientResponseError) as excinfo:
                    await client.send(None, "POST", path, {})
            finally:
                await client.close()

        assert excinfo.value.status == status
        assert classify_error(excinfo.value) == ErrorKind.AUTH

    @pytest.mark.asyncio
    async def test_non_json_body(self, config):
        async with _serve(config) as served:
            client = _make_client(served)
            try:
                with pytest.raises(MalformedResponse):
                    await client.send(None, "POST", "/html", {})
            finally:
                await client.close()

    @pytest.mark.asyncio
    async def test_transport_timeout_is_network(self, config):
        async with _serve(config) as served:
            client = _make_client(served, timeout=0.1)
            try:
                with pytest.raises(TransientNetworkError):
                    await client.send(None, "POST", "/slow", {})
            finally:
                await client.close()

    @pytest.mark.asyncio
    async def test_refused_connection_is_network(self, config):
        client = _make_client(replace(config, base_url=f"http://127.0.0.1:{_closed_port()}"))
        try:
            with pytest.raises(TransientNetworkError) as excinfo:
                await client.send(None, "POST", "/echo", {})
        finally:
            await client.close()

        assert classify_error(excinfo.value) == ErrorKind.NETWORK

    @pytest.mark.asyncio
    async def test_dead_socks_proxy_is_network(self, config):
        client = _make_client(config, f"socks5://127.0.0.1:{_closed_port()}")
        try:
            with pytest.raises(TransientNetworkError) as excinfo:
                await client.send(None, "POST", "/echo", {})
        finally:
            await client.close()

        assert classify_error(excinfo.value) == ErrorKind.NETWORK

    @pytest.mark.asyncio
    async def test_dead_socks_proxy_rebuilds_transport(self, config):
        client = _make_client(config, f"socks5://127.0.0.1:{_closed_port()}")
        client.reset_transport = AsyncMock(wraps=client.reset_transport)
        executor = RequestExecutor(client, Session(address=client.address, token="t"), retries=2, backoff=0)
        try:
            with pytest.raises(TransientNetworkError):
                await executor.execute("POST", "/echo", {})
        finally:
            await client.close()

        assert client.reset_transport.await_count == 2
