"""Tests for the HTTP node connection."""

import asyncio

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from nearlink.blockchain.connection import NodeConnection
from nearlink.errors import NodeError, TransportError


async def _echo(request: web.Request) -> web.Response:
    return web.json_response({"received": await request.json()})


async def _server_error(_request: web.Request) -> web.Response:
    return web.json_response({"error": "boom"}, status=500)


async def _plain_error(_request: web.Request) -> web.Response:
    return web.Response(text="bad request", status=400)


async def _error_document(_request: web.Request) -> web.Response:
    return web.json_response({"error": {"message": "transaction rejected"}})


async def _not_json(_request: web.Request) -> web.Response:
    return web.Response(text="<html>hello</html>")


async def _bad_bytes(_request: web.Request) -> web.Response:
    return web.Response(body=b"\xff\xfe\xfa", content_type="application/json")


async def _bad_bytes_error(_request: web.Request) -> web.Response:
    return web.Response(body=b"\xff\xfe\xfa", status=502, content_type="application/json")


async def _slow(_request: web.Request) -> web.Response:
    await asyncio.sleep(2)
    return web.json_response({})


@pytest.fixture
async def node_url():
    """Run a fake node and yield its base URL."""
    app = web.Application()
    app.router.add_post("/echo", _echo)
    app.router.add_post("/server_error", _server_error)
    app.router.add_post("/plain_error", _plain_error)
    app.router.add_post("/error_document", _error_document)
    app.router.add_post("/not_json", _not_json)
    app.router.add_post("/slow", _slow)
    app.router.add_post("/bad_bytes", _bad_bytes)
    app.router.add_post("/bad_bytes_error", _bad_bytes_error)

    server = TestServer(app)
    await server.start_server()
    yield str(server.make_url("/"))
    await server.close()


class TestNodeConnection:
    """Tests for NodeConnection."""

    def test_base_url_trailing_slash_stripped(self):
        """Trailing slash is removed from the base URL."""
        assert NodeConnection("http://localhost:3030/").base_url == "http://localhost:3030"

    async def test_posts_json_to_method_path(self, node_url):
        """Params are POSTed as JSON to {base_url}/{method}."""
        connection = NodeConnection(node_url)
        try:
            result = await connection.request("echo", {"hash": "abc", "args": [1, 2]})
        finally:
            await connection.close()

        assert result == {"received": {"hash": "abc", "args": [1, 2]}}

    async def test_http_error_raises_node_error(self, node_url):
        """Non-2xx reply raises NodeError with status and message."""
        connection = NodeConnection(node_url)
        try:
            with pytest.raises(NodeError) as exc_info:
                await connection.request("server_error", {})
        finally:
            await connection.close()

        assert exc_info.value.status == 500
        assert exc_info.value.method == "server_error"
        assert exc_info.value.payload == {"error": "boom"}
        assert "boom" in str(exc_info.value)

    async def test_plain_text_error(self, node_url):
        """Non-JSON error bodies still raise NodeError."""
        connection = NodeConnection(node_url)
        try:
            with pytest.raises(NodeError, match="bad request") as exc_info:
                await connection.request("plain_error", {})
        finally:
            await connection.close()

        assert exc_info.value.status == 400

    async def test_error_document_raises_node_error(self, node_url):
        """A 200 reply carrying an error member raises NodeError."""
        connection = NodeConnection(node_url)
        try:
            with pytest.raises(NodeError, match="transaction rejected") as exc_info:
                await connection.request("error_document", {})
        finally:
            await connection.close()

        assert exc_info.value.status == 200

    async def test_unreadable_body_raises_transport_error(self, node_url):
        """A 200 reply that is not JSON raises TransportError."""
        connection = NodeConnection(node_url)
        try:
            with pytest.raises(TransportError, match="unreadable"):
                await connection.request("not_json", {})
        finally:
            await connection.close()

    async def test_undecodable_body_raises_transport_error(self, node_url):
        """A 200 reply that is not UTF-8 raises TransportError."""
        connection = NodeConnection(node_url)
        try:
            with pytest.raises(TransportError, match="unreadable") as exc_info:
                await connection.request("bad_bytes", {})
        finally:
            await connection.close()

        assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)

    async def test_undecodable_error_body_raises_node_error(self, node_url):
        """A non-2xx reply that is not UTF-8 raises NodeError with the status."""
        connection = NodeConnection(node_url)
        try:
            with pytest.raises(NodeError, match="HTTP 502") as exc_info:
                await connection.request("bad_bytes_error", {})
        finally:
            await connection.close()

        assert exc_info.value.status == 502

    async def test_timeout_raises_transport_error(self, node_url):
        """Timeouts surface as TransportError."""
        connection = NodeConnection(node_url, timeout=0.1)
        try:
            with pytest.raises(TransportError, match="timed out"):
                await connection.request("slow", {})
        finally:
            await connection.close()

    async def test_connection_refused_raises_transport_error(self, node_url):
        """Unreachable node raises TransportError, not NodeError."""
        connection = NodeConnection("http://127.0.0.1:1")
        try:
            with pytest.raises(TransportError) as exc_info:
                await connection.request("echo", {})
        finally:
            await connection.close()

        assert exc_info.value.method == "echo"

    async def test_close_is_idempotent(self):
        """close() can be called without a session and more than once."""
        connection = NodeConnection("http://localhost:3030")
        await connection.close()
        await connection.close()
