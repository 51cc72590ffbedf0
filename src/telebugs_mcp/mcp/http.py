# src/telebugs_mcp/mcp/http.py
"""Starlette application for the streamable HTTP transport.

Routes:
    GET  /health  -- liveness probe
    *    /mcp     -- MCP streamable HTTP endpoint (path is configurable)

A request without an ``mcp-session-id`` header opens a new session: it must
be an ``initialize`` POST carrying ``Authorization: Bearer <api key>``. When
the SDK answers it successfully, the session id it assigned is read off the
response headers and bound to the resolved principal in the
SessionRegistry. Later requests are authorized by that binding alone. The
binding is dropped on DELETE, when the SDK answers 404 for the session, or
after the registry's idle timeout.

Usage:
    from telebugs_mcp.mcp.http import HttpTransport

    transport = HttpTransport(server, db, registry)
    uvicorn.run(transport.app, host="127.0.0.1", port=3100)
"""

import contextlib
import json
import logging
from collections.abc import AsyncIterator

from mcp.server.lowlevel import Server
from mcp.server.streamable_http import MCP_SESSION_ID_HEADER
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route
from starlette.types import Message, Receive, Scope, Send

from telebugs_mcp.contracts import PrincipalContext
from telebugs_mcp.core.tracker.database import TrackerDB
from telebugs_mcp.core.tracker.principals import resolve_principal
from telebugs_mcp.mcp.sessions import SessionRegistry

logger = logging.getLogger(__name__)

# JSON-RPC error codes used by the auth gate
UNAUTHENTICATED = -32001
INVALID_SESSION = -32000

_BEARER_PREFIX = "Bearer "


def jsonrpc_error(status_code: int, code: int, message: str) -> JSONResponse:
    """JSON-RPC error envelope for failures raised before the SDK sees the request."""
    return JSONResponse(
        {"jsonrpc": "2.0", "error": {"code": code, "message": message}, "id": None},
        status_code=status_code,
    )


def extract_api_key(authorization: str | None) -> str | None:
    """Return the credential from a ``Bearer`` Authorization header, else None."""
    if not authorization or not authorization.startswith(_BEARER_PREFIX):
        return None
    key = authorization[len(_BEARER_PREFIX) :].strip()
    return key or None


def session_id_of(request: Request | None) -> str | None:
    """Session id carried by an HTTP request, if any."""
    if request is None:
        return None
    return request.headers.get(MCP_SESSION_ID_HEADER)


def is_initialize(body: bytes) -> bool:
    """Whether a JSON-RPC POST body (single message or batch) is an initialize request."""
    try:
        payload = json.loads(body)
    except (ValueError, RecursionError):
        return False
    messages = payload if isinstance(payload, list) else [payload]
    return any(isinstance(m, dict) and m.get("method") == "initialize" for m in messages)


def _replay_body(body: bytes, receive: Receive) -> Receive:
    """Hand an already-read request body to the next ASGI app, then defer to ``receive``."""
    pending: Message | None = {"type": "http.request", "body": body, "more_body": False}

    async def replay() -> Message:
        nonlocal pending
        if pending is not None:
            message, pending = pending, None
            return message
        return await receive()

    return replay


class _McpEndpoint:
    """ASGI endpoint in front of the SDK session manager.

    A class instance (not a function) so Starlette routes raw ASGI calls to
    it, which the session manager requires.
    """

    def __init__(self, manager: StreamableHTTPSessionManager, db: TrackerDB, registry: SessionRegistry) -> None:
        self._manager = manager
        self._db = db
        self._registry = registry

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        session_id = session_id_of(request)

        if session_id is None:
            await self._open_session(request, scope, send)
            return

        if session_id not in self._registry:
            await jsonrpc_error(400, INVALID_SESSION, "Invalid session")(scope, receive, send)
            return

        status = await self._forward(scope, receive, send)
        # 404 means the session manager has already dropped the session
        if request.method == "DELETE" or status == 404:
            self._registry.remove(session_id)

    async def _open_session(self, request: Request, scope: Scope, send: Send) -> None:
        if request.method != "POST":
            await jsonrpc_error(400, INVALID_SESSION, "Invalid session")(scope, request.receive, send)
            return
        api_key = extract_api_key(request.headers.get("authorization"))
        if api_key is None:
            await jsonrpc_error(401, UNAUTHENTICATED, "Missing Authorization header")(scope, request.receive, send)
            return
        ctx = await run_in_threadpool(resolve_principal, self._db, api_key)
        if ctx is None:
            await jsonrpc_error(401, UNAUTHENTICATED, "Invalid API key")(scope, request.receive, send)
            return

        body = await request.body()
        if not is_initialize(body):
            await jsonrpc_error(400, INVALID_SESSION, "Invalid session")(scope, request.receive, send)
            return
        await self._forward(scope, _replay_body(body, request.receive), send, bind=ctx)

    async def _forward(self, scope: Scope, receive: Receive, send: Send, *, bind: PrincipalContext | None = None) -> int:
        """Pass the request to the session manager and return the response status.

        With ``bind``, a successful response's session id is registered for
        that principal before the response reaches the client.
        """
        header_name = MCP_SESSION_ID_HEADER.encode("latin-1")
        status = 0

        async def watched_send(message: Message) -> None:
            nonlocal status
            if message["type"] == "http.response.start":
                status = message["status"]
                if bind is not None and 200 <= status < 300:
                    for name, value in message.get("headers", []):
                        if name.lower() == header_name:
                            self._registry.register(value.decode("latin-1"), bind)
                            break
            await send(message)

        await self._manager.handle_request(scope, receive, watched_send)
        return status


class HttpTransport:
    """Streamable HTTP transport: Starlette app plus the SDK session manager."""

    def __init__(
        self,
        server: Server,
        db: TrackerDB,
        registry: SessionRegistry,
        *,
        path: str = "/mcp",
    ) -> None:
        self._registry = registry
        self._manager = StreamableHTTPSessionManager(app=server, json_response=False, stateless=False)
        self._endpoint = _McpEndpoint(self._manager, db, registry)
        self._path = path
        self._app = self._create_app()

    def _create_app(self) -> Starlette:
        routes = [
            Route("/health", self._health_endpoint, methods=["GET"]),
            Route(self._path, self._endpoint, methods=["GET", "POST", "DELETE"]),
        ]
        return Starlette(debug=False, routes=routes, lifespan=self._lifespan)

    @contextlib.asynccontextmanager
    async def _lifespan(self, app: Starlette) -> AsyncIterator[None]:
        async with self._manager.run():
            logger.info("Streamable HTTP transport ready on %s", self._path)
            yield

    @property
    def app(self) -> Starlette:
        """Get the Starlette ASGI application."""
        return self._app

    @property
    def registry(self) -> SessionRegistry:
        return self._registry

    async def _health_endpoint(self, request: Request) -> JSONResponse:
        return JSONResponse({"status": "ok"})
