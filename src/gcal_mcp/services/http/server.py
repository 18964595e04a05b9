from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from mcp.server.sse import SseServerTransport

from ...core import APP_NAME, APP_VERSION
from ...errors import AuthorizationExchangeError
from ..context import ServiceContext

logger = logging.getLogger(__name__)


def create_app(context: Optional[ServiceContext] = None) -> FastAPI:
    """Build the HTTP surface: MCP over SSE, OAuth callback, tool listing."""

    ctx = context or ServiceContext()
    base_path = ctx.settings.server.base_path
    server = ctx.mcp_server
    # Clients are told to POST to "{base}/message/?session_id=..."; the mount below serves it.
    sse = SseServerTransport(f"{base_path}/message/")

    app = FastAPI(title=APP_NAME, version=APP_VERSION)
    app.state.context = ctx
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get(f"{base_path}/sse")
    async def open_event_stream(request: Request) -> Response:
        async with sse.connect_sse(request.scope, request.receive, request._send) as (read_stream, write_stream):
            await server.run(read_stream, write_stream, server.create_initialization_options())
        # The stream already answered; FastAPI still needs a response object.
        return Response()

    app.mount(f"{base_path}/message", app=sse.handle_post_message)

    @app.get("/auth/callback")
    async def auth_callback(
        code: Optional[str] = None,
        state: Optional[str] = None,
        error: Optional[str] = None,
    ) -> Response:
        if not state:
            raise HTTPException(status_code=400, detail="Missing state parameter")
        if error:
            logger.warning("Authorization denied for token %r: %s", state, error)
            raise HTTPException(status_code=400, detail=f"Authorization failed: {error}")
        if not code:
            raise HTTPException(status_code=400, detail="Missing code parameter")
        try:
            await ctx.auth.complete_authorization(code, state)
        except AuthorizationExchangeError as exc:
            logger.error("Authorization exchange failed for token %r: %s", state, exc)
            raise HTTPException(status_code=500, detail="Failed to exchange authorization code") from exc
        return Response(status_code=200)

    @app.get("/api/tools")
    async def list_tools() -> Dict[str, Any]:
        return {"tools": [definition.describe() for definition in ctx.registry.definitions()]}

    return app


def run_local_server(host: str = "localhost", port: int = 12345, *, context: Optional[ServiceContext] = None) -> None:
    from hypercorn.asyncio import serve
    from hypercorn.config import Config

    config = Config()
    config.bind = [f"{host}:{port}"]
    logger.info("Server listening at http://%s:%d", host, port)
    asyncio.run(serve(create_app(context), config))
