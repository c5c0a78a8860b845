"""FastAPI middleware — Request ID tracking (pure ASGI)."""

from __future__ import annotations

import logging
import uuid

from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = b"x-request-id"


class RequestIdMiddleware:
    """Tag every HTTP exchange with a request ID.

    A client-supplied ``X-Request-ID`` is reused; otherwise a short UUID
    is generated.  The ID is exposed as ``scope["state"]["request_id"]``
    and echoed in the response headers, so a task's stop call can be
    matched against the pipeline's stage logs.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        request_id = headers.get(REQUEST_ID_HEADER, b"").decode() or uuid.uuid4().hex[:8]

        scope.setdefault("state", {})
        scope["state"]["request_id"] = request_id
        logger.debug("%s %s [%s]", scope.get("method"), scope.get("path"), request_id)

        async def send_with_request_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                response_headers = list(message.get("headers", []))
                response_headers.append((REQUEST_ID_HEADER, request_id.encode()))
                message["headers"] = response_headers
            await send(message)

        await self.app(scope, receive, send_with_request_id)
