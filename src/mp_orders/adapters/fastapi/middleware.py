"""FastAPI adapter – FastAPIRequestLoggingMiddleware."""
from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any
from uuid import uuid4

import structlog

from mp_orders.observability.logging import get_logger

if TYPE_CHECKING:
    from starlette.types import ASGIApp, Receive, Scope, Send

REQUEST_ID_HEADER = "X-Request-ID"


class FastAPIRequestLoggingMiddleware:
    """Assign a request id, bind it to the log context and log each request.

    The id comes from ``X-Request-ID`` when the caller (normally the API
    gateway) supplies one and is generated otherwise.  It is stored in
    ``request.state.request_id``, bound with
    :func:`structlog.contextvars.bind_contextvars` for every log line written
    while the request is served, and echoed in the response headers.
    """

    def __init__(self, app: "ASGIApp", service: str, header_name: str = REQUEST_ID_HEADER) -> None:
        self.app = app
        self._service = service
        self._header = header_name.lower().encode()
        self._logger = get_logger("mp_orders.http", service=service)

    async def __call__(self, scope: "Scope", receive: "Receive", send: "Send") -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        request_id = headers.get(self._header, b"").decode().strip() or str(uuid4())
        scope.setdefault("state", {})["request_id"] = request_id

        method = scope.get("method", "GET")
        path = scope.get("path", "")
        status_code: list[int] = [500]
        header_name = self._header
        encoded_id = request_id.encode()

        async def send_with_header(message: Any) -> None:
            if message["type"] == "http.response.start":
                status_code[0] = message.get("status", 200)
                headers_list: list[tuple[bytes, bytes]] = list(message.get("headers", []))
                headers_list.append((header_name, encoded_id))
                message = {**message, "headers": headers_list}
            await send(message)

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)
        start = time.perf_counter()
        try:
            await self.app(scope, receive, send_with_header)
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            self._logger.info(
                "http.request",
                method=method,
                path=path,
                status=status_code[0],
                duration_ms=round(duration_ms, 2),
                content_length=int(headers.get(b"content-length", b"0") or 0),
            )
            structlog.contextvars.clear_contextvars()


__all__ = ["FastAPIRequestLoggingMiddleware", "REQUEST_ID_HEADER"]
