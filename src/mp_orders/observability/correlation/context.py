"""Observability – RequestContext: the tracing fields of one HTTP request."""
from __future__ import annotations

import dataclasses
from typing import Mapping


@dataclasses.dataclass(frozen=True)
class RequestContext:
    """Request id, client and user agent of the request being served.

    Events raised while serving the request copy these fields into their
    metadata; ``correlation_id`` links every event of one request.
    """

    request_id: str = ""
    user_agent: str = ""
    remote_addr: str = ""

    @classmethod
    def from_headers(
        cls,
        headers: Mapping[str, str],
        remote_addr: str = "",
    ) -> "RequestContext":
        """Build a context from HTTP headers (matched case-insensitively)."""
        norm = {k.lower(): v for k, v in headers.items()}
        return cls(
            request_id=norm.get("x-request-id", "").strip(),
            user_agent=norm.get("user-agent", ""),
            remote_addr=remote_addr,
        )

    def correlation_id(self, operation: str) -> str:
        """``{request_id}-{operation}``, or just ``operation`` without a request id."""
        if not self.request_id:
            return operation
        return f"{self.request_id}-{operation}"


__all__ = ["RequestContext"]
