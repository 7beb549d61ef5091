from __future__ import annotations
from typing import Any, Awaitable, Callable, Dict, List, Tuple


_ALLOW_METHODS = b"GET, POST, PUT, PATCH, DELETE, OPTIONS"


class PreflightMiddleware:
    """
    Answer every OPTIONS request with an empty 200 and permissive CORS headers,
    and make sure all other responses allow any origin.
    Register as the outermost middleware so preflights never reach auth.
    """
    def __init__(self, app, allow_headers: str = "*"):
        self.app = app
        self.allow_headers = allow_headers.encode("latin-1")

    async def __call__(
        self,
        scope: Dict[str, Any],
        receive: Callable[..., Awaitable[Dict[str, Any]]],
        send: Callable[..., Awaitable[None]],
    ) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        if (scope.get("method") or "").upper() == "OPTIONS":
            headers: List[Tuple[bytes, bytes]] = [
                (b"access-control-allow-origin", b"*"),
                (b"access-control-allow-methods", _ALLOW_METHODS),
                (b"access-control-allow-headers", self.allow_headers),
                (b"content-length", b"0"),
                (b"vary", b"Origin"),
            ]
            await send({"type": "http.response.start", "status": 200, "headers": headers})
            await send({"type": "http.response.body", "body": b""})
            return

        async def send_wrapper(message: Dict[str, Any]) -> None:
            if message.get("type") == "http.response.start":
                headers = list(message.get("headers") or [])
                present = {name.lower() for name, _ in headers}
                if b"access-control-allow-origin" not in present:
                    headers.append((b"access-control-allow-origin", b"*"))
                if b"access-control-allow-headers" not in present:
                    headers.append((b"access-control-allow-headers", self.allow_headers))
                message = {**message, "headers": headers}
            await send(message)

        await self.app(scope, receive, send_wrapper)
