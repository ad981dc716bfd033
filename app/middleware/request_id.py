"""Request ID middleware.

Forwards a well-formed client request id or mints a new cuid, exposes it as
request.state.request_id and echoes it on the response. Raw ASGI, so
WebSocket and lifespan scopes pass straight through.
"""

import re

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.shared.utils.generators import generate_cuid

REQUEST_ID_MAX_LENGTH = 64
_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9_-]{1,%d}$" % REQUEST_ID_MAX_LENGTH)


def resolve_request_id(raw: str | None) -> str:
    """Client value if it is log-safe, else a fresh id."""
    if raw is not None and _SAFE_REQUEST_ID.match(raw.strip()):
        return raw.strip()
    return generate_cuid()


class RequestIDMiddleware:
    def __init__(self, app: ASGIApp, header_name: str = "X-Request-ID") -> None:
        self.app = app
        self.header_name = header_name
        self._header_key = header_name.lower().encode("latin-1")

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return
        raw = next(
            (
                value.decode("latin-1")
                for key, value in scope.get("headers", [])
                if key.lower() == self._header_key
            ),
            None,
        )
        request_id = resolve_request_id(raw)
        scope.setdefault("state", {})["request_id"] = request_id

        async def send_with_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = list(message.get("headers", []))
                headers.append((self._header_key, request_id.encode("latin-1")))
                message["headers"] = headers
            await send(message)

        await self.app(scope, receive, send_with_id)
