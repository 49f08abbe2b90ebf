"""
Body size guard.
Rejects request bodies above a fixed byte limit before any handler parses them.
"""
import logging

from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from dream_gateway.api.errors import PayloadTooLarge
from dream_gateway.middleware.error_handling import error_response

logger = logging.getLogger(__name__)

BODY_TOO_LARGE_MESSAGE = "Request body too large."


class BodySizeLimitMiddleware:
    """
    ASGI middleware enforcing ``max_body_bytes``.

    Declared ``Content-Length`` values are checked up front. Bodies without
    one (chunked uploads) are buffered up to the limit and replayed to the
    application.
    """

    def __init__(self, app: ASGIApp, max_body_bytes: int):
        self.app = app
        self.max_body_bytes = max_body_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = Headers(scope=scope)
        content_length = headers.get("content-length")
        if content_length is not None:
            try:
                declared = int(content_length)
            except ValueError:
                declared = 0
            if declared > self.max_body_bytes:
                await self._reject(scope, receive, send, declared)
                return
            await self.app(scope, receive, send)
            return

        if "chunked" not in headers.get("transfer-encoding", "").lower():
            await self.app(scope, receive, send)
            return

        chunks = []
        total = 0
        more_body = True
        while more_body:
            message = await receive()
            if message["type"] != "http.request":
                # Client went away; nothing left to serve.
                return
            chunk = message.get("body", b"")
            total += len(chunk)
            if total > self.max_body_bytes:
                await self._reject(scope, receive, send, total)
                return
            chunks.append(chunk)
            more_body = message.get("more_body", False)

        body = b"".join(chunks)
        replayed = False

        async def replay() -> Message:
            nonlocal replayed
            if not replayed:
                replayed = True
                return {"type": "http.request", "body": body, "more_body": False}
            return await receive()

        await self.app(scope, replay, send)

    async def _reject(self, scope: Scope, receive: Receive, send: Send, size: int) -> None:
        logger.warning(
            "Request body too large",
            extra={"path": scope.get("path"), "size": size, "limit": self.max_body_bytes},
        )
        response = error_response(PayloadTooLarge(BODY_TOO_LARGE_MESSAGE))
        await response(scope, receive, send)
