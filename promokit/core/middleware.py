"""Request body limits for the jobs API (pure ASGI)."""

from __future__ import annotations

from typing import List

from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from promokit.core.config import get_settings

# Room for `type` and the JSON wrapper around the job payload.
JOB_ENVELOPE_ALLOWANCE = 1024


def body_limit_for(path: str) -> int:
    """Job routes carry small references only; everything else gets the general cap."""
    settings = get_settings()
    if "/jobs" in path:
        return int(settings.JOBS_MAX_INPUT_BYTES) + JOB_ENVELOPE_ALLOWANCE
    return int(settings.MAX_REQUEST_BODY_BYTES)


class BodySizeLimitMiddleware:
    """
    Reject oversized request bodies with 413 before routing.

    The declared Content-Length is checked first. Bodies without one are
    buffered up to the limit and replayed to the app.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope.get("method") in ("GET", "HEAD", "OPTIONS"):
            await self.app(scope, receive, send)
            return

        limit = body_limit_for(scope.get("path", ""))
        headers = dict(scope.get("headers") or [])
        declared = headers.get(b"content-length")
        if declared is not None:
            try:
                too_large = int(declared) > limit
            except ValueError:
                await self._reject(scope, receive, send, 400, "Invalid Content-Length.")
                return
            if too_large:
                await self._reject(scope, receive, send, 413, "Payload too large.")
                return

        chunks: List[Message] = []
        size = 0
        more_body = True
        while more_body:
            message = await receive()
            if message["type"] == "http.disconnect":
                return
            size += len(message.get("body", b""))
            if size > limit:
                await self._reject(scope, receive, send, 413, "Payload too large.")
                return
            chunks.append(message)
            more_body = message.get("more_body", False)

        async def replay() -> Message:
            if chunks:
                return chunks.pop(0)
            return await receive()

        await self.app(scope, replay, send)

    @staticmethod
    async def _reject(scope: Scope, receive: Receive, send: Send, status_code: int, detail: str) -> None:
        response = JSONResponse({"detail": detail}, status_code=status_code)
        await response(scope, receive, send)
