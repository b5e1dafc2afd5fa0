"""
Request deadline middleware

Cancels the request task when the deadline passes. Cancellation reaches the
database call the handler is awaiting, and the request's session rolls back.
"""
import asyncio
import logging

from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)


class RequestTimeoutMiddleware:
    """Pure ASGI so the handler runs inside the task being timed"""

    def __init__(self, app: ASGIApp, timeout: float):
        self.app = app
        self.timeout = timeout

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not self.timeout:
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await asyncio.wait_for(self.app(scope, receive, send_wrapper), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Request {scope['method']} {scope['path']} exceeded {self.timeout}s")
            if response_started:
                raise
            response = JSONResponse(status_code=504, content={"detail": "Request timed out"})
            await response(scope, receive, send)
