"""
Access log for the gateway.

One JSON line when a request arrives and one when its response starts. Bodies
are never logged: chat requests carry conversation text and replies are token
streams. Users appear only by their truncated id.
"""
import json
import logging
import time
from typing import Callable, Dict

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from career_coach.utils.network import get_client_ip

logger = logging.getLogger(__name__)

QUIET_PATHS = ("/health", "/docs", "/openapi.json", "/redoc", "/favicon.ico")


def _level_for(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs arrivals and outcomes of gateway requests."""

    def __init__(self, app, quiet_paths: tuple = QUIET_PATHS):
        super().__init__(app)
        self.quiet_paths = quiet_paths
        self.served = 0

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.quiet_paths:
            return await call_next(request)

        self.served += 1
        entry: Dict[str, object] = {
            "request_number": self.served,
            "method": request.method,
            "path": request.url.path,
            "client_ip": get_client_ip(request.headers),
        }
        started = time.time()
        logger.info(json.dumps({
            "type": "request",
            **entry,
            "origin": request.headers.get("origin"),
            "content_length": request.headers.get("content-length"),
        }))

        response = await call_next(request)
        elapsed = time.time() - started

        outcome = {
            "type": "response",
            **entry,
            "status_code": response.status_code,
            "streaming": response.headers.get("content-type", "").startswith("text/event-stream"),
            "time_to_headers_ms": round(elapsed * 1000, 2),
        }
        # Already truncated by the controller
        user_id = getattr(request.state, "user_id", None)
        if user_id:
            outcome["user_id"] = user_id
        logger.log(_level_for(response.status_code), json.dumps(outcome))

        response.headers["X-Process-Time"] = str(elapsed)
        return response
