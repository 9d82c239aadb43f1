"""
Outermost error boundary.

A ``CoachError`` that escapes a route (for example from a dependency) keeps its
status and public message. Anything else becomes the generic 500 body; the
exception itself only goes to the log.
"""
import logging
from typing import Callable

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from career_coach.utils.errors import GENERIC_ERROR_MESSAGE, CoachError

logger = logging.getLogger(__name__)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Turns uncaught exceptions into JSON error responses."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except CoachError as e:
            logger.warning(f"{type(e).__name__} escaped {request.method} {request.url.path}")
            return JSONResponse(
                status_code=e.status_code,
                content=e.to_content(),
                headers=e.headers,
            )
        except Exception as e:
            logger.error(
                f"Unhandled {type(e).__name__} on {request.method} {request.url.path}",
                exc_info=True,
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": GENERIC_ERROR_MESSAGE},
            )
