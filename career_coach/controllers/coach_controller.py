"""
Career coach controller.

Runs the gateway pipeline for one request: CORS resolution, IP rate limit,
body parsing, schema validation, authentication, user rate limit, and the
upstream streaming relay. Every failure ends in exactly one JSON response.
"""
import json
import logging
import math
from typing import Any, Dict

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import ValidationError

from career_coach.api.dependencies.auth import SupabaseTokenVerifier, extract_bearer_token
from career_coach.api.models.chat import ChatRequest
from career_coach.config.settings import Settings
from career_coach.services.gateway import AIGatewayClient, relay_stream
from career_coach.services.prompts import build_system_prompt
from career_coach.utils.errors import (
    CoachError,
    ConfigurationError,
    InvalidRequestError,
    MethodNotAllowedError,
    PayloadTooLargeError,
    RateLimitedError,
)
from career_coach.utils.network import build_cors_headers, get_client_ip, truncate_user_id
from career_coach.utils.rate_limiter import RateLimitDecision, RateLimiter, RateLimiters

logger = logging.getLogger(__name__)

IP_RATE_LIMIT_MESSAGE = "Too many requests from your network. Please wait a minute and try again."
USER_RATE_LIMIT_MESSAGE = "You're sending messages too quickly. Please wait a moment and try again."
INVALID_JSON_MESSAGE = "Invalid JSON in request body"


class CoachController:
    """Controller for the career coach streaming endpoint."""

    def __init__(
        self,
        settings: Settings,
        rate_limiters: RateLimiters,
        token_verifier: SupabaseTokenVerifier,
        gateway: AIGatewayClient,
    ):
        self.settings = settings
        self.rate_limiters = rate_limiters
        self.token_verifier = token_verifier
        self.gateway = gateway

    async def handle(self, request: Request) -> Response:
        """
        Handle one request end to end.

        Never raises: errors are converted to JSON responses carrying the same
        CORS headers as a successful response.
        """
        cors_headers = build_cors_headers(
            request.headers.get("origin"),
            self.settings.allowed_origins,
            self.settings.default_origin,
        )

        if request.method == "OPTIONS":
            return Response(status_code=status.HTTP_200_OK, headers=cors_headers)

        try:
            return await self._process(request, cors_headers)
        except ConfigurationError as e:
            logger.error(f"Configuration error: {e.detail}")
            return self._error_response(e, cors_headers)
        except CoachError as e:
            return self._error_response(e, cors_headers)
        except Exception as e:
            logger.exception(f"Career coach error: {type(e).__name__}")
            return self._error_response(CoachError(), cors_headers)

    async def _process(self, request: Request, cors_headers: Dict[str, str]) -> Response:
        if request.method != "POST":
            raise MethodNotAllowedError()

        client_ip = get_client_ip(request.headers)
        self._enforce_limit(self.rate_limiters.ip, client_ip, IP_RATE_LIMIT_MESSAGE, "ip")

        payload = await self._read_json(request)
        chat_request = self._validate(payload)

        token = extract_bearer_token(request.headers.get("authorization"))
        user_id = await self.token_verifier.verify(token)
        request.state.user_id = truncate_user_id(user_id)

        decision = self._enforce_limit(
            self.rate_limiters.user, user_id, USER_RATE_LIMIT_MESSAGE, "user"
        )

        logger.info(
            f"Processing career coach request with {len(chat_request.messages)} messages "
            f"for user {truncate_user_id(user_id)} "
            f"(profile context: {'yes' if chat_request.userProfile else 'no'})"
        )

        messages = [
            {"role": "system", "content": build_system_prompt(chat_request.userProfile)},
            *(message.model_dump() for message in chat_request.messages),
        ]
        upstream = await self.gateway.open_stream(messages)

        logger.info("Streaming response from AI gateway")
        return StreamingResponse(
            relay_stream(upstream),
            media_type="text/event-stream",
            headers={**cors_headers, **self._rate_limit_headers(decision)},
        )

    # ------------------------------------------------------------------
    # Pipeline steps
    # ------------------------------------------------------------------

    def _enforce_limit(
        self, limiter: RateLimiter, key: str, message: str, tier: str
    ) -> RateLimitDecision:
        decision = limiter.check(key)
        if not decision.allowed:
            subject = truncate_user_id(key) if tier == "user" else key
            logger.warning(f"Rate limit exceeded ({tier} tier) for {subject}")
            raise RateLimitedError(message, retry_after=decision.retry_after)
        return decision

    async def _read_json(self, request: Request) -> Any:
        max_bytes = self.settings.max_body_bytes

        declared = request.headers.get("content-length")
        if declared is not None:
            try:
                declared_length = int(declared)
            except ValueError:
                raise InvalidRequestError()
            if declared_length > max_bytes:
                raise PayloadTooLargeError()

        body = bytearray()
        async for chunk in request.stream():
            body.extend(chunk)
            if len(body) > max_bytes:
                raise PayloadTooLargeError()

        try:
            return json.loads(body)
        except ValueError:
            logger.warning("Rejected request with invalid JSON body")
            raise InvalidRequestError(INVALID_JSON_MESSAGE)

    def _validate(self, payload: Any) -> ChatRequest:
        try:
            return ChatRequest.model_validate(payload)
        except ValidationError as e:
            # Locations and error types only; input values may hold message text
            problems = [
                f"{'.'.join(str(part) for part in error['loc']) or '<root>'}:{error['type']}"
                for error in e.errors()
            ]
            logger.warning(f"Request validation failed: {', '.join(problems[:10])}")
            raise InvalidRequestError()

    @staticmethod
    def _rate_limit_headers(decision: RateLimitDecision) -> Dict[str, str]:
        return {
            "X-RateLimit-Limit": str(decision.limit),
            "X-RateLimit-Remaining": str(decision.remaining),
            "X-RateLimit-Reset": str(math.ceil(decision.reset_at)),
        }

    @staticmethod
    def _error_response(error: CoachError, cors_headers: Dict[str, str]) -> JSONResponse:
        return JSONResponse(
            status_code=error.status_code,
            content=error.to_content(),
            headers={**cors_headers, **error.headers},
        )
