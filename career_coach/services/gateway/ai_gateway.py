"""
AI gateway client.

Opens streaming chat completions against the hosted model gateway and relays
the SSE bytes back without buffering the full completion.
"""
import logging
from typing import AsyncIterator, Dict, List

import httpx

from career_coach.config.settings import Settings, current_gateway_api_key
from career_coach.utils.errors import (
    ConfigurationError,
    RateLimitedError,
    UpstreamError,
    UpstreamUnavailableError,
)

logger = logging.getLogger(__name__)

HIGH_DEMAND_MESSAGE = "We're experiencing high demand. Please try again in a moment."
UPSTREAM_RETRY_AFTER_SECONDS = 30

# Upstream error bodies are logged up to this many characters
MAX_LOGGED_ERROR_BODY = 500


class AIGatewayClient:
    """Thin streaming client for the chat completion gateway."""

    def __init__(self, http_client: httpx.AsyncClient, settings: Settings):
        self.http_client = http_client
        self.settings = settings

    def _api_key(self) -> str:
        # Not cached: a key set or rotated after startup is used right away
        api_key = current_gateway_api_key(self.settings)
        if not api_key:
            raise ConfigurationError("AI_GATEWAY_API_KEY is not configured")
        return api_key

    async def open_stream(self, messages: List[Dict[str, str]]) -> httpx.Response:
        """
        Start a streaming completion.

        Args:
            messages: Full message list, system instruction first

        Returns:
            The upstream response with its body still unread

        Raises:
            ConfigurationError: If the gateway credential is missing
            RateLimitedError: If the gateway reports 429
            UpstreamUnavailableError: If the gateway reports 402
            UpstreamError: For any other failure
        """
        api_key = self._api_key()

        request = self.http_client.build_request(
            "POST",
            self.settings.ai_gateway_url,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            json={
                "model": self.settings.ai_gateway_model,
                "messages": messages,
                "stream": True,
            },
            timeout=self.settings.ai_gateway_timeout_seconds,
        )

        try:
            response = await self.http_client.send(request, stream=True)
        except httpx.HTTPError as e:
            logger.error(f"AI gateway request failed: {type(e).__name__}: {e}")
            raise UpstreamError() from e

        if response.is_success:
            return response

        await self._raise_for_status(response)

    async def _raise_for_status(self, response: httpx.Response) -> None:
        """Log the upstream failure and raise its client-facing counterpart."""
        try:
            body = (await response.aread()).decode("utf-8", errors="replace")
        except httpx.HTTPError:
            body = "<unreadable>"
        finally:
            await response.aclose()

        status_code = response.status_code
        if status_code == 429:
            logger.error("AI gateway rate limit exceeded")
            raise RateLimitedError(
                HIGH_DEMAND_MESSAGE, retry_after=UPSTREAM_RETRY_AFTER_SECONDS
            )
        if status_code == 402:
            logger.error("AI gateway payment required")
            raise UpstreamUnavailableError()

        logger.error(f"AI gateway error: {status_code} {body[:MAX_LOGGED_ERROR_BODY]}")
        raise UpstreamError()


async def relay_stream(response: httpx.Response) -> AsyncIterator[bytes]:
    """
    Forward upstream body chunks as they arrive.

    Errors after the first byte cannot change the status code anymore, so they
    are logged and the stream simply ends.
    """
    relayed = 0
    try:
        async for chunk in response.aiter_bytes():
            if chunk:
                relayed += len(chunk)
                yield chunk
    except httpx.HTTPError as e:
        logger.warning(f"AI gateway stream interrupted after {relayed} bytes: {e}")
    finally:
        await response.aclose()
        logger.debug(f"Relayed {relayed} bytes from AI gateway")
