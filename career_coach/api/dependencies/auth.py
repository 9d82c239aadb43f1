"""
Authentication dependencies for the gateway.

Tokens are never decoded locally: the identity provider (Supabase Auth) is the
only source of claims. Every failure collapses into the same 401 so callers
cannot tell which check rejected them.
"""
import logging
from typing import Callable, Optional

from starlette.concurrency import run_in_threadpool
from supabase import AuthError, Client

from career_coach.config.database import get_supabase
from career_coach.utils.errors import AuthenticationError, ConfigurationError

logger = logging.getLogger(__name__)

MIN_TOKEN_LENGTH = 10
MAX_TOKEN_LENGTH = 5000


# ============================================================================
# Header parsing
# ============================================================================


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Pull the token out of an ``Authorization: Bearer <token>`` header.

    Raises:
        AuthenticationError: If the header is missing, not a bearer header, or
            the token length is implausible.
    """
    if not authorization:
        raise AuthenticationError()

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        raise AuthenticationError()

    token = token.strip()
    if not MIN_TOKEN_LENGTH <= len(token) <= MAX_TOKEN_LENGTH:
        raise AuthenticationError()
    return token


# ============================================================================
# Token verification
# ============================================================================


class SupabaseTokenVerifier:
    """Resolves access tokens to user ids through Supabase Auth."""

    def __init__(self, client_factory: Callable[[], Client] = get_supabase):
        self._client_factory = client_factory

    async def verify(self, token: str) -> str:
        """
        Return the user id (``sub`` claim) for a valid token.

        Raises:
            AuthenticationError: If Supabase rejects the token or returns no subject.
        """
        try:
            client = self._client_factory()
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        try:
            response = await run_in_threadpool(client.auth.get_user, token)
        except AuthError as e:
            logger.debug(f"Token rejected by identity provider: {e}")
            raise AuthenticationError() from e
        except Exception as e:
            logger.warning(f"Unexpected error verifying token: {type(e).__name__}: {e}")
            raise AuthenticationError() from e

        user = getattr(response, "user", None)
        user_id = getattr(user, "id", None)
        if not user_id:
            logger.debug("Identity provider returned no subject for token")
            raise AuthenticationError()
        return str(user_id)


def get_token_verifier() -> SupabaseTokenVerifier:
    """Dependency injection for SupabaseTokenVerifier."""
    return SupabaseTokenVerifier()
