"""
Request metadata helpers shared by the gateway handler and the request logger.
"""
import re
from typing import Dict, Iterable, Mapping, Optional

ALLOWED_HEADERS = "authorization, x-client-info, apikey, content-type"
ALLOWED_METHODS = "POST, OPTIONS"

_LOCALHOST_ORIGIN = re.compile(r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$")


def get_client_ip(headers: Mapping[str, str]) -> str:
    """Extract client IP address from proxy headers."""
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    real_ip = headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    return "unknown"


def resolve_allowed_origin(
    origin: Optional[str], allowed_origins: Iterable[str], default_origin: str
) -> str:
    """
    Pick the value for Access-Control-Allow-Origin.

    The request origin is echoed back only when it is allow-listed or is a
    localhost origin (any port); everything else gets the default origin.
    """
    if origin:
        if origin in allowed_origins or _LOCALHOST_ORIGIN.match(origin):
            return origin
    return default_origin


def build_cors_headers(
    origin: Optional[str], allowed_origins: Iterable[str], default_origin: str
) -> Dict[str, str]:
    """CORS headers attached to every gateway response."""
    return {
        "Access-Control-Allow-Origin": resolve_allowed_origin(
            origin, allowed_origins, default_origin
        ),
        "Access-Control-Allow-Headers": ALLOWED_HEADERS,
        "Access-Control-Allow-Methods": ALLOWED_METHODS,
        "Vary": "Origin",
    }


def truncate_user_id(user_id: Optional[str]) -> Optional[str]:
    """Shorten a user id for log lines."""
    if not user_id:
        return None
    return f"{user_id[:8]}..."
