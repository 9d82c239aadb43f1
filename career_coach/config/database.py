"""
Supabase client management.
"""
from functools import lru_cache

from supabase import Client, create_client
from supabase.client import ClientOptions

from career_coach.config.settings import get_settings


@lru_cache(maxsize=None)
def get_supabase_for(
    postgrest_client_timeout: int = 60,
    storage_client_timeout: int = 60,
    schema: str = "public",
) -> Client:
    """
    Returns a Supabase client with the specified options.

    The client is built with the anon key: it is only used to verify user
    access tokens and to run row-level-security scoped queries.

    Raises:
        ValueError: If SUPABASE_URL or SUPABASE_KEY are not set.
    """
    settings = get_settings()

    if not settings.supabase_url or not settings.supabase_key:
        raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set in environment variables")

    options = ClientOptions(
        postgrest_client_timeout=postgrest_client_timeout,
        storage_client_timeout=storage_client_timeout,
        schema=schema,
    )
    return create_client(settings.supabase_url, settings.supabase_key, options=options)


def get_supabase() -> Client:
    """Get default Supabase client (public schema)."""
    return get_supabase_for(schema="public")


