from types import SimpleNamespace

import pytest
from supabase import AuthApiError

from career_coach.api.dependencies.auth import SupabaseTokenVerifier, extract_bearer_token
from career_coach.utils.errors import AuthenticationError, ConfigurationError


class FakeAuth:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.tokens = []

    def get_user(self, token):
        self.tokens.append(token)
        if self.error:
            raise self.error
        return self.result


def verifier_for(auth: FakeAuth) -> SupabaseTokenVerifier:
    return SupabaseTokenVerifier(client_factory=lambda: SimpleNamespace(auth=auth))


@pytest.mark.parametrize(
    "header, token",
    [
        ("Bearer abcdefghij", "abcdefghij"),
        ("bearer  abcdefghijk ", "abcdefghijk"),
    ],
)
def test_extract_bearer_token(header, token):
    assert extract_bearer_token(header) == token


@pytest.mark.parametrize(
    "header",
    [None, "", "Token abcdefghijkl", "Bearer", "Bearer abc", "Bearer " + "a" * 5001],
)
def test_extract_bearer_token_rejects(header):
    with pytest.raises(AuthenticationError):
        extract_bearer_token(header)


async def test_verify_returns_subject():
    auth = FakeAuth(result=SimpleNamespace(user=SimpleNamespace(id="user-123")))
    assert await verifier_for(auth).verify("token-value-1") == "user-123"
    assert auth.tokens == ["token-value-1"]


async def test_verify_rejects_provider_errors():
    auth = FakeAuth(error=AuthApiError("invalid JWT", 401, "bad_jwt"))
    with pytest.raises(AuthenticationError):
        await verifier_for(auth).verify("token-value-1")


async def test_verify_rejects_unexpected_errors():
    auth = FakeAuth(error=ConnectionError("auth server down"))
    with pytest.raises(AuthenticationError):
        await verifier_for(auth).verify("token-value-1")


@pytest.mark.parametrize(
    "result",
    [None, SimpleNamespace(user=None), SimpleNamespace(user=SimpleNamespace(id=None))],
)
async def test_verify_rejects_missing_subject(result):
    with pytest.raises(AuthenticationError):
        await verifier_for(FakeAuth(result=result)).verify("token-value-1")


async def test_missing_supabase_configuration():
    def broken_factory():
        raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set")

    with pytest.raises(ConfigurationError):
        await SupabaseTokenVerifier(client_factory=broken_factory).verify("token-value-1")
