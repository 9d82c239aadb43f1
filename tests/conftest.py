"""
Shared fixtures: application wired to a mocked AI gateway, a fake identity
provider and a controllable clock.
"""
import httpx
import pytest
from fastapi.testclient import TestClient

from career_coach.api.dependencies.auth import get_token_verifier
from career_coach.config.settings import Settings, get_settings
from career_coach.utils.rate_limiter import RateLimiters
from helpers import OTHER_TOKEN, OTHER_USER_ID, USER_ID, VALID_TOKEN, FakeClock, FakeGateway, FakeTokenVerifier
from main import create_app


@pytest.fixture(autouse=True)
def no_ambient_gateway_key(monkeypatch):
    # The credential is re-read from the environment on every request
    monkeypatch.delenv("AI_GATEWAY_API_KEY", raising=False)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        environment="test",
        supabase_url="http://localhost:54321",
        supabase_key="test-anon-key",
        ai_gateway_url="https://gateway.test/v1/chat/completions",
        ai_gateway_api_key="test-gateway-key",
        allowed_origins=["https://tullycoach.app"],
        default_origin="https://tullycoach.app",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def verifier() -> FakeTokenVerifier:
    return FakeTokenVerifier({VALID_TOKEN: USER_ID, OTHER_TOKEN: OTHER_USER_ID})


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def app(settings, clock, verifier, gateway):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(gateway))
    # rng pinned above the sweep probability: no random sweeps during tests
    limiters = RateLimiters.from_settings(settings, clock=clock, rng=lambda: 1.0)
    app = create_app(settings=settings, http_client=http_client, rate_limiters=limiters)
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_token_verifier] = lambda: verifier
    # Set up front as well, for transports that skip the lifespan
    app.state.http_client = http_client
    return app


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
