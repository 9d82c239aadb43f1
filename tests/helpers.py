"""Test doubles and request builders shared across the test modules."""
import json
from typing import Callable, Dict, List

import httpx

from career_coach.utils.errors import AuthenticationError


VALID_TOKEN = "valid-access-token-123"
OTHER_TOKEN = "other-access-token-456"
USER_ID = "3f1c9b8e-0d2a-4a63-9f4e-1b2c3d4e5f60"
OTHER_USER_ID = "7a6b5c4d-3e2f-4a1b-8c9d-0e1f2a3b4c5d"

SSE_HI_THERE = (
    b'data: {"choices":[{"delta":{"content":"Hi"}}]}\n\n'
    b'data: {"choices":[{"delta":{"content":" there"}}]}\n\n'
    b"data: [DONE]\n\n"
)


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeTokenVerifier:
    """Stands in for Supabase Auth: known tokens map to user ids."""

    def __init__(self, tokens: Dict[str, str]):
        self.tokens = tokens
        self.calls: List[str] = []

    async def verify(self, token: str) -> str:
        self.calls.append(token)
        try:
            return self.tokens[token]
        except KeyError:
            raise AuthenticationError()


class FakeGateway:
    """Mock transport handler for the AI gateway; records every request."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.responder: Callable[[httpx.Request], httpx.Response] = lambda request: httpx.Response(
            200, headers={"content-type": "text/event-stream"}, content=SSE_HI_THERE
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    @property
    def last_payload(self) -> dict:
        return json.loads(self.requests[-1].content)


def auth_headers(token: str = VALID_TOKEN) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def chat_body(*contents: str, **extra) -> dict:
    messages = [
        {"role": "user" if index % 2 == 0 else "assistant", "content": content}
        for index, content in enumerate(contents)
    ]
    return {"messages": messages, **extra}


def sse_frame(content: str) -> bytes:
    payload = json.dumps({"choices": [{"delta": {"content": content}}]}, ensure_ascii=False)
    return f"data: {payload}\n\n".encode()
