import pytest

from career_coach.utils.network import (
    build_cors_headers,
    get_client_ip,
    resolve_allowed_origin,
    truncate_user_id,
)

ALLOWED = ["https://tullycoach.app", "https://www.tullycoach.app"]
DEFAULT = "https://tullycoach.app"


@pytest.mark.parametrize(
    "headers, expected",
    [
        ({"x-forwarded-for": "203.0.113.7, 10.0.0.1", "x-real-ip": "10.0.0.2"}, "203.0.113.7"),
        ({"x-forwarded-for": " 203.0.113.7 "}, "203.0.113.7"),
        ({"x-real-ip": "198.51.100.4"}, "198.51.100.4"),
        ({"x-forwarded-for": "", "x-real-ip": "198.51.100.4"}, "198.51.100.4"),
        ({}, "unknown"),
    ],
)
def test_client_ip(headers, expected):
    assert get_client_ip(headers) == expected


@pytest.mark.parametrize(
    "origin, expected",
    [
        ("https://www.tullycoach.app", "https://www.tullycoach.app"),
        ("http://localhost:5173", "http://localhost:5173"),
        ("https://127.0.0.1:8443", "https://127.0.0.1:8443"),
        ("https://tullycoach.app.evil.example", DEFAULT),
        ("http://localhost:5173/path", DEFAULT),
        (None, DEFAULT),
        ("", DEFAULT),
    ],
)
def test_resolve_allowed_origin(origin, expected):
    assert resolve_allowed_origin(origin, ALLOWED, DEFAULT) == expected


def test_cors_headers_always_vary_on_origin():
    headers = build_cors_headers(None, ALLOWED, DEFAULT)
    assert headers["Vary"] == "Origin"
    assert headers["Access-Control-Allow-Methods"] == "POST, OPTIONS"


def test_truncate_user_id():
    assert truncate_user_id("3f1c9b8e-0d2a-4a63") == "3f1c9b8e..."
    assert truncate_user_id(None) is None
