"""Tests for request rate-limit bucketing."""

from starlette.requests import Request

from learnpath.middleware.security import rate_limit_key


def make_request(headers: dict[str, str]) -> Request:
    return Request(
        {
            "type": "http",
            "method": "PUT",
            "path": "/api/v1/progress/html1",
            "headers": [(name.lower().encode(), value.encode()) for name, value in headers.items()],
            "client": ("10.0.0.1", 5123),
        }
    )


def test_signed_in_users_are_bucketed_by_user_id() -> None:
    assert rate_limit_key(make_request({"X-User-Id": "u1", "X-Guest-Id": "g1"})) == "user:u1"


def test_guests_are_bucketed_by_guest_id() -> None:
    assert rate_limit_key(make_request({"X-Guest-Id": "g1"})) == "guest:g1"


def test_anonymous_requests_fall_back_to_client_address() -> None:
    assert rate_limit_key(make_request({})) == "10.0.0.1"
