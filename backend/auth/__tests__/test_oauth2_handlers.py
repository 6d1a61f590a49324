"""
Unit tests for the OAuth2 completion handlers.

Run: python3 -m pytest auth/__tests__/test_oauth2_handlers.py -v
"""
from unittest.mock import MagicMock
from urllib.parse import parse_qs, urlsplit

from starlette.requests import Request

from auth.errors import ConflictError, InternalError
from auth.oauth2_handlers import (
    GENERIC_FAILURE_MESSAGE,
    STATE_COOKIE_NAME,
    append_query_params,
    on_authentication_failure,
    on_authentication_success,
)


def make_request() -> Request:
    return Request({
        "type": "http",
        "method": "GET",
        "path": "/login/oauth2/code/google",
        "headers": [],
        "query_string": b"",
    })


def make_user():
    user = MagicMock()
    user.id = 7
    user.email = "fed@example.com"
    user.name = "Fed User"
    user.provider = "GOOGLE"
    return user


def query_of(url: str) -> dict[str, list[str]]:
    return parse_qs(urlsplit(url).query)


class TestAppendQueryParams:

    def test_keeps_existing_query(self):
        url = append_query_params("http://front/cb?x=1", {"y": "2"})

        assert query_of(url) == {"x": ["1"], "y": ["2"]}

    def test_encodes_values(self):
        url = append_query_params("http://front/cb", {"name": "A B&C"})

        assert query_of(url) == {"name": ["A B&C"]}


class TestOnAuthenticationSuccess:

    def test_redirects_with_user_fields(self):
        response = on_authentication_success(make_request(), make_user())

        location = response.headers["location"]
        assert location.startswith("http://localhost:3000/oauth2/redirect?")
        assert query_of(location) == {
            "userId": ["7"],
            "email": ["fed@example.com"],
            "name": ["Fed User"],
            "provider": ["GOOGLE"],
        }
        assert response.status_code == 302

    def test_clears_state_cookie(self):
        response = on_authentication_success(make_request(), make_user())

        assert f"{STATE_COOKIE_NAME}=" in response.headers["set-cookie"]
        assert "Max-Age=0" in response.headers["set-cookie"]

    def test_noop_when_response_already_committed(self):
        request = make_request()
        assert on_authentication_failure(request, ConflictError("first")) is not None

        assert on_authentication_success(request, make_user()) is None


class TestOnAuthenticationFailure:

    def test_redirects_with_error_message(self):
        error = ConflictError("Email already registered with a different provider")

        response = on_authentication_failure(make_request(), error)

        assert query_of(response.headers["location"]) == {
            "error": ["Email already registered with a different provider"],
        }

    def test_unexpected_exception_details_not_leaked(self):
        error = RuntimeError("psycopg2.OperationalError: connection to 10.0.0.5 refused")

        response = on_authentication_failure(make_request(), error)

        location = response.headers["location"]
        assert query_of(location) == {"error": [GENERIC_FAILURE_MESSAGE]}
        assert "RuntimeError" not in location
        assert "10.0.0.5" not in location

    def test_internal_error_uses_generic_message(self):
        response = on_authentication_failure(make_request(), InternalError())

        assert query_of(response.headers["location"]) == {"error": [GENERIC_FAILURE_MESSAGE]}
