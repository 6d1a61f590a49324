"""
Completion handlers for the OAuth2 callback.

Both handlers send the browser back to the configured front-end page:
success appends the resolved user's fields, failure appends an `error`
message. Neither ever forwards exception internals to the client.
"""
import logging
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from fastapi import Request, status
from fastapi.responses import RedirectResponse

from auth.errors import AuthError
from config.settings import settings
from models.user import User

logger = logging.getLogger(__name__)

STATE_COOKIE_NAME = "oauth2_state"
GENERIC_FAILURE_MESSAGE = "Authentication failed"


def append_query_params(url: str, params: dict[str, str]) -> str:
    """Append params to url, keeping any query it already has"""
    parts = urlsplit(url)
    query = parse_qsl(parts.query, keep_blank_values=True)
    query.extend(params.items())
    return urlunsplit(parts._replace(query=urlencode(query)))


def determine_success_url(user: User) -> str:
    return append_query_params(settings.OAUTH2_AUTHORIZED_REDIRECT_URI, {
        "userId": str(user.id),
        "email": user.email,
        "name": user.name,
        "provider": user.provider,
    })


def failure_message(error: Exception) -> str:
    """Client-safe text for a failed login"""
    if isinstance(error, AuthError) and error.status_code < 500:
        return error.message
    return GENERIC_FAILURE_MESSAGE


def determine_failure_url(error: Exception) -> str:
    return append_query_params(settings.OAUTH2_AUTHORIZED_REDIRECT_URI, {
        "error": failure_message(error),
    })


def _response_committed(request: Request) -> bool:
    return getattr(request.state, "oauth2_response_committed", False)


def _redirect(request: Request, target_url: str) -> RedirectResponse:
    request.state.oauth2_response_committed = True
    response = RedirectResponse(target_url, status_code=status.HTTP_302_FOUND)
    # The state cookie is only meaningful for one round trip
    response.delete_cookie(STATE_COOKIE_NAME)
    return response


def on_authentication_success(request: Request, user: User) -> RedirectResponse | None:
    """
    Redirect to the front-end with the resolved user.

    Returns None without building a response when one was already produced
    for this request.
    """
    if _response_committed(request):
        logger.debug("Response has already been committed. Unable to redirect.")
        return None

    logger.info(f"OAuth2 login succeeded: id={user.id}, provider={user.provider}")
    return _redirect(request, determine_success_url(user))


def on_authentication_failure(request: Request, error: Exception) -> RedirectResponse | None:
    """Redirect to the front-end with an error message."""
    if _response_committed(request):
        logger.debug("Response has already been committed. Unable to redirect.")
        return None

    logger.warning(f"OAuth2 login failed: {type(error).__name__}: {error}")
    return _redirect(request, determine_failure_url(error))
