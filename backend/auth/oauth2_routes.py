"""
OAuth2 authorization-code login.

Flow:
1. GET /oauth2/authorization/{provider}: sign a state value, store it in a
   cookie and redirect to the provider consent screen
2. Provider redirects back to GET /login/oauth2/code/{provider}
3. State is checked, the code exchanged and the ID token verified
4. The verified identity is reconciled with a local User
5. The browser is redirected to the front-end with the user or an error
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from auth.account_resolver import resolve_user_info
from auth.errors import AuthError, InvalidInputError, OAuth2AuthenticationError
from auth.oauth2_handlers import STATE_COOKIE_NAME, on_authentication_failure, on_authentication_success
from auth.oauth2_user_info import get_oauth2_user_info
from auth.utils import (
    build_authorization_url,
    create_state,
    fetch_user_attributes,
    get_client_registration,
    verify_state,
)
from config.settings import settings
from db.session import get_db
from models.user import AuthProvider

logger = logging.getLogger(__name__)

router = APIRouter()


def _provider_from_path(provider: str) -> AuthProvider:
    try:
        return AuthProvider.from_registration_id(provider)
    except ValueError as e:
        raise InvalidInputError(str(e))


@router.get("/oauth2/authorization/{provider}")
async def start_authorization(provider: str, request: Request):
    """Redirect the browser to the identity provider"""
    try:
        auth_provider = _provider_from_path(provider)
        registration = get_client_registration(auth_provider)
    except AuthError as e:
        return on_authentication_failure(request, e)

    state = create_state(auth_provider)
    response = RedirectResponse(
        build_authorization_url(registration, state),
        status_code=status.HTTP_302_FOUND
    )
    response.set_cookie(
        STATE_COOKIE_NAME,
        state,
        max_age=settings.OAUTH2_STATE_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
        secure=not settings.is_development(),
    )
    return response


@router.get("/login/oauth2/code/{provider}")
async def complete_authorization(
    provider: str,
    request: Request,
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Provider callback: resolve the user and hand off to the completion handlers"""
    try:
        auth_provider = _provider_from_path(provider)
        if error:
            logger.warning(f"Identity provider returned error={error}")
            raise OAuth2AuthenticationError("Login was cancelled or denied")

        verify_state(state, request.cookies.get(STATE_COOKIE_NAME), auth_provider)
        if not code:
            raise OAuth2AuthenticationError("Missing authorization code")

        registration = get_client_registration(auth_provider)
        attributes = await fetch_user_attributes(registration, code)
        user = resolve_user_info(db, get_oauth2_user_info(provider, attributes))
    except AuthError as e:
        return on_authentication_failure(request, e)
    except Exception as e:
        logger.exception(f"Unexpected error during OAuth2 login: {e}")
        return on_authentication_failure(request, e)

    return on_authentication_success(request, user)
