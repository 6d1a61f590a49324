"""
OAuth2 authorization-code plumbing for federated login.

- Authorization URL and client registration per provider
- Signed, short-lived `state` values (python-jose)
- Code exchange at the provider token endpoint (httpx)
- ID token verification (google-auth)
"""
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any
from urllib.parse import urlencode

import httpx
from google.auth.transport import requests
from google.oauth2 import id_token
from jose import JWTError, jwt

from auth.errors import OAuth2AuthenticationError
from config.settings import settings
from models.user import AuthProvider

GOOGLE_AUTHORIZATION_URI = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"

TOKEN_EXCHANGE_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class ClientRegistration:
    """OAuth2 client settings for one identity provider"""
    provider: AuthProvider
    client_id: str
    client_secret: str
    redirect_uri: str
    authorization_uri: str
    token_uri: str
    scopes: tuple[str, ...]


def get_client_registration(provider: AuthProvider) -> ClientRegistration:
    """
    Build the client registration for a provider from settings.

    Raises:
        OAuth2AuthenticationError: provider is not configured
    """
    if provider is AuthProvider.GOOGLE and settings.GOOGLE_CLIENT_ID:
        return ClientRegistration(
            provider=provider,
            client_id=settings.GOOGLE_CLIENT_ID,
            client_secret=settings.GOOGLE_CLIENT_SECRET,
            redirect_uri=settings.GOOGLE_REDIRECT_URI,
            authorization_uri=GOOGLE_AUTHORIZATION_URI,
            token_uri=GOOGLE_TOKEN_URI,
            scopes=("openid", "email", "profile"),
        )
    raise OAuth2AuthenticationError(f"Login with {provider.value.lower()} is not configured")


def create_state(provider: AuthProvider) -> str:
    """
    Create a signed state value binding the login attempt to a provider.

    Args:
        provider: Provider the user is being sent to

    Returns:
        str: Encoded JWT carrying a random nonce
    """
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.OAUTH2_STATE_EXPIRE_MINUTES)
    payload = {
        "nonce": secrets.token_urlsafe(16),
        "provider": provider.value,
        "exp": expire,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_state(state: str | None, expected: str | None, provider: AuthProvider) -> None:
    """
    Check the state returned by the provider.

    It must equal the value stored in the browser cookie, carry a valid
    signature, be unexpired and name the same provider.

    Raises:
        OAuth2AuthenticationError: If any check fails
    """
    if not state or not expected or not secrets.compare_digest(state, expected):
        raise OAuth2AuthenticationError("Invalid login state")

    try:
        payload = jwt.decode(state, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise OAuth2AuthenticationError("Login session expired, please try again")

    if payload.get("provider") != provider.value:
        raise OAuth2AuthenticationError("Invalid login state")


def build_authorization_url(registration: ClientRegistration, state: str) -> str:
    """URL that starts the provider's consent screen"""
    params = {
        "client_id": registration.client_id,
        "redirect_uri": registration.redirect_uri,
        "response_type": "code",
        "scope": " ".join(registration.scopes),
        "state": state,
        "access_type": "online",
        "prompt": "select_account",
    }
    return f"{registration.authorization_uri}?{urlencode(params)}"


async def exchange_code(registration: ClientRegistration, code: str) -> dict[str, Any]:
    """
    Exchange an authorization code for tokens.

    Returns:
        dict: Token endpoint response (contains id_token)

    Raises:
        OAuth2AuthenticationError: If the provider rejects the code
    """
    data = {
        "code": code,
        "client_id": registration.client_id,
        "client_secret": registration.client_secret,
        "redirect_uri": registration.redirect_uri,
        "grant_type": "authorization_code",
    }
    try:
        async with httpx.AsyncClient(timeout=TOKEN_EXCHANGE_TIMEOUT_SECONDS) as client:
            response = await client.post(registration.token_uri, data=data)
            response.raise_for_status()
    except httpx.HTTPError:
        raise OAuth2AuthenticationError("Could not complete login with the identity provider")

    return response.json()


def verify_google_token(token: str, client_id: str) -> dict[str, Any]:
    """
    Verify Google ID token and return its claims

    Args:
        token: Google ID token from the token endpoint
        client_id: Expected audience

    Returns:
        dict: Verified claims (sub, email, name, ...)

    Raises:
        OAuth2AuthenticationError: If token is invalid
    """
    try:
        return id_token.verify_oauth2_token(token, requests.Request(), client_id)
    except ValueError:
        raise OAuth2AuthenticationError("Invalid authentication token")


async def fetch_user_attributes(registration: ClientRegistration, code: str) -> dict[str, Any]:
    """
    Run the token exchange and return the verified identity attributes.

    Raises:
        OAuth2AuthenticationError: If exchange or verification fails
    """
    tokens = await exchange_code(registration, code)
    raw_id_token = tokens.get("id_token")
    if not raw_id_token:
        raise OAuth2AuthenticationError("Identity provider returned no ID token")
    return verify_google_token(raw_id_token, registration.client_id)
