"""
Provider-specific views over identity-provider attributes.

Each supported provider gets one OAuth2UserInfo subclass; the resolver picks
it by registration id and only ever talks to the common interface.
"""
from abc import ABC, abstractmethod
from typing import Any

from auth.errors import InvalidInputError
from models.user import AuthProvider


class OAuth2UserInfo(ABC):
    """Common accessors for a verified identity assertion"""

    provider: AuthProvider

    def __init__(self, attributes: dict[str, Any]):
        self.attributes = attributes

    @property
    @abstractmethod
    def external_id(self) -> str:
        ...

    @property
    @abstractmethod
    def email(self) -> str | None:
        ...

    @property
    @abstractmethod
    def name(self) -> str | None:
        ...


class GoogleOAuth2UserInfo(OAuth2UserInfo):
    """Claims from a Google ID token (sub, email, name)"""

    provider = AuthProvider.GOOGLE

    @property
    def external_id(self) -> str:
        return str(self.attributes.get("sub", ""))

    @property
    def email(self) -> str | None:
        return self.attributes.get("email")

    @property
    def name(self) -> str | None:
        return self.attributes.get("name")


USER_INFO_TYPES: dict[AuthProvider, type[OAuth2UserInfo]] = {
    AuthProvider.GOOGLE: GoogleOAuth2UserInfo,
}


def get_oauth2_user_info(registration_id: str, attributes: dict[str, Any]) -> OAuth2UserInfo:
    """
    Wrap provider attributes in the matching OAuth2UserInfo.

    Raises:
        InvalidInputError: provider is not supported
    """
    try:
        provider = AuthProvider.from_registration_id(registration_id)
    except ValueError as e:
        raise InvalidInputError(str(e))

    info_type = USER_INFO_TYPES.get(provider)
    if info_type is None:
        raise InvalidInputError(f"Login with {registration_id} is not supported")
    return info_type(attributes)
