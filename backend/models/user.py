from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from sqlalchemy import BigInteger, Integer, String, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from models import Base


class AuthProvider(str, Enum):
    """
    Source of an account's credentials.

    LOCAL accounts carry a password hash; every other member is a
    federated identity provider whose registration id (the path segment in
    /oauth2/authorization/{provider}) is the lower-cased member name.
    """
    LOCAL = "LOCAL"
    GOOGLE = "GOOGLE"

    @classmethod
    def from_registration_id(cls, registration_id: str) -> "AuthProvider":
        """
        Convert a provider registration id to AuthProvider

        Raises:
            ValueError: If the provider is unknown or is LOCAL
        """
        try:
            provider = cls(registration_id.upper())
        except ValueError:
            raise ValueError(f"Login with {registration_id} is not supported")
        if provider is cls.LOCAL:
            raise ValueError(f"Login with {registration_id} is not supported")
        return provider


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    Canonical account record.

    - One row per email address (unique index)
    - password_hash is empty for federated accounts
    - provider is written once at creation; store functions never change it
    - created_at/updated_at are set explicitly by db.user_service
    """
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),  # SQLite only autoincrements INTEGER keys
        primary_key=True,
        autoincrement=True
    )

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True
    )

    password_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    provider: Mapped[str] = mapped_column(String(20), nullable=False)
    provider_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    @property
    def auth_provider(self) -> AuthProvider:
        return AuthProvider(self.provider)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', provider='{self.provider}')>"
