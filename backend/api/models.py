"""
Response envelope and user DTO.

Every response body has the shape
    {statusCode, success, message, data, timestamp}
"""
from datetime import datetime, timezone
from typing import Any, Generic, Optional, TypeVar

from fastapi import status
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from models.user import AuthProvider, User

T = TypeVar("T")


def as_utc(value: datetime) -> datetime:
    """SQLite drops tzinfo; stored timestamps are always UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserResponse(CamelModel):
    """Client-facing user. Deliberately has no password field."""
    id: int
    email: str
    name: str
    provider: AuthProvider
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            provider=AuthProvider(user.provider),
            created_at=as_utc(user.created_at),
        )


class ApiResponse(CamelModel, Generic[T]):
    status_code: int
    success: bool
    message: str
    data: Optional[T] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def ok(cls, message: str, data: Any = None) -> "ApiResponse":
        return cls(status_code=status.HTTP_200_OK, success=True, message=message, data=data)

    @classmethod
    def created(cls, message: str, data: Any = None) -> "ApiResponse":
        return cls(status_code=status.HTTP_201_CREATED, success=True, message=message, data=data)

    @classmethod
    def error(cls, status_code: int, message: str, data: Any = None) -> "ApiResponse":
        return cls(status_code=status_code, success=False, message=message, data=data)

    def to_content(self) -> dict:
        """JSON-ready dict using the camelCase field names"""
        return self.model_dump(mode="json", by_alias=True)
