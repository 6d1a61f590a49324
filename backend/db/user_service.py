"""User database service layer"""
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from models.user import AuthProvider, User


class DuplicateEmailError(Exception):
    """Raised when the unique email index rejects an insert."""

    def __init__(self, email: str):
        super().__init__(f"Email already registered: {email}")
        self.email = email


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """
    Get user by email address.

    Emails are matched exactly (case-sensitive); no normalization is applied.

    Args:
        db: Database session
        email: User's email address

    Returns:
        User object if found, None otherwise
    """
    return db.query(User).filter(User.email == email).first()


def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
    """
    Get user by id.

    Args:
        db: Database session
        user_id: User's ID

    Returns:
        User object if found, None otherwise
    """
    return db.query(User).filter(User.id == user_id).first()


def email_exists(db: Session, email: str) -> bool:
    """Check whether any account is bound to this email."""
    return db.scalar(select(User.id).where(User.email == email).limit(1)) is not None


def list_users(db: Session) -> list[User]:
    """Get all users ordered by id."""
    return db.query(User).order_by(User.id).all()


def create_user(
    db: Session,
    email: str,
    name: str,
    provider: AuthProvider,
    password_hash: Optional[str] = None,
    provider_id: Optional[str] = None
) -> User:
    """
    Create a new user record.

    Args:
        db: Database session
        email: User's email address
        name: Display name
        provider: Account provider, fixed for the lifetime of the record
        password_hash: bcrypt hash for LOCAL accounts, None for federated ones
        provider_id: Identity provider subject id for federated accounts

    Returns:
        Created User object

    Raises:
        DuplicateEmailError: If user with email already exists
    """
    now = datetime.now(timezone.utc)

    user = User(
        email=email,
        name=name,
        password_hash=password_hash,
        provider=provider.value,
        provider_id=provider_id,
        created_at=now,
        updated_at=now
    )

    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateEmailError(email)
    db.refresh(user)
    return user


def update_user_name(db: Session, user: User, name: str) -> User:
    """
    Refresh a user's display name and updated_at timestamp.

    Only the mutable profile fields are touched; provider and provider_id
    keep the values written at creation.

    Args:
        db: Database session
        user: Persistent User to update
        name: New display name

    Returns:
        Updated User object
    """
    user.name = name
    user.updated_at = datetime.now(timezone.utc)

    db.commit()
    db.refresh(user)
    return user
