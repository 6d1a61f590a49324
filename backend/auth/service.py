"""
Local registration and login.

Pure business logic with no HTTP dependencies: failures are raised as
auth.errors types and mapped to responses by the API layer.
"""
import logging
from sqlalchemy.orm import Session

from auth.errors import ConflictError, InvalidInputError, UnauthorizedError, INVALID_CREDENTIALS_MESSAGE
from auth.passwords import (
    MAX_PASSWORD_BYTES,
    dummy_password_hash,
    exceeds_hash_limit,
    hash_password,
    is_acceptable_password,
    verify_password,
)
from config.settings import settings
from db.user_service import DuplicateEmailError, create_user, email_exists, get_user_by_email
from models.user import AuthProvider, User

logger = logging.getLogger(__name__)

EMAIL_TAKEN_MESSAGE = "Email already registered"


def register(db: Session, email: str, raw_password: str, name: str) -> User:
    """
    Register a new LOCAL account.

    The existence pre-check gives a fast answer; the unique index on
    users.email is the final authority when two registrations race.

    Raises:
        ConflictError: email already registered
        InvalidInputError: password fails the credential policy
    """
    if email_exists(db, email):
        logger.warning("Registration rejected: email already registered")
        raise ConflictError(EMAIL_TAKEN_MESSAGE)

    if not is_acceptable_password(raw_password):
        raise InvalidInputError(
            f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters"
        )
    if exceeds_hash_limit(raw_password):
        raise InvalidInputError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

    password_hash = hash_password(raw_password)

    try:
        user = create_user(
            db,
            email=email,
            name=name,
            provider=AuthProvider.LOCAL,
            password_hash=password_hash,
        )
    except DuplicateEmailError:
        logger.warning("Registration lost a race on the unique email index")
        raise ConflictError(EMAIL_TAKEN_MESSAGE)

    logger.info(f"User registered: id={user.id}")
    return user


def login(db: Session, email: str, raw_password: str) -> User:
    """
    Authenticate a user by email and password.

    Unknown email and wrong password fail identically so callers cannot
    probe which emails have accounts.

    Raises:
        UnauthorizedError: invalid credentials (deliberately vague)
    """
    user = get_user_by_email(db, email)
    # Unknown emails and password-less accounts still cost one bcrypt verify
    has_password = user is not None and bool(user.password_hash)
    password_ok = verify_password(raw_password, user.password_hash if has_password else dummy_password_hash())
    if not (has_password and password_ok):
        logger.warning("Login rejected: invalid credentials")
        raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE)

    logger.info(f"User logged in: id={user.id}")
    return user
