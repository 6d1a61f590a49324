"""
Password hashing and credential policy.

bcrypt hashes are self-describing ($2b$<cost>$<salt><digest>), so verify()
needs nothing beyond the stored string.
"""
import secrets
from functools import lru_cache

import bcrypt
from config.settings import settings

# bcrypt only digests the first 72 bytes; longer input is rejected
MAX_PASSWORD_BYTES = 72


def hash_password(raw_password: str) -> str:
    """
    Hash password using bcrypt.

    Every call draws a fresh salt, so hashing the same password twice
    yields two different strings that both verify.

    Args:
        raw_password: Plain text password

    Returns:
        Bcrypt hashed password as string
    """
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    hashed = bcrypt.hashpw(raw_password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_password(raw_password: str, password_hash: str | None) -> bool:
    """
    Verify password against hash.

    bcrypt.checkpw compares digests in constant time. Empty or malformed
    hashes (federated accounts have none) never match.

    Args:
        raw_password: Plain text password
        password_hash: Bcrypt hashed password (string format)

    Returns:
        True if password matches, False otherwise
    """
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(raw_password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def is_acceptable_password(raw_password: str | None) -> bool:
    """Password policy gate: minimum length only."""
    return raw_password is not None and len(raw_password) >= settings.MIN_PASSWORD_LENGTH


def exceeds_hash_limit(raw_password: str) -> bool:
    return len(raw_password.encode("utf-8")) > MAX_PASSWORD_BYTES


@lru_cache(maxsize=1)
def dummy_password_hash() -> str:
    """Hash checked when no account exists, so both login failures cost one bcrypt verify"""
    return hash_password(secrets.token_urlsafe(16))
