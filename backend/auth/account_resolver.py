"""
Federated identity reconciliation.

Email is the key that unifies accounts, but an email bound to one provider
is never reattached to another: a mismatch is a conflict, not a merge.
"""
import logging
from sqlalchemy.orm import Session

from auth.errors import ConflictError, InvalidInputError
from auth.oauth2_user_info import OAuth2UserInfo
from db.user_service import DuplicateEmailError, create_user, get_user_by_email, update_user_name
from models.user import AuthProvider, User

logger = logging.getLogger(__name__)


def resolve_federated_user(
    db: Session,
    provider: AuthProvider,
    external_id: str,
    email: str | None,
    name: str | None
) -> User:
    """
    Find or create the User behind a verified identity assertion.

    - New email: creates a federated account with no password hash
    - Same provider: refreshes the display name, keeps id/provider
    - Different provider: rejected, existing record untouched

    Raises:
        InvalidInputError: provider did not disclose an email
        ConflictError: email already registered with a different provider
    """
    if not email or not email.strip():
        raise InvalidInputError("Email not found from OAuth2 provider")

    display_name = name or email
    user = get_user_by_email(db, email)

    if user is None:
        try:
            user = create_user(
                db,
                email=email,
                name=display_name,
                provider=provider,
                provider_id=external_id,
            )
        except DuplicateEmailError:
            # Someone else created the account between lookup and insert
            raise ConflictError("Email already registered")
        logger.info(f"Created {provider.value} user: id={user.id}")
        return user

    if user.provider != provider.value:
        logger.warning(
            f"Provider conflict for user id={user.id}: "
            f"registered with {user.provider}, attempted {provider.value}"
        )
        raise ConflictError("Email already registered with a different provider")

    user = update_user_name(db, user, display_name)
    logger.info(f"Updated {provider.value} user: id={user.id}")
    return user


def resolve_user_info(db: Session, user_info: OAuth2UserInfo) -> User:
    """Resolve the account for an OAuth2UserInfo."""
    return resolve_federated_user(
        db,
        provider=user_info.provider,
        external_id=user_info.external_id,
        email=user_info.email,
        name=user_info.name,
    )
