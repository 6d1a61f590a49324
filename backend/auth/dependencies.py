import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from sqlalchemy.orm import Session

from auth import service
from auth.errors import ForbiddenError, INVALID_CREDENTIALS_MESSAGE, UnauthorizedError
from auth.policy import AccessRule, Principal, ROLE_ADMIN, ROLE_USER, authorize, evaluate
from config.settings import settings
from db.session import get_db
from models.user import User

logger = logging.getLogger(__name__)

security = HTTPBasic(auto_error=False)

# Stand-in for an Authorization header that is not valid Basic credentials
MALFORMED_CREDENTIALS = HTTPBasicCredentials(username="", password="")


def request_path(request: Request) -> str:
    """Request path without any deployment root_path prefix"""
    path = request.scope.get("path", "/")
    root_path = request.scope.get("root_path", "")
    if root_path and path.startswith(root_path):
        path = path[len(root_path):] or "/"
    return path


def roles_for(user: User) -> frozenset[str]:
    roles = {ROLE_USER}
    if user.email.lower() in settings.get_admin_emails():
        roles.add(ROLE_ADMIN)
    return frozenset(roles)


def resolve_principal(db: Session, credentials: HTTPBasicCredentials) -> Principal:
    """
    Authenticate HTTP Basic credentials (email:password).

    Raises:
        UnauthorizedError: same message as a failed login
    """
    if credentials is MALFORMED_CREDENTIALS:
        raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE)
    user = service.login(db, credentials.username, credentials.password)
    return Principal(user=user, roles=roles_for(user))


async def basic_credentials(request: Request) -> Optional[HTTPBasicCredentials]:
    """
    HTTP Basic credentials from the Authorization header, if any.

    HTTPBasic rejects an undecodable header with its own 401 even when
    auto_error is off; that would happen before the policy runs, so a
    malformed header comes back as MALFORMED_CREDENTIALS instead.
    """
    try:
        return await security(request)
    except HTTPException:
        return MALFORMED_CREDENTIALS


def enforce_access_policy(
    request: Request,
    credentials: Optional[HTTPBasicCredentials] = Depends(basic_credentials),
    db: Session = Depends(get_db),
) -> Optional[Principal]:
    """
    Application-wide dependency gating every route through the access policy.

    Usage:
        app = FastAPI(dependencies=[Depends(enforce_access_policy)])
        app.state.access_policy = build_policy(settings.is_development())

    Public routes ignore credentials entirely. Elsewhere, credentials are
    resolved to a Principal and the matching rule decides; the principal is
    left on request.state for get_current_user.
    """
    rules: list[AccessRule] = request.app.state.access_policy
    path = request_path(request)

    principal = None
    if not evaluate(rules, path, None).allowed and credentials is not None:
        principal = resolve_principal(db, credentials)

    try:
        authorize(rules, path, principal)
    except UnauthorizedError:
        logger.warning(f"Unauthenticated request rejected: {request.method} {path}")
        raise
    except ForbiddenError:
        logger.warning(f"Access denied: {request.method} {path}")
        raise

    request.state.principal = principal
    return principal


def authorize_unrouted_request(request: Request, credentials: Optional[HTTPBasicCredentials]) -> None:
    """
    Apply the access policy to a request that matched no route (404/405).

    Route dependencies never run for such requests, so this keeps the
    catch-all rule in force: callers the policy would reject get 401/403
    rather than learning whether the path exists.

    Raises:
        UnauthorizedError: no valid credentials for a non-public path
        ForbiddenError: the caller lacks the path's role
    """
    rules: list[AccessRule] = request.app.state.access_policy
    path = request_path(request)
    if evaluate(rules, path, None).allowed:
        return
    if credentials is None:
        authorize(rules, path, None)

    # Same session source as route dependencies, including overrides
    session_factory = request.app.dependency_overrides.get(get_db, get_db)
    sessions = session_factory()
    db = next(sessions)
    try:
        principal = resolve_principal(db, credentials)
    finally:
        sessions.close()
    authorize(rules, path, principal)


def get_current_principal(request: Request) -> Principal:
    """
    Principal resolved by enforce_access_policy.

    Raises:
        UnauthorizedError: request carried no valid credentials
    """
    principal = getattr(request.state, "principal", None)
    if principal is None:
        raise UnauthorizedError()
    return principal


def get_current_user(principal: Principal = Depends(get_current_principal)) -> User:
    """
    Dependency to get current authenticated user

    Usage in route:
        @router.get("/profile")
        def profile(current_user: User = Depends(get_current_user)):
            return current_user
    """
    return principal.user
