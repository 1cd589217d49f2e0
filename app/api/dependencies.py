"""
FastAPI Dependencies - Authentication, authorization and services.

Bearer tokens are resolved to active users; permission checks go through
the user's role.
"""

from collections.abc import Awaitable, Callable

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from app.db.models import User
from app.db.session import get_read_db, get_write_db
from app.exceptions import AuthenticationError, AuthorizationError, InvalidTokenError
from app.services.auth import AuthService
from app.services.favorites import FavoriteService
from app.services.taxonomy import TaxonomyService
from app.services.tools import ToolService
from app.services.usage import UsageService

logger = get_logger(__name__)

# Bearer token scheme; missing headers are reported by get_current_user
bearer_scheme = HTTPBearer(auto_error=False)


def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str | None:
    """Raw bearer token from the Authorization header, if any."""
    if credentials is None:
        return None
    return credentials.credentials


async def get_current_user(
    token: str | None = Depends(get_bearer_token),
    db: AsyncSession = Depends(get_write_db),
) -> User:
    """
    FastAPI dependency resolving the bearer token to an active user.

    Usage:
        @router.get("/user")
        async def current_user(user: User = Depends(get_current_user)):
            ...

    Raises:
        AuthenticationError: No bearer token was sent
        InvalidTokenError: Token is malformed, expired or names no active user
    """
    if token is None:
        raise AuthenticationError("Unauthenticated")

    return await AuthService(db).validate_token(token)


async def get_optional_user(
    token: str | None = Depends(get_bearer_token),
    db: AsyncSession = Depends(get_write_db),
) -> User | None:
    """Like get_current_user, but anonymous and invalid tokens yield None."""
    if token is None:
        return None
    try:
        return await AuthService(db).validate_token(token)
    except InvalidTokenError:
        return None


def require_permission(permission: str) -> Callable[..., Awaitable[User]]:
    """
    Create dependency that requires the current user's role to grant a permission.

    Usage:
        @router.post("/tags", dependencies=[Depends(require_permission("manage_taxonomy"))])

    Args:
        permission: Required permission ("*" in the role's list grants all)

    Returns:
        Dependency function that returns the authorized user
    """

    async def _check_permission(user: User = Depends(get_current_user)) -> User:
        if not user.has_permission(permission):
            logger.warning(
                "permission_denied",
                user_id=user.id,
                role=user.role_name,
                required_permission=permission,
            )
            raise AuthorizationError(permission)
        return user

    return _check_permission


# ============================================================================
# Services
# ============================================================================


def get_tool_service(db: AsyncSession = Depends(get_write_db)) -> ToolService:
    return ToolService(db)


def get_tool_reader(db: AsyncSession = Depends(get_read_db)) -> ToolService:
    """Tool service on the read replica, for listings and metadata."""
    return ToolService(db)


def get_taxonomy_service(db: AsyncSession = Depends(get_write_db)) -> TaxonomyService:
    return TaxonomyService(db)


def get_favorite_service(db: AsyncSession = Depends(get_write_db)) -> FavoriteService:
    return FavoriteService(db)


def get_usage_service(db: AsyncSession = Depends(get_write_db)) -> UsageService:
    return UsageService(db)


def get_auth_service(db: AsyncSession = Depends(get_write_db)) -> AuthService:
    return AuthService(db)
