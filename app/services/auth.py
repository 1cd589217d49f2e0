"""
Authentication service - credential checks and signed bearer tokens.

Tokens are HS256 JWTs carrying the user id, email, issue time and expiry.
Logout is stateless: no server-side revocation list is kept.
"""

from datetime import UTC, datetime, timedelta
from functools import lru_cache

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from app.config import settings
from app.db.models import UNKNOWN_ROLE_NAME, User
from app.exceptions import InvalidCredentialsError, InvalidTokenError
from app.models.domain import AuthResult, RoleSummary, TokenClaims
from app.observability.metrics import metrics

logger = get_logger(__name__)

_password_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    """Hash a password with Argon2id."""
    return _password_hasher.hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    """Check a password against a stored hash; malformed hashes never match."""
    try:
        return _password_hasher.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    # Verified against when the email is unknown so both failure paths cost the same
    return _password_hasher.hash("not-a-real-password")


def resolve_role(user: User) -> RoleSummary:
    """Structured role of a user; a placeholder when the user has none."""
    if user.role is None:
        return RoleSummary(id=None, name=UNKNOWN_ROLE_NAME, slug=None)
    return RoleSummary(id=user.role.id, name=user.role.name, slug=user.role.slug)


class AuthService:
    """Login, token issuance and token validation."""

    def __init__(
        self,
        db: AsyncSession,
        jwt_secret: str | None = None,
        jwt_algorithm: str | None = None,
        jwt_expire_hours: int | None = None,
    ):
        self.db = db
        self.jwt_secret = jwt_secret or settings.jwt_secret
        self.jwt_algorithm = jwt_algorithm or settings.jwt_algorithm
        self.jwt_expire_hours = jwt_expire_hours or settings.jwt_expire_hours

    async def authenticate(self, email: str, password: str) -> AuthResult:
        """
        Verify an email/password pair and issue a token.

        Unknown email, wrong password and deactivated account raise the same
        InvalidCredentialsError so callers cannot enumerate accounts.
        """
        stmt = select(User).where(User.email == email)
        result = await self.db.execute(stmt)
        user = result.scalar_one_or_none()

        if user is None:
            verify_password(_dummy_hash(), password)
            logger.warning("login_failed", reason="unknown_email")
            metrics.record_login(success=False)
            raise InvalidCredentialsError()

        if not verify_password(user.password, password):
            logger.warning("login_failed", reason="wrong_password", user_id=user.id)
            metrics.record_login(success=False)
            raise InvalidCredentialsError()

        if not user.is_active:
            logger.warning("login_failed", reason="inactive_user", user_id=user.id)
            metrics.record_login(success=False)
            raise InvalidCredentialsError()

        user.last_login_at = datetime.now(UTC)
        await self.db.commit()

        token = self.issue_token(user)
        metrics.record_login(success=True)
        logger.info("login_success", user_id=user.id, role=user.role_name)

        return AuthResult(user=user, token=token)

    def issue_token(self, user: User) -> str:
        """Create a signed, expiring token for a user."""
        now = datetime.now(UTC)
        payload = {
            "sub": str(user.id),
            "email": user.email,
            "iat": now,
            "exp": now + timedelta(hours=self.jwt_expire_hours),
        }
        return jwt.encode(payload, self.jwt_secret, algorithm=self.jwt_algorithm)

    def decode_token(self, token: str) -> TokenClaims:
        """
        Verify signature and expiry and return the claims.

        Raises:
            InvalidTokenError: malformed, tampered or expired token
        """
        try:
            payload = jwt.decode(
                token,
                self.jwt_secret,
                algorithms=[self.jwt_algorithm],
                options={"require": ["sub", "iat", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            logger.info("token_rejected", reason="expired")
            raise InvalidTokenError("Token expired") from None
        except jwt.InvalidTokenError as e:
            logger.info("token_rejected", reason="invalid", error=str(e))
            raise InvalidTokenError("Malformed token") from None

        try:
            user_id = int(payload["sub"])
        except (TypeError, ValueError):
            raise InvalidTokenError("Malformed subject") from None

        return TokenClaims(
            user_id=user_id,
            email=str(payload.get("email", "")),
            issued_at=datetime.fromtimestamp(payload["iat"], UTC),
            expires_at=datetime.fromtimestamp(payload["exp"], UTC),
        )

    async def validate_token(self, token: str) -> User:
        """
        Resolve a bearer token to its active user.

        Raises:
            InvalidTokenError: bad token, unknown user, or deactivated user
        """
        claims = self.decode_token(token)

        user = await self.db.get(User, claims.user_id)
        if user is None:
            logger.info("token_rejected", reason="unknown_user", user_id=claims.user_id)
            raise InvalidTokenError("User not found")
        if not user.is_active:
            logger.info("token_rejected", reason="inactive_user", user_id=claims.user_id)
            raise InvalidTokenError("User inactive")

        return user

    async def logout(self, token: str | None, user: User | None = None) -> None:
        """Stateless logout; the client discards its token."""
        logger.info(
            "logout",
            token_present=token is not None,
            user_id=user.id if user is not None else None,
        )
