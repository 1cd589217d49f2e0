"""
Auth API routes - login, current user and logout.

Login mirrors `user` and `token` at the top level of the envelope for
clients that read them there.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends

from app.api.dependencies import (
    get_auth_service,
    get_bearer_token,
    get_current_user,
    get_optional_user,
)
from app.api.serializers import envelope, serialize_user
from app.db.models import User
from app.models.api import LoginRequest
from app.services.auth import AuthService

router = APIRouter(tags=["auth"])


@router.post("/login")
async def login(
    request: LoginRequest,
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> dict[str, Any]:
    """
    Exchange email and password for a bearer token.

    Unknown email and wrong password both answer 401 "Invalid credentials".
    """
    result = await auth.authenticate(request.email, request.password)
    user = serialize_user(result.user)
    return envelope(
        {"user": user, "token": result.token},
        "Login successful",
        user=user,
        token=result.token,
    )


@router.get("/user")
async def current_user(user: Annotated[User, Depends(get_current_user)]) -> dict[str, Any]:
    """Current user with structured role and role_name."""
    data = serialize_user(user)
    return envelope(data, "User retrieved successfully", user=data)


@router.post("/logout")
async def logout(
    auth: Annotated[AuthService, Depends(get_auth_service)],
    token: Annotated[str | None, Depends(get_bearer_token)],
    user: Annotated[User | None, Depends(get_optional_user)],
) -> dict[str, Any]:
    """Stateless logout; always succeeds."""
    await auth.logout(token, user)
    return envelope(None, "Logged out successfully")
