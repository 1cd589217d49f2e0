"""
Tests for Auth API Routes.

Covers login, the current user endpoint and stateless logout.
"""

import pytest

OWNER_EMAIL = "ivan@admin.local"
FRONTEND_EMAIL = "elena@frontend.local"
SEED_PASSWORD = "password"


class TestLogin:
    """Tests for POST /login."""

    async def test_success(self, client):
        """Login returns user and token in data and mirrored at the top level."""
        response = await client.post(
            "/login", json={"email": FRONTEND_EMAIL, "password": SEED_PASSWORD}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Login successful"
        assert body["token"] == body["data"]["token"]
        assert body["user"] == body["data"]["user"]

        user = body["user"]
        assert user["email"] == FRONTEND_EMAIL
        assert user["role"]["slug"] == "frontend"
        assert user["role_name"] == "Frontend Developer"
        assert user["last_login_at"] is not None
        assert "password" not in user

    async def test_token_authenticates(self, client):
        login = await client.post("/login", json={"email": OWNER_EMAIL, "password": SEED_PASSWORD})
        token = login.json()["token"]

        response = await client.get("/user", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json()["data"]["email"] == OWNER_EMAIL

    @pytest.mark.parametrize(
        "email, password",
        [("nobody@example.com", SEED_PASSWORD), (OWNER_EMAIL, "wrong-password")],
    )
    async def test_bad_credentials_are_indistinguishable(self, client, email, password):
        response = await client.post("/login", json={"email": email, "password": password})

        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "data": None,
            "message": "Invalid credentials",
        }

    async def test_validation(self, client):
        response = await client.post("/login", json={"email": "not-an-email"})

        assert response.status_code == 422
        assert set(response.json()["errors"]) == {"email", "password"}


class TestCurrentUser:
    """Tests for GET /user."""

    async def test_returns_user(self, client, owner_headers):
        response = await client.get("/user", headers=owner_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "User retrieved successfully"
        assert body["data"]["role"] == {"id": 1, "name": "Owner", "slug": "owner"}
        assert body["data"]["role_name"] == "Owner"

    async def test_missing_token(self, client):
        response = await client.get("/user")

        assert response.status_code == 401
        assert response.json()["message"] == "Unauthenticated"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    async def test_invalid_token(self, client):
        response = await client.get("/user", headers={"Authorization": "Bearer not-a-token"})

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid or expired token"


class TestLogout:
    """Tests for POST /logout."""

    async def test_with_token(self, client, owner_headers):
        response = await client.post("/logout", headers=owner_headers)

        assert response.status_code == 200
        assert response.json()["message"] == "Logged out successfully"

    async def test_without_token(self, client):
        response = await client.post("/logout")
        assert response.status_code == 200

    async def test_token_still_valid_afterwards(self, client, owner_headers):
        await client.post("/logout", headers=owner_headers)
        assert (await client.get("/user", headers=owner_headers)).status_code == 200
