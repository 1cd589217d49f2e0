"""
Tests for Favorite and Usage API Routes.
"""


class TestFavoriteRoutes:
    """Tests for /favorites and /ai-tools/{id}/favorite."""

    async def test_requires_authentication(self, client):
        assert (await client.get("/favorites")).status_code == 401
        assert (await client.post("/ai-tools/1/favorite")).status_code == 401

    async def test_add_list_remove(self, client, owner_headers):
        added = await client.post("/ai-tools/2/favorite", headers=owner_headers)

        assert added.status_code == 200
        assert added.json()["message"] == "Tool added to favorites"
        assert added.json()["data"]["name"] == "OpenAI API"

        listed = await client.get("/favorites", headers=owner_headers)
        assert listed.json()["message"] == "Favorites retrieved successfully"
        assert [tool["id"] for tool in listed.json()["data"]] == [2]

        removed = await client.delete("/ai-tools/2/favorite", headers=owner_headers)
        assert removed.json()["message"] == "Tool removed from favorites"
        assert (await client.get("/favorites", headers=owner_headers)).json()["data"] == []

    async def test_add_twice(self, client, owner_headers):
        await client.post("/ai-tools/2/favorite", headers=owner_headers)
        response = await client.post("/ai-tools/2/favorite", headers=owner_headers)

        assert response.status_code == 200
        listed = await client.get("/favorites", headers=owner_headers)
        assert len(listed.json()["data"]) == 1

    async def test_unknown_tool(self, client, owner_headers):
        response = await client.post("/ai-tools/999/favorite", headers=owner_headers)
        assert response.status_code == 404


class TestUsageRoutes:
    """Tests for /ai-tools/{id}/usage and /usage."""

    async def test_requires_authentication(self, client):
        assert (await client.post("/ai-tools/1/usage")).status_code == 401
        assert (await client.get("/usage")).status_code == 401

    async def test_record_without_body(self, client, owner_headers):
        response = await client.post("/ai-tools/1/usage", headers=owner_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Usage recorded successfully"
        assert body["data"]["usage_count"] == 1
        assert body["data"]["tool"]["name"] == "TensorFlow"

    async def test_record_with_metadata(self, client, owner_headers):
        response = await client.post(
            "/ai-tools/1/usage", json={"metadata": {"source": "cli"}}, headers=owner_headers
        )
        assert response.json()["data"]["metadata"] == {"source": "cli"}

    async def test_counts_accumulate(self, client, owner_headers):
        for _ in range(2):
            await client.post("/ai-tools/3/usage", headers=owner_headers)
        await client.post("/ai-tools/1/usage", headers=owner_headers)

        response = await client.get(
            "/usage", params={"order": "most_used"}, headers=owner_headers
        )

        assert response.json()["message"] == "Usage retrieved successfully"
        rows = response.json()["data"]
        assert [(row["ai_tool_id"], row["usage_count"]) for row in rows] == [(3, 2), (1, 1)]

    async def test_limit_bounds(self, client, owner_headers):
        response = await client.get("/usage", params={"limit": 0}, headers=owner_headers)
        assert response.status_code == 422
        assert "limit" in response.json()["errors"]

    async def test_unknown_tool(self, client, owner_headers):
        response = await client.post("/ai-tools/999/usage", headers=owner_headers)
        assert response.status_code == 404
