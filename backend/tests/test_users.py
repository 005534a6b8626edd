"""User profile tests."""


async def test_default_actor_profile(client):
    response = await client.get("/api/v1/users/me")
    assert response.status_code == 200
    assert response.json()["email"] == "user@example.com"


async def test_update_profile(client):
    response = await client.patch("/api/v1/users/me", json={"full_name": "  Ada Lovelace "})
    assert response.json()["full_name"] == "Ada Lovelace"

    too_short = await client.patch("/api/v1/users/me", json={"full_name": "A"})
    assert too_short.status_code == 422
