"""Problem CRUD, cascade and count tests."""


async def _create(client, title="Memory leak in worker", **extra):
    response = await client.post("/api/v1/problems", json={"title": title, **extra})
    assert response.status_code == 201
    return response.json()


async def test_create_and_get(client):
    problem = await _create(client, description="RSS grows every hour", priority="high")
    assert problem["status"] == "open"
    assert problem["priority"] == "high"

    fetched = (await client.get(f"/api/v1/problems/{problem['id']}")).json()
    assert fetched["title"] == "Memory leak in worker"
    assert fetched["description"] == "RSS grows every hour"


async def test_title_is_required(client):
    response = await client.post("/api/v1/problems", json={"title": "   "})
    assert response.status_code == 422


async def test_update_status_and_priority(client):
    problem = await _create(client)

    response = await client.patch(
        f"/api/v1/problems/{problem['id']}",
        json={"status": "in_progress", "priority": "low"},
    )
    assert response.status_code == 200
    assert response.json()["status"] == "in_progress"
    assert response.json()["priority"] == "low"

    bad = await client.patch(f"/api/v1/problems/{problem['id']}", json={"status": "done"})
    assert bad.status_code == 422


async def test_missing_problem(client):
    assert (await client.get("/api/v1/problems/999")).status_code == 404
    assert (await client.delete("/api/v1/problems/999")).status_code == 404


async def test_delete_removes_children_and_unlinks_conversations(client):
    problem = await _create(client)
    pid = problem["id"]
    chat = (await client.post(
        "/api/v1/chat",
        json={"message": "the worker keeps growing", "problemId": pid},
    )).json()
    conjecture = (await client.post(
        "/api/v1/conjectures", json={"problem_id": pid, "content": "Cache never evicts"}
    )).json()
    await client.post(
        "/api/v1/criticisms",
        json={"problem_id": pid, "conjecture_id": conjecture["id"], "content": "Cache is bounded"},
    )
    await client.post(
        "/api/v1/artifacts",
        json={"problem_id": pid, "name": "heap.txt", "url": "/uploads/heap.txt"},
    )

    assert (await client.delete(f"/api/v1/problems/{pid}")).status_code == 204

    assert (await client.get(f"/api/v1/problems/{pid}")).status_code == 404
    assert (await client.get(f"/api/v1/conjectures?problem_id={pid}")).json() == []
    assert (await client.get(f"/api/v1/criticisms?problem_id={pid}")).json() == []
    assert (await client.get(f"/api/v1/artifacts?problem_id={pid}")).json() == []
    unlinked = (await client.get("/api/v1/conversations?unlinked=true")).json()
    assert [c["id"] for c in unlinked] == [chat["conversationId"]]
    assert unlinked[0]["problem_id"] is None


async def test_link_counts(client):
    first = await _create(client, "First problem")
    second = await _create(client, "Second problem")
    await client.post("/api/v1/conjectures", json={"problem_id": first["id"], "content": "Maybe"})
    await client.post("/api/v1/conjectures", json={"problem_id": first["id"], "content": "Or this"})
    await client.post("/api/v1/chat", json={"message": "hello", "problemId": first["id"]})

    counts = (await client.get("/api/v1/problems/counts")).json()["counts"]

    assert counts[str(first["id"])] == {
        "conversations": 1,
        "conjectures": 2,
        "criticisms": 0,
        "artifacts": 0,
    }
    assert counts[str(second["id"])]["conjectures"] == 0


async def test_list_only_mine(client):
    await _create(client)
    mine = (await client.get("/api/v1/problems?mine=true")).json()
    assert len(mine) == 1
