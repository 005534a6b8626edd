"""Chat flow tests: conversations, auto-linking, problem creation, attachments."""

import pytest

from synapse.config import settings


async def _chat(client, message, **extra):
    return await client.post("/api/v1/chat", json={"message": message, **extra})


async def test_first_message_creates_conversation_and_problem(client, fake_llm):
    response = await _chat(client, "Why does the nightly backup job fail?")
    assert response.status_code == 200
    data = response.json()
    assert data["problemCreated"] is True
    assert data["problemLinked"] is False
    assert data["linkedProblemTitle"] is None
    assert data["aiResponse"] == "Let's work through it."

    problems = (await client.get("/api/v1/problems")).json()
    assert len(problems) == 1
    assert problems[0]["id"] == data["problemId"]
    assert problems[0]["title"] == "does nightly backup fail?"
    assert problems[0]["description"] == "Why does the nightly backup job fail?"

    conversations = (await client.get(f"/api/v1/conversations?problem_id={data['problemId']}")).json()
    assert [c["id"] for c in conversations] == [data["conversationId"]]
    assert conversations[0]["title"] == "Why does the nightly backup job fail?"

    messages = (await client.get(f"/api/v1/conversations/{data['conversationId']}/messages")).json()
    assert [m["role"] for m in messages] == ["user", "assistant"]
    assert messages[1]["metadata"] == {"provider": "FakeLLM", "model": "fake-model"}


async def test_follow_up_stays_on_linked_problem(client, fake_llm):
    first = (await _chat(client, "Why does the nightly backup job fail?")).json()
    second = await _chat(client, "It started last Tuesday", conversationId=first["conversationId"])

    data = second.json()
    assert data["conversationId"] == first["conversationId"]
    assert data["problemId"] == first["problemId"]
    assert data["problemCreated"] is False
    assert len((await client.get("/api/v1/problems")).json()) == 1

    # full history is sent to the assistant
    assert [m["role"] for m in fake_llm.calls[-1]["messages"]] == ["user", "assistant", "user"]
    assert "does nightly backup fail?" in fake_llm.calls[-1]["system_prompt"]


async def test_message_links_to_matching_problem(client, fake_llm):
    created = await client.post(
        "/api/v1/problems",
        json={"title": "Database timeout errors", "description": "Queries hang under load"},
    )
    problem = created.json()

    data = (await _chat(client, "why do queries hang every evening")).json()

    assert data["problemLinked"] is True
    assert data["linkedProblemTitle"] == "Database timeout errors"
    assert data["problemId"] == problem["id"]
    assert data["problemCreated"] is False
    assert "Database timeout errors" in fake_llm.calls[-1]["system_prompt"]
    assert len((await client.get("/api/v1/problems")).json()) == 1


async def test_explicit_problem_skips_auto_linking(client, fake_llm):
    problem = (await client.post("/api/v1/problems", json={"title": "Flaky CI"})).json()

    data = (await _chat(client, "totally unrelated words here", problemId=problem["id"])).json()

    assert data["problemId"] == problem["id"]
    assert data["problemLinked"] is False
    assert data["problemCreated"] is False
    conversations = (await client.get(f"/api/v1/conversations?problem_id={problem['id']}")).json()
    assert len(conversations) == 1


async def test_auto_link_disabled_leaves_conversation_unlinked(client, fake_llm):
    data = (await _chat(client, "Just thinking out loud", autoLink=False)).json()

    assert data["problemId"] is None
    assert data["problemCreated"] is False
    unlinked = (await client.get("/api/v1/conversations?unlinked=true")).json()
    assert [c["id"] for c in unlinked] == [data["conversationId"]]


async def test_creation_threshold_can_hold_back_problem(client, fake_llm, monkeypatch):
    monkeypatch.setattr(settings, "problem_creation_min_signals", 4)

    data = (await _chat(client, "ok thanks")).json()

    assert data["problemCreated"] is False
    assert data["problemId"] is None
    assert (await client.get("/api/v1/problems")).json() == []


async def test_blank_message_is_rejected(client, fake_llm):
    response = await _chat(client, "   ")
    assert response.status_code == 400
    assert fake_llm.calls == []


async def test_unknown_problem_or_conversation(client, fake_llm):
    assert (await _chat(client, "hello there", problemId=999)).status_code == 404
    assert (await _chat(client, "hello there", conversationId=999)).status_code == 404


async def test_assistant_failure_returns_bad_gateway(client, fake_llm):
    fake_llm.fail = True

    response = await _chat(client, "Why does the build break?")

    assert response.status_code == 502
    assert (await client.get("/api/v1/conversations?unlinked=true")).json() == []
    assert (await client.get("/api/v1/problems")).json() == []


async def test_empty_reply_uses_fallback_text(client, fake_llm):
    fake_llm.replies = [""]
    data = (await _chat(client, "Anyone there?")).json()
    assert data["aiResponse"] == "I'm sorry, I couldn't generate a response."


async def test_attachments_are_merged_and_saved_as_artifacts(client, fake_llm):
    upload = await client.post(
        "/api/v1/artifacts/upload",
        files={"file": ("notes.txt", b"disk usage at 97%", "text/plain")},
    )
    assert upload.status_code == 200
    uploaded = upload.json()
    assert uploaded["artifact"] is None

    data = (await _chat(
        client,
        "Why is the backup volume filling up?",
        attachedFiles=[{"name": "notes.txt", "url": uploaded["url"], "mimeType": "text/plain"}],
    )).json()

    artifacts = (await client.get(f"/api/v1/artifacts?problem_id={data['problemId']}")).json()
    assert [a["name"] for a in artifacts] == ["notes.txt"]
    assert artifacts[0]["url"] == uploaded["url"]

    user_message = fake_llm.calls[-1]["messages"][0]["content"]
    assert "--- Attached File: notes.txt ---\ndisk usage at 97%\n--- End of File ---" in user_message


async def test_conversation_detail_and_delete(client, fake_llm):
    data = (await _chat(client, "Why does the nightly backup job fail?")).json()
    conversation_id = data["conversationId"]

    detail = (await client.get(f"/api/v1/conversations/{conversation_id}")).json()
    assert detail["problem_id"] == data["problemId"]
    assert [m["role"] for m in detail["messages"]] == ["user", "assistant"]

    assert (await client.delete(f"/api/v1/conversations/{conversation_id}")).status_code == 204
    assert (await client.get(f"/api/v1/conversations/{conversation_id}")).status_code == 404


async def test_listing_conversations_requires_a_filter(client):
    response = await client.get("/api/v1/conversations")
    assert response.status_code == 400


@pytest.mark.parametrize("strategy", ["overlap", "similarity"])
async def test_matching_strategy_is_configurable(client, fake_llm, monkeypatch, strategy):
    monkeypatch.setattr(settings, "autolink_match_strategy", strategy)
    problem = (await client.post("/api/v1/problems", json={"title": "Flaky integration tests"})).json()

    data = (await _chat(client, "flaky integration tests")).json()

    assert data["problemLinked"] is True
    assert data["problemId"] == problem["id"]
