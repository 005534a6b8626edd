"""Shared test fixtures."""

import os
import tempfile

# Point the app at a throwaway SQLite database before it is imported.
_TEST_DIR = tempfile.mkdtemp(prefix="synapse-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/test.db"
os.environ["AUTH_ENABLED"] = "false"

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from synapse.config import settings  # noqa: E402
from synapse.core.database import engine  # noqa: E402
from synapse.main import app  # noqa: E402
from synapse.models import Base  # noqa: E402
from synapse.services.llm_provider import LLMProviderBase, LLMProviderError  # noqa: E402


class FakeLLM(LLMProviderBase):
    """Deterministic stand-in for the text-generation service."""

    model = "fake-model"

    def __init__(self, replies=None, fail=False):
        self.replies = list(replies or [])
        self.fail = fail
        self.calls = []

    async def is_available(self) -> bool:
        return True

    async def chat(self, system_prompt, messages, temperature=None, max_tokens=None) -> str:
        self.calls.append({"system_prompt": system_prompt, "messages": messages})
        if self.fail:
            raise LLMProviderError("service unavailable")
        if self.replies:
            return self.replies.pop(0)
        return "Let's work through it."


@pytest.fixture
def fake_llm(monkeypatch):
    llm = FakeLLM()
    monkeypatch.setattr("synapse.services.chat_service.get_llm_provider", lambda: llm)
    monkeypatch.setattr("synapse.services.classification_service.get_llm_provider", lambda: llm)
    monkeypatch.setattr("synapse.api.v1.ai.get_llm_provider", lambda: llm)
    return llm


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    path = tmp_path / "uploads"
    path.mkdir()
    monkeypatch.setattr(settings, "upload_dir", str(path))
    return path


@pytest.fixture
async def db_schema():
    """Fresh schema per test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def client(db_schema, fake_llm, upload_dir):
    """Async test client for the FastAPI app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
