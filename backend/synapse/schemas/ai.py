"""AI assistant schemas: classification, summarization, provider status."""

from typing import Literal

from pydantic import BaseModel

MessageType = Literal["new_problem", "chat", "conjecture", "criticism", "artifact"]


class ChatTurn(BaseModel):
    role: str
    content: str


class ClassifyRequest(BaseModel):
    message: str
    chat_history: list[ChatTurn] = []
    existing_problems: list[str] = []  # problem titles


class ClassifyResponse(BaseModel):
    message_type: MessageType
    suggested_title: str | None = None  # only for new_problem


class SummarizeRequest(BaseModel):
    messages: list[ChatTurn]


class SummarizeResponse(BaseModel):
    title: str


class ProviderOption(BaseModel):
    """Available provider option for selection."""
    id: str
    label: str


class ProviderStatusResponse(BaseModel):
    provider: str
    available: bool
    model_name: str = ""
    providers: list[ProviderOption] = []
    current_provider: str = ""  # effective provider id (may differ from env if overridden)


class AIConfigUpdate(BaseModel):
    """Request to update AI config."""
    provider: str | None = None
