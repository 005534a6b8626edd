"""Chat and conversation schemas.

The chat endpoint speaks camelCase on the wire (``problemId``,
``aiResponse``); snake_case field names are accepted on input too.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

_camel = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AttachedFile(BaseModel):
    model_config = _camel

    name: str
    url: str
    mime_type: str | None = None


class ChatRequest(BaseModel):
    model_config = _camel

    message: str
    problem_id: int | None = None
    conversation_id: int | None = None
    auto_link: bool = True
    attached_files: list[AttachedFile] | None = None


class ChatResponse(BaseModel):
    model_config = _camel

    conversation_id: int
    problem_id: int | None = None
    problem_linked: bool = False  # linked to an *existing* problem
    linked_problem_title: str | None = None
    problem_created: bool = False
    ai_response: str


class ConversationResponse(BaseModel):
    id: int
    problem_id: int | None
    title: str
    created_by: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class MessageResponse(BaseModel):
    id: int
    conversation_id: int
    role: str
    message_type: str
    content: str
    metadata: dict | None = None
    created_at: datetime


class ConversationDetailResponse(BaseModel):
    id: int
    problem_id: int | None
    title: str
    messages: list[MessageResponse]
    created_at: datetime
