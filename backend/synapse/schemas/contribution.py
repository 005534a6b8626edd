"""Conjecture, criticism and artifact schemas."""

from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel


def _require_text(v: str) -> str:
    if not v.strip():
        raise ValueError("Content is required")
    return v


NonEmptyText = Annotated[str, AfterValidator(_require_text)]


class ConjectureCreate(BaseModel):
    problem_id: int
    content: NonEmptyText


class ConjectureResponse(BaseModel):
    id: int
    problem_id: int
    content: str
    created_by: int
    created_at: datetime

    model_config = {"from_attributes": True}


class CriticismCreate(BaseModel):
    problem_id: int
    conjecture_id: int | None = None
    content: NonEmptyText


class CriticismResponse(BaseModel):
    id: int
    problem_id: int
    conjecture_id: int | None
    content: str
    created_by: int
    created_at: datetime

    model_config = {"from_attributes": True}


class ArtifactCreate(BaseModel):
    problem_id: int
    name: str
    url: str
    mime_type: str | None = None


class ArtifactResponse(BaseModel):
    id: int
    problem_id: int
    name: str
    url: str
    mime_type: str | None
    created_by: int
    created_at: datetime

    model_config = {"from_attributes": True}


class UploadResponse(BaseModel):
    name: str
    url: str
    mime_type: str | None = None
    artifact: ArtifactResponse | None = None  # set only when a problem was given
