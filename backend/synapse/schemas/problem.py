"""Problem schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, field_validator

ProblemStatus = Literal["open", "in_progress", "resolved"]
ProblemPriority = Literal["low", "medium", "high"]


class ProblemCreate(BaseModel):
    title: str
    description: str | None = None
    status: ProblemStatus = "open"
    priority: ProblemPriority = "medium"

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Title is required")
        return v.strip()


class ProblemUpdate(BaseModel):
    """Only status and priority are mutable after creation."""
    status: ProblemStatus | None = None
    priority: ProblemPriority | None = None


class ProblemResponse(BaseModel):
    id: int
    title: str
    description: str | None
    status: str
    priority: str
    created_by: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProblemCounts(BaseModel):
    conversations: int = 0
    conjectures: int = 0
    criticisms: int = 0
    artifacts: int = 0


class ProblemCountsResponse(BaseModel):
    counts: dict[int, ProblemCounts]
