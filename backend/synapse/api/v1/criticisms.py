"""Criticism API routes."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from synapse.core.database import get_db
from synapse.core.security import get_current_user
from synapse.models.user import User
from synapse.schemas.contribution import CriticismCreate, CriticismResponse
from synapse.services.criticism_service import CriticismService

router = APIRouter()


@router.get("", response_model=list[CriticismResponse])
async def list_criticisms(
    problem_id: int | None = None,
    conjecture_id: int | None = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    service = CriticismService(db)
    return await service.list_criticisms(problem_id, conjecture_id)


@router.post("", response_model=CriticismResponse, status_code=201)
async def create_criticism(
    data: CriticismCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Record evidence or a refutation against a problem or one of its conjectures."""
    service = CriticismService(db)
    return await service.create_criticism(data, current_user)
