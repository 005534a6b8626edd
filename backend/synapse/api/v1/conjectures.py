"""Conjecture API routes."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from synapse.core.database import get_db
from synapse.core.security import get_current_user
from synapse.models.user import User
from synapse.schemas.contribution import ConjectureCreate, ConjectureResponse
from synapse.services.conjecture_service import ConjectureService

router = APIRouter()


@router.get("", response_model=list[ConjectureResponse])
async def list_conjectures(
    problem_id: int | None = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    service = ConjectureService(db)
    return await service.list_conjectures(problem_id)


@router.post("", response_model=ConjectureResponse, status_code=201)
async def create_conjecture(
    data: ConjectureCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    service = ConjectureService(db)
    return await service.create_conjecture(data, current_user)
