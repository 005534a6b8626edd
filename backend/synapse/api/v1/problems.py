"""Problem API routes."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from synapse.core.database import get_db
from synapse.core.security import get_current_user
from synapse.models.user import User
from synapse.schemas.problem import (
    ProblemCountsResponse,
    ProblemCreate,
    ProblemResponse,
    ProblemUpdate,
)
from synapse.services.problem_service import ProblemService

router = APIRouter()


@router.get("", response_model=list[ProblemResponse])
async def list_problems(
    mine: bool = Query(False, description="Only problems created by the current user"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List problems, most recently updated first."""
    service = ProblemService(db)
    return await service.list_problems(owner=current_user if mine else None)


@router.get("/counts", response_model=ProblemCountsResponse)
async def problem_counts(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Number of conversations, conjectures, criticisms and artifacts per problem."""
    service = ProblemService(db)
    return {"counts": await service.link_counts()}


@router.post("", response_model=ProblemResponse, status_code=201)
async def create_problem(
    data: ProblemCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    service = ProblemService(db)
    return await service.create_problem(data, current_user)


@router.get("/{problem_id}", response_model=ProblemResponse)
async def get_problem(
    problem_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    service = ProblemService(db)
    return await service.get_problem(problem_id)


@router.patch("/{problem_id}", response_model=ProblemResponse)
async def update_problem(
    problem_id: int,
    data: ProblemUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update status and/or priority."""
    service = ProblemService(db)
    return await service.update_problem(problem_id, data)


@router.delete("/{problem_id}", status_code=204)
async def delete_problem(
    problem_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete a problem with its conjectures, criticisms and artifacts.

    Linked conversations are kept and become unlinked.
    """
    service = ProblemService(db)
    await service.delete_problem(problem_id)
