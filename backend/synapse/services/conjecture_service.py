"""Conjecture service."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from synapse.core.exceptions import NotFoundError
from synapse.models.contribution import Conjecture
from synapse.models.problem import Problem
from synapse.models.user import User
from synapse.schemas.contribution import ConjectureCreate


class ConjectureService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_conjectures(self, problem_id: int | None = None) -> list[Conjecture]:
        query = select(Conjecture).order_by(Conjecture.created_at.desc(), Conjecture.id.desc())
        if problem_id is not None:
            query = query.where(Conjecture.problem_id == problem_id)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def create_conjecture(self, data: ConjectureCreate, user: User) -> Conjecture:
        if not await self.db.get(Problem, data.problem_id):
            raise NotFoundError("Problem")

        conjecture = Conjecture(
            problem_id=data.problem_id,
            content=data.content,
            created_by=user.id,
        )
        self.db.add(conjecture)
        await self.db.flush()
        await self.db.refresh(conjecture)
        return conjecture
