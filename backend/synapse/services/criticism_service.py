"""Criticism service."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from synapse.core.exceptions import NotFoundError, ValidationError
from synapse.models.contribution import Conjecture, Criticism
from synapse.models.problem import Problem
from synapse.models.user import User
from synapse.schemas.contribution import CriticismCreate


class CriticismService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_criticisms(
        self, problem_id: int | None = None, conjecture_id: int | None = None
    ) -> list[Criticism]:
        query = select(Criticism).order_by(Criticism.created_at.desc(), Criticism.id.desc())
        if problem_id is not None:
            query = query.where(Criticism.problem_id == problem_id)
        if conjecture_id is not None:
            query = query.where(Criticism.conjecture_id == conjecture_id)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def create_criticism(self, data: CriticismCreate, user: User) -> Criticism:
        """Create a criticism of a problem, optionally aimed at one of its conjectures."""
        if not await self.db.get(Problem, data.problem_id):
            raise NotFoundError("Problem")
        if data.conjecture_id is not None:
            conjecture = await self.db.get(Conjecture, data.conjecture_id)
            if not conjecture:
                raise NotFoundError("Conjecture")
            if conjecture.problem_id != data.problem_id:
                raise ValidationError("Conjecture does not belong to this problem")

        criticism = Criticism(
            problem_id=data.problem_id,
            conjecture_id=data.conjecture_id,
            content=data.content,
            created_by=user.id,
        )
        self.db.add(criticism)
        await self.db.flush()
        await self.db.refresh(criticism)
        return criticism
