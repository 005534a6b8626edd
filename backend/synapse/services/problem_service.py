"""Problem management service."""

import structlog
from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from synapse.core.exceptions import NotFoundError
from synapse.models.contribution import Artifact, Conjecture, Criticism
from synapse.models.conversation import Conversation
from synapse.models.problem import Problem, ProblemCollaborator
from synapse.models.user import User
from synapse.schemas.problem import ProblemCreate, ProblemUpdate

logger = structlog.get_logger()


class ProblemService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_problems(self, owner: User | None = None) -> list[Problem]:
        """All problems, most recently updated first; optionally only ``owner``'s."""
        query = select(Problem).order_by(Problem.updated_at.desc(), Problem.id.desc())
        if owner is not None:
            query = query.where(Problem.created_by == owner.id)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_problem(self, problem_id: int) -> Problem:
        problem = await self.db.get(Problem, problem_id)
        if not problem:
            raise NotFoundError("Problem")
        return problem

    async def create_problem(self, data: ProblemCreate, user: User) -> Problem:
        """Create a problem and register its creator as owner collaborator."""
        problem = Problem(
            title=data.title,
            description=data.description,
            status=data.status,
            priority=data.priority,
            created_by=user.id,
        )
        self.db.add(problem)
        await self.db.flush()

        self.db.add(ProblemCollaborator(problem_id=problem.id, user_id=user.id, role="owner"))
        await self.db.flush()
        await self.db.refresh(problem)

        logger.info("problem_created", problem_id=problem.id, title=problem.title)
        return problem

    async def update_problem(self, problem_id: int, data: ProblemUpdate) -> Problem:
        problem = await self.get_problem(problem_id)
        for key, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(problem, key, value)
        problem.updated_at = func.now()
        await self.db.flush()
        await self.db.refresh(problem)
        return problem

    async def delete_problem(self, problem_id: int) -> None:
        """Delete a problem and its children; conversations are only unlinked."""
        problem = await self.get_problem(problem_id)

        await self.db.execute(
            update(Conversation)
            .where(Conversation.problem_id == problem_id)
            .values(problem_id=None)
        )
        for model in (Criticism, Conjecture, Artifact, ProblemCollaborator):
            await self.db.execute(delete(model).where(model.problem_id == problem_id))

        await self.db.delete(problem)
        await self.db.flush()
        logger.info("problem_deleted", problem_id=problem_id)

    async def link_counts(self) -> dict[int, dict[str, int]]:
        """Per-problem counts of conversations, conjectures, criticisms and artifacts."""
        result = await self.db.execute(select(Problem.id))
        counts = {
            pid: {"conversations": 0, "conjectures": 0, "criticisms": 0, "artifacts": 0}
            for pid in result.scalars().all()
        }
        if not counts:
            return counts

        for key, model in (
            ("conversations", Conversation),
            ("conjectures", Conjecture),
            ("criticisms", Criticism),
            ("artifacts", Artifact),
        ):
            rows = await self.db.execute(
                select(model.problem_id, func.count())
                .where(model.problem_id.in_(list(counts)))
                .group_by(model.problem_id)
            )
            for problem_id, n in rows.all():
                counts[problem_id][key] = n
        return counts
