"""Artifact service: file/link attachments on problems."""

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from synapse.core.exceptions import NotFoundError
from synapse.models.contribution import Artifact
from synapse.models.problem import Problem
from synapse.models.user import User
from synapse.schemas.contribution import ArtifactCreate

logger = structlog.get_logger()


class ArtifactService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_artifacts(self, problem_id: int | None = None) -> list[Artifact]:
        query = select(Artifact).order_by(Artifact.created_at.desc(), Artifact.id.desc())
        if problem_id is not None:
            query = query.where(Artifact.problem_id == problem_id)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def create_artifact(self, data: ArtifactCreate, user: User) -> Artifact:
        if not await self.db.get(Problem, data.problem_id):
            raise NotFoundError("Problem")

        artifact = Artifact(
            problem_id=data.problem_id,
            name=data.name,
            url=data.url,
            mime_type=data.mime_type,
            created_by=user.id,
        )
        self.db.add(artifact)
        await self.db.flush()
        await self.db.refresh(artifact)
        return artifact

    async def try_create_artifact(self, data: ArtifactCreate, user: User) -> Artifact | None:
        """Best-effort insert inside a SAVEPOINT; failures are logged, not raised."""
        try:
            async with self.db.begin_nested():
                return await self.create_artifact(data, user)
        except (SQLAlchemyError, NotFoundError) as e:
            logger.error(
                "artifact_save_error",
                problem_id=data.problem_id,
                name=data.name,
                error=str(e),
            )
            return None

    async def delete_artifact(self, artifact_id: int) -> None:
        artifact = await self.db.get(Artifact, artifact_id)
        if not artifact:
            raise NotFoundError("Artifact")
        await self.db.delete(artifact)
        await self.db.flush()
