"""Load the actor's entities and build the knowledge graph."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from synapse.models.contribution import Artifact, Conjecture, Criticism
from synapse.models.conversation import Conversation
from synapse.models.user import User
from synapse.services.knowledge_graph import build_graph
from synapse.services.problem_service import ProblemService


class GraphService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def build_for_user(self, user: User) -> dict:
        """Fetch fresh entity sets and return ``{nodes, edges, counts}``."""
        problems = await ProblemService(self.db).list_problems(owner=user)
        problem_ids = [p.id for p in problems]

        conversations = await self._all(
            select(Conversation)
            .where(Conversation.created_by == user.id)
            .order_by(Conversation.id)
        )
        conjectures = await self._all(
            select(Conjecture).where(Conjecture.problem_id.in_(problem_ids)).order_by(Conjecture.id)
        )
        criticisms = await self._all(
            select(Criticism).where(Criticism.problem_id.in_(problem_ids)).order_by(Criticism.id)
        )
        artifacts = await self._all(
            select(Artifact).where(Artifact.problem_id.in_(problem_ids)).order_by(Artifact.id)
        )

        nodes, edges = build_graph(problems, conversations, conjectures, criticisms, artifacts)
        return {
            "nodes": nodes,
            "edges": edges,
            "counts": {
                "problems": len(problems),
                "conversations": len(conversations),
                "conjectures": len(conjectures),
                "criticisms": len(criticisms),
                "artifacts": len(artifacts),
            },
        }

    async def _all(self, query) -> list:
        result = await self.db.execute(query)
        return list(result.scalars().all())
