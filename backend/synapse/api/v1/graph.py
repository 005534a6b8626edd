"""Knowledge graph API route."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from synapse.core.database import get_db
from synapse.core.security import get_current_user
from synapse.models.user import User
from synapse.schemas.graph import GraphResponse
from synapse.services.graph_service import GraphService

router = APIRouter()


@router.get("", response_model=GraphResponse)
async def get_graph(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Nodes and edges for the force-directed knowledge graph view."""
    service = GraphService(db)
    return await service.build_for_user(current_user)
