"""Knowledge graph schemas."""

from typing import Literal

from pydantic import BaseModel

NodeType = Literal["problem", "conversation", "conjecture", "criticism", "artifact"]
EdgeType = Literal["discusses", "belongs_to", "criticizes", "supports", "related_to"]


class GraphNode(BaseModel):
    id: str
    type: NodeType
    label: str
    data: dict = {}


class GraphEdge(BaseModel):
    source: str
    target: str
    type: EdgeType


class GraphResponse(BaseModel):
    nodes: list[GraphNode]
    edges: list[GraphEdge]
    counts: dict[str, int] = {}
