"""Knowledge graph construction as a pure function of the entity sets.

Nodes: one per problem, conversation, conjecture and criticism, plus one per
distinct artifact name (case-insensitive, trimmed). Edges:

    conversation → problem   discusses
    conjecture   → problem   belongs_to
    criticism    → problem   criticizes
    artifact     → problem   supports     (one per attached problem)
    problem      → problem   related_to   (title similarity above threshold)

Edges are emitted in node-creation order. Edges pointing at a problem that is
not part of the input are dropped so the graph never references a missing node.
"""

import re
from collections.abc import Sequence

from synapse.config import settings
from synapse.services.similarity import similarity

LABEL_LENGTH = 25

_NON_ALNUM_RE = re.compile(r"[^a-zA-Z0-9]")


def _short_label(text: str) -> str:
    if len(text) > LABEL_LENGTH:
        return text[:LABEL_LENGTH] + "..."
    return text


def _problem_node_id(problem_id: int) -> str:
    return f"problem-{problem_id}"


def artifact_key(name: str) -> str:
    return name.lower().strip()


def artifact_node_id(key: str) -> str:
    return f"artifact-{_NON_ALNUM_RE.sub('-', key)}"


def _node(node_id: str, node_type: str, label: str, data: dict) -> dict:
    return {"id": node_id, "type": node_type, "label": label, "data": data}


def _edge(source: str, target: str, edge_type: str) -> dict:
    return {"source": source, "target": target, "type": edge_type}


def build_graph(
    problems: Sequence,
    conversations: Sequence,
    conjectures: Sequence,
    criticisms: Sequence,
    artifacts: Sequence,
    related_threshold: float | None = None,
) -> tuple[list[dict], list[dict]]:
    """Return ``(nodes, edges)`` for the given entities."""
    if related_threshold is None:
        related_threshold = settings.graph_related_threshold

    nodes: list[dict] = []
    edges: list[dict] = []
    problem_ids = {p.id for p in problems}

    def link(source: str, problem_id: int | None, edge_type: str) -> None:
        if problem_id is not None and problem_id in problem_ids:
            edges.append(_edge(source, _problem_node_id(problem_id), edge_type))

    for problem in problems:
        nodes.append(_node(
            _problem_node_id(problem.id),
            "problem",
            problem.title,
            {
                "id": problem.id,
                "title": problem.title,
                "description": problem.description,
                "status": problem.status,
                "priority": problem.priority,
            },
        ))

    for conversation in conversations:
        node_id = f"conversation-{conversation.id}"
        nodes.append(_node(
            node_id,
            "conversation",
            conversation.title,
            {"id": conversation.id, "title": conversation.title, "problem_id": conversation.problem_id},
        ))
        link(node_id, conversation.problem_id, "discusses")

    for conjecture in conjectures:
        node_id = f"conjecture-{conjecture.id}"
        nodes.append(_node(
            node_id,
            "conjecture",
            _short_label(conjecture.content),
            {"id": conjecture.id, "content": conjecture.content, "problem_id": conjecture.problem_id},
        ))
        link(node_id, conjecture.problem_id, "belongs_to")

    for criticism in criticisms:
        node_id = f"criticism-{criticism.id}"
        nodes.append(_node(
            node_id,
            "criticism",
            _short_label(criticism.content),
            {
                "id": criticism.id,
                "content": criticism.content,
                "problem_id": criticism.problem_id,
                "conjecture_id": criticism.conjecture_id,
            },
        ))
        link(node_id, criticism.problem_id, "criticizes")

    # Deduplicate artifacts by name; dict preserves first-seen order
    grouped: dict[str, tuple[object, list[int]]] = {}
    for artifact in artifacts:
        key = artifact_key(artifact.name)
        if key not in grouped:
            grouped[key] = (artifact, [])
        attached = grouped[key][1]
        if artifact.problem_id not in attached:
            attached.append(artifact.problem_id)

    # Distinct names can share a slug ("a.pdf", "a pdf"); suffix later ones
    artifact_ids: set[str] = set()
    for key, (artifact, attached) in grouped.items():
        node_id = base_id = artifact_node_id(key)
        suffix = 2
        while node_id in artifact_ids:
            node_id = f"{base_id}-{suffix}"
            suffix += 1
        artifact_ids.add(node_id)
        nodes.append(_node(
            node_id,
            "artifact",
            artifact.name,
            {
                "name": artifact.name,
                "url": artifact.url,
                "mime_type": artifact.mime_type,
                "problem_ids": attached,
                "is_deduplicated": len(attached) > 1,
            },
        ))
        for problem_id in attached:
            link(node_id, problem_id, "supports")

    for index, problem in enumerate(problems):
        for other in problems[index + 1:]:
            if similarity(problem.title, other.title) > related_threshold:
                edges.append(_edge(
                    _problem_node_id(problem.id),
                    _problem_node_id(other.id),
                    "related_to",
                ))

    return nodes, edges
