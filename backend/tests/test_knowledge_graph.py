"""Knowledge graph construction tests."""

from synapse.models.contribution import Artifact, Conjecture, Criticism
from synapse.models.conversation import Conversation
from synapse.models.problem import Problem
from synapse.services.knowledge_graph import artifact_node_id, build_graph


def _problem(id, title):
    return Problem(id=id, title=title, description=None, status="open", priority="medium")


def _edges_of(edges, edge_type):
    return [(e["source"], e["target"]) for e in edges if e["type"] == edge_type]


def test_empty_input():
    assert build_graph([], [], [], [], []) == ([], [])


def test_entity_nodes_and_edges():
    problems = [_problem(1, "Checkout fails")]
    conversations = [
        Conversation(id=10, title="Card declined", problem_id=1),
        Conversation(id=11, title="Unrelated chat", problem_id=None),
    ]
    conjectures = [Conjecture(id=5, problem_id=1, content="The payment gateway rejects expired tokens")]
    criticisms = [Criticism(id=7, problem_id=1, conjecture_id=5, content="Tokens are fresh")]

    nodes, edges = build_graph(problems, conversations, conjectures, criticisms, [], related_threshold=0.2)

    assert [n["id"] for n in nodes] == [
        "problem-1",
        "conversation-10",
        "conversation-11",
        "conjecture-5",
        "criticism-7",
    ]
    conjecture = next(n for n in nodes if n["type"] == "conjecture")
    assert conjecture["label"] == "The payment gateway rejec..."
    assert conjecture["data"]["content"] == "The payment gateway rejects expired tokens"

    assert _edges_of(edges, "discusses") == [("conversation-10", "problem-1")]
    assert _edges_of(edges, "belongs_to") == [("conjecture-5", "problem-1")]
    assert _edges_of(edges, "criticizes") == [("criticism-7", "problem-1")]


def test_artifacts_deduplicated_by_name():
    problems = [_problem(1, "Quarterly report"), _problem(2, "Vendor onboarding")]
    artifacts = [
        Artifact(id=1, problem_id=1, name="spec.pdf", url="/uploads/1-spec.pdf", mime_type="application/pdf"),
        Artifact(id=2, problem_id=2, name="Spec.PDF ", url="/uploads/2-spec.pdf", mime_type="application/pdf"),
        Artifact(id=3, problem_id=2, name="notes.txt", url="/uploads/3-notes.txt", mime_type="text/plain"),
    ]

    nodes, edges = build_graph(problems, [], [], [], artifacts, related_threshold=0.2)

    artifact_nodes = [n for n in nodes if n["type"] == "artifact"]
    assert [n["id"] for n in artifact_nodes] == ["artifact-spec-pdf", "artifact-notes-txt"]

    spec = artifact_nodes[0]
    assert spec["label"] == "spec.pdf"
    assert spec["data"]["url"] == "/uploads/1-spec.pdf"
    assert spec["data"]["problem_ids"] == [1, 2]
    assert spec["data"]["is_deduplicated"] is True
    assert artifact_nodes[1]["data"]["is_deduplicated"] is False

    assert _edges_of(edges, "supports") == [
        ("artifact-spec-pdf", "problem-1"),
        ("artifact-spec-pdf", "problem-2"),
        ("artifact-notes-txt", "problem-2"),
    ]


def test_related_problems_by_title_similarity():
    problems = [
        _problem(1, "Login page crashes"),
        _problem(2, "Login page crashes on Safari"),
        _problem(3, "Budget planning"),
    ]
    _, edges = build_graph(problems, [], [], [], [], related_threshold=0.2)
    assert _edges_of(edges, "related_to") == [("problem-1", "problem-2")]


def test_edges_to_unknown_problems_are_dropped():
    problems = [_problem(1, "Only problem")]
    conversations = [Conversation(id=3, title="Orphan", problem_id=99)]
    artifacts = [Artifact(id=4, problem_id=99, name="a.txt", url="/uploads/a.txt", mime_type=None)]

    nodes, edges = build_graph(problems, conversations, [], [], artifacts, related_threshold=0.2)

    assert "conversation-3" in [n["id"] for n in nodes]
    node_ids = {n["id"] for n in nodes}
    for edge in edges:
        assert edge["source"] in node_ids
        assert edge["target"] in node_ids
    assert edges == []


def test_artifact_node_id_replaces_non_alphanumerics():
    assert artifact_node_id("my file (v2).xlsx") == "artifact-my-file--v2--xlsx"


def test_artifact_names_with_same_slug_get_distinct_ids():
    problems = [_problem(1, "Paper review")]
    artifacts = [
        Artifact(id=1, problem_id=1, name="a.pdf", url="/uploads/1-a.pdf", mime_type=None),
        Artifact(id=2, problem_id=1, name="a pdf", url="/uploads/2-a_pdf", mime_type=None),
    ]

    nodes, edges = build_graph(problems, [], [], [], artifacts, related_threshold=0.2)

    assert [n["id"] for n in nodes] == ["problem-1", "artifact-a-pdf", "artifact-a-pdf-2"]
    assert [n["label"] for n in nodes[1:]] == ["a.pdf", "a pdf"]
    assert _edges_of(edges, "supports") == [
        ("artifact-a-pdf", "problem-1"),
        ("artifact-a-pdf-2", "problem-1"),
    ]
