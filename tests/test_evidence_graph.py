"""Tests for the evidence graph store."""

from pathlib import Path

import pytest

from conftest import make_edge, make_node
from justinianus.audit import AuditLog
from justinianus.errors import GraphIntegrityError, NotFoundError
from justinianus.graph.entities import GraphEdge, GraphNode, NodeKind, Relation
from justinianus.graph.evidence_graph import EvidenceGraph
from justinianus.graph.models import DraftEdge, DraftNode, GraphDraft


@pytest.fixture
def audit(tmp_path: Path) -> AuditLog:
    return AuditLog(tmp_path / "audit.jsonl")


@pytest.fixture
def graph(tmp_path: Path, audit: AuditLog) -> EvidenceGraph:
    return EvidenceGraph(tmp_path / "evidence_graph", "case-1", audit=audit)


@pytest.fixture
def populated(graph, sample_graph):
    nodes, edges = sample_graph
    graph.add_nodes(list(nodes.values()))
    graph.add_edges(edges)
    return graph, nodes, edges


def test_node_validation():
    with pytest.raises(ValueError):
        GraphNode(kind=NodeKind.FACT, title="Bad", strength=1.2)
    with pytest.raises(ValueError):
        GraphNode(kind="verdict", title="Unknown kind")
    with pytest.raises(ValueError):
        GraphEdge(source_node_id="a", target_node_id="b", weight=-0.1)


def test_add_and_filter_nodes(populated):
    graph, nodes, _ = populated
    assert len(graph.nodes()) == 5
    assert graph.nodes(NodeKind.CLAIM) == [nodes["claim"]]
    assert graph.get_node(nodes["law"].id).title == "Civil Code art. 186"
    assert graph.get_node("missing") is None


def test_node_of_other_case_is_rejected(graph):
    with pytest.raises(GraphIntegrityError):
        graph.add_node(make_node(NodeKind.FACT, "Foreign", case_id="case-2"))


def test_node_without_case_is_claimed(graph):
    node = GraphNode(kind=NodeKind.FACT, title="Loose fact")
    graph.add_node(node)
    assert graph.get_node(node.id).case_id == "case-1"


def test_edge_requires_existing_endpoints(graph):
    claim = make_node(NodeKind.CLAIM, "Claim")
    graph.add_node(claim)
    ghost = make_node(NodeKind.LEGAL_BASIS, "Not added")

    with pytest.raises(GraphIntegrityError):
        graph.add_edge(make_edge(claim, ghost, Relation.GROUNDED_BY))
    with pytest.raises(GraphIntegrityError):
        graph.add_edge(make_edge(claim, claim, Relation.DEPENDS_ON))
    assert graph.edges() == []


def test_add_edges_is_all_or_nothing(graph):
    a = make_node(NodeKind.FACT, "A")
    b = make_node(NodeKind.EVIDENCE, "B")
    ghost = make_node(NodeKind.EVIDENCE, "Ghost")
    graph.add_nodes([a, b])

    with pytest.raises(GraphIntegrityError):
        graph.add_edges([make_edge(b, a, Relation.SUPPORTED_BY), make_edge(ghost, a, Relation.SUPPORTED_BY)])
    assert graph.edges() == []


def test_outgoing_incoming_and_relation_filter(populated):
    graph, nodes, _ = populated
    claim, fact = nodes["claim"], nodes["fact"]
    assert len(graph.outgoing(claim.id)) == 3
    assert len(graph.outgoing(claim.id, Relation.WEAKENED_BY)) == 1
    assert [e.source_node_id for e in graph.incoming(fact.id)] == [claim.id, nodes["evidence"].id]
    assert len(graph.edges(Relation.SUPPORTED_BY)) == 1


def test_update_node(populated):
    graph, nodes, _ = populated
    updated = graph.update_node(nodes["fact"].id, strength=0.9, title="Undue debit confirmed")
    assert updated.strength == 0.9
    assert graph.get_node(nodes["fact"].id).title == "Undue debit confirmed"

    with pytest.raises(ValueError):
        graph.update_node(nodes["fact"].id, strength=2.0)
    with pytest.raises(ValueError):
        graph.update_node(nodes["fact"].id, id="new-id")
    with pytest.raises(NotFoundError):
        graph.update_node("missing", title="x")


def test_delete_node_cascades_to_edges(populated):
    graph, nodes, _ = populated
    assert graph.delete_node(nodes["fact"].id)
    assert graph.get_node(nodes["fact"].id) is None
    assert all(not e.touches(nodes["fact"].id) for e in graph.edges())
    assert len(graph.edges()) == 2
    assert not graph.delete_node("missing")


def test_delete_edge(populated):
    graph, _, edges = populated
    assert graph.delete_edge(edges[0].id)
    assert graph.get_edge(edges[0].id) is None
    assert not graph.delete_edge(edges[0].id)


def test_save_and_load(tmp_path, populated):
    graph, nodes, edges = populated
    graph.save()

    reloaded = EvidenceGraph(tmp_path / "evidence_graph", "case-1")
    assert reloaded.nodes() == graph.nodes()
    assert reloaded.edges() == graph.edges()


def test_recalculate_strengths_updates_nodes(populated):
    graph, nodes, _ = populated
    strengths = graph.recalculate_strengths()
    # fact: 0.6 + 0.9 * 0.10 from the supporting evidence
    assert strengths[nodes["fact"].id] == pytest.approx(0.69)
    assert graph.get_node(nodes["fact"].id).strength == pytest.approx(0.69)
    # risk: 0.7 - 0.5 * 0.15 from the claim's weakened_by edge
    assert graph.get_node(nodes["risk"].id).strength == pytest.approx(0.625)


def test_apply_strengths_skips_unknown_nodes(populated):
    graph, nodes, _ = populated
    assert graph.apply_strengths({nodes["law"].id: 0.9, "missing": 0.1}) == 1
    assert graph.get_node(nodes["law"].id).strength == 0.9


def test_build_from_draft(graph, audit):
    draft = GraphDraft(
        case_id="case-1",
        ai_run_id="run-1",
        nodes=[
            DraftNode("t1", NodeKind.CLAIM, "Refund of undue debit", ai_confidence=0.8),
            DraftNode("t2", NodeKind.LEGAL_BASIS, "Consumer Code art. 42"),
        ],
        edges=[DraftEdge("t1", "t2", Relation.GROUNDED_BY, 0.7)],
    )
    id_map = graph.build_from_draft(draft, actor_id="lawyer-1")

    assert set(id_map) == {"t1", "t2"}
    claim = graph.get_node(id_map["t1"])
    assert claim.ai_generated and claim.ai_run_id == "run-1"
    edge = graph.outgoing(id_map["t1"])[0]
    assert edge.target_node_id == id_map["t2"]
    assert edge.ai_generated
    assert "graph_nodes_created_batch" in [e.event for e in audit.events(category="graph")]


def test_build_from_draft_rejects_undefined_temp_ids(graph):
    draft = GraphDraft(
        case_id="case-1",
        ai_run_id="run-2",
        nodes=[DraftNode("t1", NodeKind.CLAIM, "Claim")],
        edges=[DraftEdge("t1", "t9", Relation.GROUNDED_BY)],
    )
    with pytest.raises(GraphIntegrityError):
        graph.build_from_draft(draft)
    assert graph.nodes() == []


def test_build_from_draft_self_loop_leaves_graph_and_audit_empty(graph, audit):
    draft = GraphDraft(
        case_id="case-1",
        ai_run_id="run-loop",
        nodes=[
            DraftNode("t1", NodeKind.CLAIM, "Claim"),
            DraftNode("t2", NodeKind.LEGAL_BASIS, "Statute"),
        ],
        edges=[
            DraftEdge("t1", "t2", Relation.GROUNDED_BY),
            DraftEdge("t2", "t2", Relation.CORROBORATES),
        ],
    )
    with pytest.raises(GraphIntegrityError, match="itself"):
        graph.build_from_draft(draft)
    assert graph.nodes() == []
    assert graph.edges() == []
    assert audit.events() == []


def test_build_from_draft_rejects_other_case(graph):
    with pytest.raises(GraphIntegrityError):
        graph.build_from_draft(GraphDraft(case_id="case-2", ai_run_id="run-3"))


def test_strongest_path_prefers_higher_weight_product(graph):
    a, b, c, d = (make_node(NodeKind.FACT, name) for name in "abcd")
    graph.add_nodes([a, b, c, d])
    graph.add_edges([
        make_edge(a, b, Relation.CORROBORATES, 0.9),
        make_edge(b, d, Relation.CORROBORATES, 0.9),
        make_edge(a, c, Relation.CORROBORATES, 0.5),
        make_edge(c, d, Relation.CORROBORATES, 0.5),
    ])
    assert graph.strongest_path(a.id, d.id) == [a.id, b.id, d.id]
    assert graph.strongest_path(d.id, a.id) == []
    assert graph.strongest_path(a.id, a.id) == [a.id]


def test_visualization_and_stats(populated):
    graph, nodes, _ = populated
    view = graph.to_visualization()
    assert {n["id"] for n in view["nodes"]} == {n.id for n in nodes.values()}
    assert view["edges"][0]["label"] == "grounded by"
    assert view["edges"][0]["type"] == "grounded_by"

    stats = graph.stats()
    assert stats["node_count"] == 5
    assert stats["edge_count"] == 4
    assert stats["nodes_by_kind"]["claim"] == 1
    assert stats["strong_nodes"] == 2  # evidence 0.8, risk 0.7
    assert stats["weak_nodes"] == 0
    assert stats["mean_strength"] == pytest.approx(0.62)


def test_mutations_are_audited(graph, audit):
    node = make_node(NodeKind.FACT, "Fact")
    graph.add_node(node, actor_id="lawyer-1")
    graph.update_node(node.id, title="Fact (revised)")
    graph.delete_node(node.id)

    events = [e.event for e in audit.events(entity_id=node.id)]
    assert events == ["graph_node_created", "graph_node_updated", "graph_node_deleted"]
