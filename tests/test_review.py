"""Tests for the graph draft review workflow."""

import logging
from pathlib import Path

import pytest

from justinianus.audit import AuditLog
from justinianus.errors import GraphIntegrityError
from justinianus.graph.entities import NodeKind, Relation
from justinianus.graph.evidence_graph import EvidenceGraph
from justinianus.graph.models import DraftEdge, DraftNode, GraphDraft
from justinianus.graph.review import GraphReviewManager


@pytest.fixture
def audit(tmp_path: Path) -> AuditLog:
    return AuditLog(tmp_path / "audit.jsonl")


@pytest.fixture
def review(tmp_path: Path, audit: AuditLog) -> GraphReviewManager:
    graph = EvidenceGraph(tmp_path / "evidence_graph", "case-1", audit=audit)
    return GraphReviewManager(graph)


def make_draft(run_id: str = "run/2024-03-11 #1") -> GraphDraft:
    return GraphDraft(
        case_id="case-1",
        ai_run_id=run_id,
        nodes=[
            DraftNode("c", NodeKind.CLAIM, "Moral damages", ai_confidence=0.7),
            DraftNode("l", NodeKind.LEGAL_BASIS, "Civil Code art. 927", references={"article": "927"}),
        ],
        edges=[DraftEdge("c", "l", Relation.GROUNDED_BY, 0.8)],
        notes="Extracted from initial petition",
    )


def test_queue_and_fetch(review):
    draft = make_draft()
    draft_id = review.queue_draft(draft)

    assert review.pending_drafts() == [draft_id]
    assert "/" not in draft_id and " " not in draft_id
    assert review.fetch_draft(draft_id) == draft


def test_approve_applies_and_saves(tmp_path, review, audit):
    draft_id = review.queue_draft(make_draft())
    id_map = review.approve_draft(draft_id, actor_id="lawyer-1")

    assert set(id_map) == {"c", "l"}
    assert review.pending_drafts() == []

    reloaded = EvidenceGraph(tmp_path / "evidence_graph", "case-1")
    assert {n.title for n in reloaded.nodes()} == {"Moral damages", "Civil Code art. 927"}
    assert len(reloaded.edges(Relation.GROUNDED_BY)) == 1
    assert audit.events(entity_id=draft_id)[0].event == "graph_draft_approved"


def test_discard_leaves_graph_untouched(review):
    draft_id = review.queue_draft(make_draft())
    assert review.discard_draft(draft_id)
    assert review.pending_drafts() == []
    assert review.graph.nodes() == []


def test_unknown_draft(review):
    assert review.fetch_draft("nope") is None
    assert review.approve_draft("nope") is None
    assert not review.discard_draft("nope")


def test_approve_recalculates_strengths(tmp_path, review):
    draft = GraphDraft(
        case_id="case-1",
        ai_run_id="run-support",
        nodes=[
            DraftNode("f", NodeKind.FACT, "Contract signed on 2024-01-05"),
            DraftNode("e", NodeKind.EVIDENCE, "Signed contract copy"),
        ],
        edges=[DraftEdge("e", "f", Relation.SUPPORTED_BY, 1.0)],
    )
    id_map = review.approve_draft(review.queue_draft(draft))

    assert review.graph.get_node(id_map["f"]).strength == pytest.approx(0.6)
    assert review.graph.get_node(id_map["e"]).strength == pytest.approx(0.5)
    reloaded = EvidenceGraph(tmp_path / "evidence_graph", "case-1")
    assert reloaded.get_node(id_map["f"]).strength == pytest.approx(0.6)


def test_failed_approval_keeps_draft_and_graph(review, audit):
    draft = make_draft("run-bad")
    draft.edges.append(DraftEdge("c", "c", Relation.DEPENDS_ON, 0.5))
    draft_id = review.queue_draft(draft)

    with pytest.raises(GraphIntegrityError):
        review.approve_draft(draft_id)

    assert review.graph.nodes() == []
    assert review.graph.edges() == []
    assert review.pending_drafts() == [draft_id]
    assert audit.events() == []


def test_requeue_same_run_replaces_with_warning(review, caplog):
    first = review.queue_draft(make_draft("run-7"))
    replacement = make_draft("run-7")
    replacement.notes = "Second pass"

    with caplog.at_level(logging.WARNING, logger="justinianus.graph.storage"):
        second = review.queue_draft(replacement)

    assert first == second
    assert review.pending_drafts() == [first]
    assert review.fetch_draft(first).notes == "Second pass"
    assert "Replacing pending draft" in caplog.text
