"""Tests for case workspaces."""

import json
from datetime import date

import pytest

from justinianus.cases import CaseConfig, CaseManager
from justinianus.errors import NotFoundError
from justinianus.graph.entities import GraphEdge, GraphNode, NodeKind, Relation
from justinianus.graph.models import DraftEdge, DraftNode, GraphDraft


def test_create_case_layout(case_manager, case):
    case_dir = case_manager.cases_path / case.id
    assert case.id.startswith("silva-v-banco-centra")
    assert (case_dir / "case.json").exists()
    assert (case_dir / "evidence_graph").is_dir()
    assert case_manager.audit_for(case.id).events()[0].event == "case_created"


def test_case_ids_are_unique(case_manager):
    first = case_manager.create_case("Same title")
    second = case_manager.create_case("Same title")
    assert first.id != second.id
    assert second.id == f"{first.id}-1"


def test_get_and_list_cases(case_manager, case):
    assert case_manager.get_case(case.id) == case
    assert case_manager.get_case("missing") is None
    assert [c.id for c in case_manager.list_cases()] == [case.id]


def test_list_cases_skips_broken_configs(case_manager, case):
    broken = case_manager.cases_path / "broken"
    broken.mkdir()
    (broken / "case.json").write_text("{not json", encoding="utf-8")
    assert [c.id for c in case_manager.list_cases()] == [case.id]


def test_delete_requires_confirmation(case_manager, case):
    assert not case_manager.delete_case(case.id)
    assert case_manager.get_case(case.id) is not None
    assert case_manager.delete_case(case.id, confirm=True)
    assert case_manager.get_case(case.id) is None
    assert not case_manager.delete_case(case.id, confirm=True)


def test_unknown_case_services_raise(case_manager):
    with pytest.raises(NotFoundError):
        case_manager.graph_for("missing")
    with pytest.raises(NotFoundError):
        case_manager.deadlines_for("missing")


def test_services_are_cached_per_case(case_manager, case):
    assert case_manager.graph_for(case.id) is case_manager.graph_for(case.id)
    assert case_manager.deadlines_for(case.id) is case_manager.deadlines_for(case.id)


def test_data_interface(case_manager, case):
    graph = case_manager.graph_for(case.id)
    claim = GraphNode(kind=NodeKind.CLAIM, title="Refund")
    law = GraphNode(kind=NodeKind.LEGAL_BASIS, title="Consumer Code art. 42")
    graph.add_nodes([claim, law])
    graph.add_edge(GraphEdge(source_node_id=claim.id, target_node_id=law.id, relation=Relation.GROUNDED_BY))
    case_manager.deadlines_for(case.id).create_deadline("answer", "Answer", due_date=date(2024, 3, 20))

    assert {n.id for n in case_manager.list_nodes_for_case(case.id)} == {claim.id, law.id}
    assert all(n.case_id == case.id for n in case_manager.list_nodes_for_case(case.id))
    assert len(case_manager.list_edges_for_case(case.id)) == 1
    assert [d.kind for d in case_manager.list_deadlines_for_case(case.id)] == ["answer"]


def test_graph_and_deadlines_share_case_audit(case_manager, case):
    graph = case_manager.graph_for(case.id)
    graph.add_node(GraphNode(kind=NodeKind.FACT, title="Fact"))
    case_manager.deadlines_for(case.id).create_deadline("payment", "Fees", due_date=date(2024, 3, 20))

    categories = {e.category for e in case_manager.audit_for(case.id).events()}
    assert categories == {"case", "graph", "deadlines"}


def test_review_for_approves_into_case_graph(case_manager, case):
    review = case_manager.review_for(case.id)
    draft = GraphDraft(
        case_id=case.id,
        ai_run_id="petition-extract-1",
        nodes=[
            DraftNode("c", NodeKind.CLAIM, "Refund"),
            DraftNode("l", NodeKind.LEGAL_BASIS, "Consumer Code art. 42"),
        ],
        edges=[DraftEdge("c", "l", Relation.GROUNDED_BY, 0.9)],
    )
    draft_id = review.queue_draft(draft)
    assert case_manager.review_for(case.id).pending_drafts() == [draft_id]

    id_map = review.approve_draft(draft_id, actor_id="lawyer-1")

    assert {n.id for n in case_manager.list_nodes_for_case(case.id)} == set(id_map.values())
    assert len(case_manager.list_edges_for_case(case.id)) == 1
    events = [e.event for e in case_manager.audit_for(case.id).events(category="graph")]
    assert "graph_draft_approved" in events


def test_export_case_json(tmp_path, case_manager, case):
    case_manager.graph_for(case.id).add_node(GraphNode(kind=NodeKind.FACT, title="Fact"))
    target = case_manager.export_case_json(case.id, tmp_path / "exports")

    data = json.loads(target.read_text(encoding="utf-8"))
    assert data["case"]["id"] == case.id
    assert [n["title"] for n in data["nodes"]] == ["Fact"]
    assert data["edges"] == [] and data["deadlines"] == []


def test_touch_case_updates_last_accessed(case_manager, case):
    touched = case_manager.touch_case(case.id)
    assert touched.last_accessed >= case.last_accessed
    assert case_manager.get_case(case.id).last_accessed == touched.last_accessed


def test_case_config_round_trip(tmp_path):
    config = CaseConfig(title="Souza v. Telecom", court="1st Civil Court", claim_value=15000.0)
    config.save(tmp_path / "case.json")
    assert CaseConfig.load(tmp_path / "case.json") == config
    assert config.display_name == "Souza v. Telecom"
    assert CaseConfig(id="abc").display_name == "Case abc"
