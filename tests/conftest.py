"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest

from justinianus.cases import CaseManager
from justinianus.graph.entities import GraphEdge, GraphNode, NodeKind, Relation

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent


@pytest.fixture
def project_root() -> Path:
    """Return project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def config_path(project_root: Path) -> Path:
    """Return path to config.yaml."""
    return project_root / "config" / "config.yaml"


@pytest.fixture
def case_manager(tmp_path: Path) -> CaseManager:
    """Case manager rooted in a temporary data directory."""
    return CaseManager(tmp_path / "data")


@pytest.fixture
def case(case_manager: CaseManager):
    """A freshly created case."""
    return case_manager.create_case("Silva v. Banco Central", client="Maria Silva")


def make_node(kind: NodeKind, title: str, strength: float = 0.5, case_id: str = "case-1") -> GraphNode:
    return GraphNode(case_id=case_id, kind=kind, title=title, strength=strength)


def make_edge(source: GraphNode, target: GraphNode, relation: Relation, weight: float = 0.5) -> GraphEdge:
    return GraphEdge(
        case_id=source.case_id,
        source_node_id=source.id,
        target_node_id=target.id,
        relation=relation,
        weight=weight,
    )


@pytest.fixture
def sample_graph():
    """Small case graph: one claim grounded twice and weakened once.

    Returns a dict of nodes by short name plus the edge list.
    """
    claim = make_node(NodeKind.CLAIM, "Moral damages")
    law = make_node(NodeKind.LEGAL_BASIS, "Civil Code art. 186")
    fact = make_node(NodeKind.FACT, "Undue debit on account", strength=0.6)
    evidence = make_node(NodeKind.EVIDENCE, "Bank statement", strength=0.8)
    risk = make_node(NodeKind.RISK, "Limitation period", strength=0.7)

    edges = [
        make_edge(claim, law, Relation.GROUNDED_BY, 0.8),
        make_edge(claim, fact, Relation.DEPENDS_ON, 0.6),
        make_edge(claim, risk, Relation.WEAKENED_BY, 0.5),
        make_edge(evidence, fact, Relation.SUPPORTED_BY, 0.9),
    ]
    nodes = {"claim": claim, "law": law, "fact": fact, "evidence": evidence, "risk": risk}
    return nodes, edges
