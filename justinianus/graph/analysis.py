"""Node strength recomputation and gap analysis for an evidence graph.

Strength adjustments per edge touching a node (weight-scaled):

- incoming ``supported_by``: +0.10
- ``corroborates`` in either direction: +0.05
- incoming ``weakened_by``: -0.15
- ``contradicts`` in either direction: -0.10
"""

from dataclasses import dataclass, field
from typing import Iterable

from justinianus.graph.entities import GraphEdge, GraphNode, NodeKind, Relation


SUPPORT_BONUS = 0.10
CORROBORATION_BONUS = 0.05
WEAKENING_PENALTY = 0.15
CONTRADICTION_PENALTY = 0.10


@dataclass
class NodeSummary:
    """Compact node reference used in analysis listings."""

    id: str
    title: str
    strength: float


@dataclass
class GraphAnalysis:
    """Result of analyze_graph.

    Attributes:
        total_nodes: Number of nodes in the case graph
        total_edges: Number of edges in the case graph
        nodes_by_kind: Node count per kind value
        mean_strength: Mean node strength (0.0 for an empty graph)
        strongest: Highest-strength nodes, strongest first
        weakest: Lowest-strength nodes, weakest first
        gaps: Missing links a reviewer should close
        recommendations: Suggested next steps
    """

    total_nodes: int = 0
    total_edges: int = 0
    nodes_by_kind: dict[str, int] = field(default_factory=dict)
    mean_strength: float = 0.0
    strongest: list[NodeSummary] = field(default_factory=list)
    weakest: list[NodeSummary] = field(default_factory=list)
    gaps: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)


def recalculate_strengths(
    nodes: Iterable[GraphNode],
    edges: Iterable[GraphEdge],
) -> dict[str, float]:
    """Recompute each node's strength from the edges around it.

    Returns:
        Mapping of node id to new strength, clamped to [0, 1]
    """
    edges = list(edges)
    strengths: dict[str, float] = {}

    for node in nodes:
        strength = node.strength
        for edge in edges:
            if edge.relation == Relation.SUPPORTED_BY and edge.target_node_id == node.id:
                strength += edge.weight * SUPPORT_BONUS
            elif edge.relation == Relation.CORROBORATES and edge.touches(node.id):
                strength += edge.weight * CORROBORATION_BONUS
            elif edge.relation == Relation.WEAKENED_BY and edge.target_node_id == node.id:
                strength -= edge.weight * WEAKENING_PENALTY
            elif edge.relation == Relation.CONTRADICTS and edge.touches(node.id):
                strength -= edge.weight * CONTRADICTION_PENALTY
        strengths[node.id] = max(0.0, min(1.0, strength))

    return strengths


def analyze_graph(
    nodes: Iterable[GraphNode],
    edges: Iterable[GraphEdge],
    top_n: int = 5,
    high_risk_threshold: float = 0.6,
) -> GraphAnalysis:
    """Summarize a case graph and flag unsupported claims and facts.

    Args:
        nodes: All nodes of the case
        edges: All edges of the case
        top_n: How many strongest/weakest nodes to list
        high_risk_threshold: Risk nodes above this strength get a mitigation note

    Returns:
        GraphAnalysis
    """
    nodes = list(nodes)
    edges = list(edges)
    analysis = GraphAnalysis(total_nodes=len(nodes), total_edges=len(edges))

    for node in nodes:
        kind = node.kind.value
        analysis.nodes_by_kind[kind] = analysis.nodes_by_kind.get(kind, 0) + 1

    if nodes:
        analysis.mean_strength = sum(n.strength for n in nodes) / len(nodes)

    ranked = sorted(nodes, key=lambda n: n.strength, reverse=True)
    analysis.strongest = [NodeSummary(n.id, n.title, n.strength) for n in ranked[:top_n]]
    analysis.weakest = [
        NodeSummary(n.id, n.title, n.strength)
        for n in reversed(ranked[-top_n:] if top_n > 0 else [])
    ]

    for claim in (n for n in nodes if n.kind == NodeKind.CLAIM):
        grounded = any(
            e.source_node_id == claim.id and e.relation == Relation.GROUNDED_BY
            for e in edges
        )
        if not grounded:
            analysis.gaps.append(f'Claim "{claim.title}" has no linked legal basis')
            analysis.recommendations.append(f'Add a legal basis for claim "{claim.title}"')

    for fact in (n for n in nodes if n.kind == NodeKind.FACT):
        proven = any(
            e.target_node_id == fact.id and e.relation == Relation.SUPPORTED_BY
            for e in edges
        )
        if not proven:
            analysis.gaps.append(f'Fact "{fact.title}" has no linked evidence')
            analysis.recommendations.append(f'Find evidence for fact "{fact.title}"')

    for risk in (n for n in nodes if n.kind == NodeKind.RISK):
        if risk.strength > high_risk_threshold:
            analysis.recommendations.append(
                f'High risk detected: "{risk.title}" - plan a mitigation strategy'
            )

    return analysis
