"""Evidence graph module: typed nodes, weighted edges, scoring and review."""

from justinianus.graph.entities import GraphEdge, GraphNode, NodeKind, Relation
from justinianus.graph.evidence_graph import EvidenceGraph
from justinianus.graph.models import DraftEdge, DraftNode, GraphDraft
from justinianus.graph.review import GraphReviewManager
from justinianus.graph.scoring import (
    ClaimScore,
    ScoringPolicy,
    case_probability_of_success,
    compute_claim_score,
    score_claims,
)

__all__ = [
    "GraphNode",
    "GraphEdge",
    "NodeKind",
    "Relation",
    "EvidenceGraph",
    "DraftNode",
    "DraftEdge",
    "GraphDraft",
    "GraphReviewManager",
    "ClaimScore",
    "ScoringPolicy",
    "compute_claim_score",
    "score_claims",
    "case_probability_of_success",
]
