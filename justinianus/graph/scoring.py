"""Claim viability scoring over a case's evidence graph.

A claim's support score is read from its outgoing edges only:

- ``depends_on`` / ``grounded_by`` edges count as support
- ``weakened_by`` edges count as risk
- every other relation is ignored

    score = clamp(mean(support weights) - mean(risk weights) * risk_dampening, 0, 1)

Empty edge sets average to 0. Nothing here is cached or persisted; callers
recompute on every read.
"""

from typing import Iterable, Literal, Optional

from pydantic import BaseModel, field_validator, model_validator

from justinianus.graph.entities import GraphEdge, GraphNode, NodeKind, Relation


SUPPORT_RELATIONS = frozenset({Relation.DEPENDS_ON, Relation.GROUNDED_BY})
RISK_RELATIONS = frozenset({Relation.WEAKENED_BY})
DEFAULT_RISK_DAMPENING = 0.3

ViabilityBand = Literal["low", "medium", "high"]


class ScoringPolicy(BaseModel):
    """Policy constants for claim scoring.

    Attributes:
        risk_dampening: Fraction of the mean risk weight subtracted from support
        high_threshold: Scores at or above this are high viability
        low_threshold: Scores at or below this are low viability
    """

    risk_dampening: float = DEFAULT_RISK_DAMPENING
    high_threshold: float = 0.7
    low_threshold: float = 0.3

    @field_validator("risk_dampening", "high_threshold", "low_threshold")
    @classmethod
    def validate_unit_interval(cls, v: float) -> float:
        """Ensure policy constants are in valid range."""
        if not 0.0 <= v <= 1.0:
            raise ValueError("Scoring constants must be between 0.0 and 1.0")
        return v

    @model_validator(mode="after")
    def validate_band_order(self) -> "ScoringPolicy":
        if self.low_threshold > self.high_threshold:
            raise ValueError("low_threshold must not exceed high_threshold")
        return self

    @classmethod
    def from_settings(cls, settings) -> "ScoringPolicy":
        """Build from a Settings instance (see config_loader)."""
        return cls(**settings.scoring.model_dump())


class ClaimScore(BaseModel):
    """Viability of one claim node.

    Attributes:
        claim_id: Node id of the claim
        title: Claim title
        support: Mean weight of support edges
        risk: Mean weight of risk edges
        score: Clamped support score in [0, 1]
        band: low / medium / high viability
    """

    claim_id: str
    title: str = ""
    support: float = 0.0
    risk: float = 0.0
    score: float = 0.0
    band: ViabilityBand = "low"


def _mean_weight(edges: list[GraphEdge]) -> float:
    return sum(edge.weight for edge in edges) / max(len(edges), 1)


def _claim_components(
    claim_id: str,
    edges: Iterable[GraphEdge],
) -> tuple[float, float]:
    support_edges = []
    risk_edges = []
    for edge in edges:
        if edge.source_node_id != claim_id:
            continue
        if edge.relation in SUPPORT_RELATIONS:
            support_edges.append(edge)
        elif edge.relation in RISK_RELATIONS:
            risk_edges.append(edge)
    return _mean_weight(support_edges), _mean_weight(risk_edges)


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def compute_claim_score(
    claim_id: str,
    nodes: Iterable[GraphNode],
    edges: Iterable[GraphEdge],
    risk_dampening: float = DEFAULT_RISK_DAMPENING,
) -> float:
    """Support score in [0, 1] for one claim.

    Args:
        claim_id: Id of the claim node
        nodes: All nodes of the case
        edges: All edges of the case
        risk_dampening: Fraction of the mean risk weight subtracted from support

    Returns:
        The clamped score. An id missing from ``nodes`` scores 0.0.
    """
    if not any(node.id == claim_id for node in nodes):
        return 0.0
    support, risk = _claim_components(claim_id, edges)
    return _clamp(support - risk * risk_dampening)


def viability_band(score: float, policy: Optional[ScoringPolicy] = None) -> ViabilityBand:
    """Map a score onto low / medium / high."""
    policy = policy or ScoringPolicy()
    if score >= policy.high_threshold:
        return "high"
    if score <= policy.low_threshold:
        return "low"
    return "medium"


def score_claims(
    nodes: Iterable[GraphNode],
    edges: Iterable[GraphEdge],
    policy: Optional[ScoringPolicy] = None,
) -> list[ClaimScore]:
    """Score every claim node, strongest first."""
    policy = policy or ScoringPolicy()
    edges = list(edges)
    results = []
    for node in nodes:
        if node.kind != NodeKind.CLAIM:
            continue
        support, risk = _claim_components(node.id, edges)
        score = _clamp(support - risk * policy.risk_dampening)
        results.append(
            ClaimScore(
                claim_id=node.id,
                title=node.title,
                support=support,
                risk=risk,
                score=score,
                band=viability_band(score, policy),
            )
        )
    return sorted(results, key=lambda r: (-r.score, r.title.lower()))


def case_probability_of_success(
    nodes: Iterable[GraphNode],
    edges: Iterable[GraphEdge],
    risk_dampening: float = DEFAULT_RISK_DAMPENING,
) -> float:
    """Flat mean of claim scores; 0.0 for a case without claims."""
    nodes = list(nodes)
    edges = list(edges)
    claims = [node for node in nodes if node.kind == NodeKind.CLAIM]
    if not claims:
        return 0.0
    total = sum(
        compute_claim_score(claim.id, nodes, edges, risk_dampening)
        for claim in claims
    )
    return total / len(claims)
