"""Node and edge data models for the evidence graph."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional
import uuid


DEFAULT_STRENGTH = 0.5
DEFAULT_WEIGHT = 0.5


class NodeKind(str, Enum):
    """Kinds of node in a case's evidence graph."""
    FACT = "fact"
    EVIDENCE = "evidence"
    CLAIM = "claim"  # relief sought (pedido)
    LEGAL_BASIS = "legal_basis"
    RISK = "risk"
    ALLEGATION = "allegation"


class Relation(str, Enum):
    """Directed relations between graph nodes."""
    # Support
    SUPPORTED_BY = "supported_by"
    DEPENDS_ON = "depends_on"
    GROUNDED_BY = "grounded_by"

    # Attack
    WEAKENED_BY = "weakened_by"
    CONTRADICTS = "contradicts"

    # Agreement between facts/evidence
    CORROBORATES = "corroborates"


NODE_KIND_LABELS = {
    NodeKind.FACT: "Fact",
    NodeKind.EVIDENCE: "Evidence",
    NodeKind.CLAIM: "Claim",
    NodeKind.LEGAL_BASIS: "Legal basis",
    NodeKind.RISK: "Risk",
    NodeKind.ALLEGATION: "Allegation",
}

RELATION_LABELS = {
    Relation.SUPPORTED_BY: "supported by",
    Relation.DEPENDS_ON: "depends on",
    Relation.GROUNDED_BY: "grounded by",
    Relation.WEAKENED_BY: "weakened by",
    Relation.CONTRADICTS: "contradicts",
    Relation.CORROBORATES: "corroborates",
}


def _check_unit_interval(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be between 0.0 and 1.0, got {value}")


@dataclass
class GraphNode:
    """A fact, piece of evidence, claim, legal basis or risk in one case."""

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    case_id: str = ""
    kind: NodeKind = NodeKind.FACT
    title: str = ""
    content: str = ""
    references: dict[str, Any] = field(default_factory=dict)
    strength: float = DEFAULT_STRENGTH
    ai_generated: bool = False
    ai_run_id: Optional[str] = None
    ai_confidence: Optional[float] = None
    created_by: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        self.kind = NodeKind(self.kind)
        _check_unit_interval("strength", self.strength)
        if self.ai_confidence is not None:
            _check_unit_interval("ai_confidence", self.ai_confidence)

    @property
    def is_claim(self) -> bool:
        return self.kind == NodeKind.CLAIM

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "case_id": self.case_id,
            "kind": self.kind.value,
            "title": self.title,
            "content": self.content,
            "references": self.references,
            "strength": self.strength,
            "ai_generated": self.ai_generated,
            "ai_run_id": self.ai_run_id,
            "ai_confidence": self.ai_confidence,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "GraphNode":
        """Create from dictionary."""
        return cls(
            id=data["id"],
            case_id=data.get("case_id", ""),
            kind=NodeKind(data["kind"]),
            title=data.get("title", ""),
            content=data.get("content", ""),
            references=data.get("references", {}),
            strength=data.get("strength", DEFAULT_STRENGTH),
            ai_generated=data.get("ai_generated", False),
            ai_run_id=data.get("ai_run_id"),
            ai_confidence=data.get("ai_confidence"),
            created_by=data.get("created_by"),
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
        )


@dataclass
class GraphEdge:
    """A weighted, directed relation between two nodes of the same case."""

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    case_id: str = ""
    source_node_id: str = ""
    target_node_id: str = ""
    relation: Relation = Relation.SUPPORTED_BY
    weight: float = DEFAULT_WEIGHT
    notes: str = ""
    ai_generated: bool = False
    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        self.relation = Relation(self.relation)
        _check_unit_interval("weight", self.weight)

    def touches(self, node_id: str) -> bool:
        """True when either endpoint is node_id."""
        return self.source_node_id == node_id or self.target_node_id == node_id

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "case_id": self.case_id,
            "source_node_id": self.source_node_id,
            "target_node_id": self.target_node_id,
            "relation": self.relation.value,
            "weight": self.weight,
            "notes": self.notes,
            "ai_generated": self.ai_generated,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "GraphEdge":
        """Create from dictionary."""
        return cls(
            id=data["id"],
            case_id=data.get("case_id", ""),
            source_node_id=data["source_node_id"],
            target_node_id=data["target_node_id"],
            relation=Relation(data["relation"]),
            weight=data.get("weight", DEFAULT_WEIGHT),
            notes=data.get("notes", ""),
            ai_generated=data.get("ai_generated", False),
            created_at=datetime.fromisoformat(data["created_at"]),
        )
