"""Draft payloads for AI-proposed additions to an evidence graph."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from justinianus.graph.entities import DEFAULT_STRENGTH, DEFAULT_WEIGHT, NodeKind, Relation


@dataclass
class DraftNode:
    """Proposed node, addressed by a temporary id until accepted."""

    temp_id: str
    kind: NodeKind
    title: str
    content: str = ""
    references: dict[str, Any] = field(default_factory=dict)
    strength: float = DEFAULT_STRENGTH
    ai_confidence: float | None = None


@dataclass
class DraftEdge:
    """Proposed edge between two temporary node ids."""

    source_temp_id: str
    target_temp_id: str
    relation: Relation
    weight: float = DEFAULT_WEIGHT


@dataclass
class GraphDraft:
    """Batch of nodes and edges awaiting lawyer review."""

    case_id: str
    ai_run_id: str
    nodes: list[DraftNode] = field(default_factory=list)
    edges: list[DraftEdge] = field(default_factory=list)
    notes: str | None = None
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> dict:
        return {
            "case_id": self.case_id,
            "ai_run_id": self.ai_run_id,
            "notes": self.notes,
            "created_at": self.created_at,
            "nodes": [
                {**node.__dict__, "kind": NodeKind(node.kind).value} for node in self.nodes
            ],
            "edges": [
                {**edge.__dict__, "relation": Relation(edge.relation).value} for edge in self.edges
            ],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "GraphDraft":
        nodes = [
            DraftNode(**{**node, "kind": NodeKind(node["kind"])})
            for node in data.get("nodes", [])
        ]
        edges = [
            DraftEdge(**{**edge, "relation": Relation(edge["relation"])})
            for edge in data.get("edges", [])
        ]
        return cls(
            case_id=data["case_id"],
            ai_run_id=data["ai_run_id"],
            nodes=nodes,
            edges=edges,
            notes=data.get("notes"),
            created_at=data.get("created_at", datetime.now().isoformat()),
        )
