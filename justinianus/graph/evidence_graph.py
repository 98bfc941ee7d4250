"""Evidence graph storage and operations for a single case."""

import json
import logging
from collections import deque
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from justinianus.audit import AuditLog
from justinianus.errors import GraphIntegrityError, NotFoundError
from justinianus.graph.analysis import recalculate_strengths
from justinianus.graph.entities import RELATION_LABELS, GraphEdge, GraphNode, NodeKind, Relation
from justinianus.graph.models import GraphDraft

logger = logging.getLogger(__name__)

_IMMUTABLE_FIELDS = {"id", "case_id", "created_at"}


class EvidenceGraph:
    """
    Evidence graph of one case.

    Holds typed nodes (facts, evidence, claims, legal bases, risks) and
    weighted directed edges between them. Edges always connect two nodes
    of this graph. Deleting a node removes every edge touching it.
    """

    def __init__(self, path: Path | str, case_id: str, audit: Optional[AuditLog] = None):
        """Initialize evidence graph.

        Args:
            path: Directory path for graph storage
            case_id: Case the graph belongs to
            audit: Optional audit log receiving one event per mutation
        """
        self.path = Path(path)
        self.path.mkdir(parents=True, exist_ok=True)
        self.case_id = case_id
        self.audit = audit

        self._nodes: dict[str, GraphNode] = {}
        self._edges: dict[str, GraphEdge] = {}

        self.load()

    def _record(self, event: str, entity_type: str, entity_id: str, **kwargs: Any) -> None:
        if self.audit is not None:
            self.audit.record(event, "graph", entity_type, entity_id, **kwargs)

    def _claim_for_case(self, item) -> None:
        if not item.case_id:
            item.case_id = self.case_id
        elif item.case_id != self.case_id:
            raise GraphIntegrityError(
                f"{type(item).__name__} {item.id} belongs to case {item.case_id}, not {self.case_id}"
            )

    # ========== Node Operations ==========

    def add_node(self, node: GraphNode, actor_id: Optional[str] = None) -> str:
        """Add a node.

        Args:
            node: Node to add
            actor_id: User creating the node

        Returns:
            Node ID
        """
        self._claim_for_case(node)
        self._nodes[node.id] = node
        self._record(
            "graph_node_created",
            "graph_node",
            node.id,
            actor_type="agent" if node.ai_generated else "user",
            actor_id=actor_id,
            after=node.to_dict(),
            ai_run_id=node.ai_run_id,
        )
        return node.id

    def add_nodes(
        self,
        nodes: list[GraphNode],
        actor_id: Optional[str] = None,
        ai_run_id: Optional[str] = None,
    ) -> list[str]:
        """Add several nodes with a single batch audit entry."""
        for node in nodes:
            self._claim_for_case(node)
        for node in nodes:
            self._nodes[node.id] = node

        ids = [node.id for node in nodes]
        self._record(
            "graph_nodes_created_batch",
            "case",
            self.case_id,
            actor_type="agent" if any(n.ai_generated for n in nodes) else "user",
            actor_id=actor_id,
            after={"count": len(ids), "node_ids": ids},
            ai_run_id=ai_run_id,
        )
        return ids

    def get_node(self, node_id: str) -> Optional[GraphNode]:
        """Get node by ID."""
        return self._nodes.get(node_id)

    def update_node(self, node_id: str, actor_id: Optional[str] = None, **changes: Any) -> GraphNode:
        """Update fields of a node.

        Raises:
            NotFoundError: If the node does not exist
            ValueError: If a change is invalid (e.g. strength outside [0, 1])
        """
        current = self._nodes.get(node_id)
        if current is None:
            raise NotFoundError("node", node_id)

        blocked = _IMMUTABLE_FIELDS.intersection(changes)
        if blocked:
            raise ValueError(f"Cannot change {', '.join(sorted(blocked))} of a node")

        updated = replace(current, **changes, updated_at=datetime.now())
        self._nodes[node_id] = updated
        self._record(
            "graph_node_updated",
            "graph_node",
            node_id,
            actor_id=actor_id,
            before=current.to_dict(),
            after=updated.to_dict(),
        )
        return updated

    def delete_node(self, node_id: str, actor_id: Optional[str] = None) -> bool:
        """Delete a node and the edges touching it.

        Returns:
            True if deleted, False if not found
        """
        node = self._nodes.pop(node_id, None)
        if node is None:
            return False

        dropped = [e.id for e in self._edges.values() if e.touches(node_id)]
        for edge_id in dropped:
            del self._edges[edge_id]

        self._record(
            "graph_node_deleted",
            "graph_node",
            node_id,
            actor_id=actor_id,
            before={**node.to_dict(), "dropped_edges": dropped},
        )
        return True

    def nodes(self, kind: Optional[NodeKind] = None) -> list[GraphNode]:
        """Get nodes in insertion order, optionally filtered by kind."""
        return [n for n in self._nodes.values() if kind is None or n.kind == kind]

    # ========== Edge Operations ==========

    def _validate_edge(self, edge: GraphEdge) -> None:
        self._claim_for_case(edge)
        if edge.source_node_id == edge.target_node_id:
            raise GraphIntegrityError(f"Edge {edge.id} points node {edge.source_node_id} at itself")
        for endpoint in (edge.source_node_id, edge.target_node_id):
            if endpoint not in self._nodes:
                raise GraphIntegrityError(
                    f"Edge {edge.id} references unknown node {endpoint} in case {self.case_id}"
                )

    def add_edge(self, edge: GraphEdge, actor_id: Optional[str] = None) -> str:
        """Add an edge between two existing nodes.

        Raises:
            GraphIntegrityError: If an endpoint is missing or both endpoints are the same node
        """
        self._validate_edge(edge)
        self._edges[edge.id] = edge
        self._record(
            "graph_edge_created",
            "graph_edge",
            edge.id,
            actor_type="agent" if edge.ai_generated else "user",
            actor_id=actor_id,
            after=edge.to_dict(),
        )
        return edge.id

    def add_edges(
        self,
        edges: list[GraphEdge],
        actor_id: Optional[str] = None,
        ai_run_id: Optional[str] = None,
    ) -> list[str]:
        """Add several edges; nothing is added if any edge is invalid."""
        for edge in edges:
            self._validate_edge(edge)
        for edge in edges:
            self._edges[edge.id] = edge

        ids = [edge.id for edge in edges]
        self._record(
            "graph_edges_created_batch",
            "case",
            self.case_id,
            actor_type="agent" if any(e.ai_generated for e in edges) else "user",
            actor_id=actor_id,
            after={"count": len(ids)},
            ai_run_id=ai_run_id,
        )
        return ids

    def get_edge(self, edge_id: str) -> Optional[GraphEdge]:
        """Get edge by ID."""
        return self._edges.get(edge_id)

    def delete_edge(self, edge_id: str, actor_id: Optional[str] = None) -> bool:
        """Delete an edge.

        Returns:
            True if deleted, False if not found
        """
        edge = self._edges.pop(edge_id, None)
        if edge is None:
            return False
        self._record(
            "graph_edge_deleted",
            "graph_edge",
            edge_id,
            actor_id=actor_id,
            before=edge.to_dict(),
        )
        return True

    def edges(self, relation: Optional[Relation] = None) -> list[GraphEdge]:
        """Get edges, optionally filtered by relation."""
        return [e for e in self._edges.values() if relation is None or e.relation == relation]

    def outgoing(self, node_id: str, relation: Optional[Relation] = None) -> list[GraphEdge]:
        """Edges whose source is node_id."""
        return [e for e in self.edges(relation) if e.source_node_id == node_id]

    def incoming(self, node_id: str, relation: Optional[Relation] = None) -> list[GraphEdge]:
        """Edges whose target is node_id."""
        return [e for e in self.edges(relation) if e.target_node_id == node_id]

    # ========== Strength ==========

    def apply_strengths(self, strengths: dict[str, float]) -> int:
        """Write recomputed strengths onto existing nodes.

        Returns:
            Number of nodes updated (unknown ids are skipped)
        """
        updated = 0
        now = datetime.now()
        for node_id, strength in strengths.items():
            node = self._nodes.get(node_id)
            if node is None:
                logger.warning(f"Skipping strength for unknown node {node_id}")
                continue
            self._nodes[node_id] = replace(node, strength=strength, updated_at=now)
            updated += 1
        return updated

    def recalculate_strengths(self) -> dict[str, float]:
        """Recompute node strengths from the edges around each node and store them."""
        strengths = recalculate_strengths(self.nodes(), self.edges())
        self.apply_strengths(strengths)
        self._record(
            "graph_strengths_recalculated",
            "case",
            self.case_id,
            actor_type="system",
            after=strengths,
        )
        return strengths

    # ========== Drafts ==========

    def build_from_draft(self, draft: GraphDraft, actor_id: Optional[str] = None) -> dict[str, str]:
        """Insert an AI-proposed batch of nodes and edges.

        Temporary ids in the draft are mapped to freshly created node ids.

        Returns:
            Mapping of temporary id to real node id

        Raises:
            GraphIntegrityError: If the draft is for another case, or an edge
                references an undefined temporary id or points a node at itself
        """
        if draft.case_id != self.case_id:
            raise GraphIntegrityError(f"Draft is for case {draft.case_id}, not {self.case_id}")

        id_map: dict[str, str] = {}
        new_nodes = []
        for draft_node in draft.nodes:
            node = GraphNode(
                case_id=self.case_id,
                kind=draft_node.kind,
                title=draft_node.title,
                content=draft_node.content,
                references=draft_node.references,
                strength=draft_node.strength,
                ai_generated=True,
                ai_run_id=draft.ai_run_id,
                ai_confidence=draft_node.ai_confidence,
                created_by=actor_id,
            )
            id_map[draft_node.temp_id] = node.id
            new_nodes.append(node)

        new_edges = []
        for draft_edge in draft.edges:
            missing = [
                t for t in (draft_edge.source_temp_id, draft_edge.target_temp_id) if t not in id_map
            ]
            if missing:
                raise GraphIntegrityError(f"Draft edge references undefined temporary ids: {missing}")
            if draft_edge.source_temp_id == draft_edge.target_temp_id:
                raise GraphIntegrityError(f"Draft edge points {draft_edge.source_temp_id} at itself")
            new_edges.append(
                GraphEdge(
                    case_id=self.case_id,
                    source_node_id=id_map[draft_edge.source_temp_id],
                    target_node_id=id_map[draft_edge.target_temp_id],
                    relation=draft_edge.relation,
                    weight=draft_edge.weight,
                    ai_generated=True,
                )
            )

        # Every edge is checked above, so nothing is inserted or audited for a bad draft.
        self.add_nodes(new_nodes, actor_id=actor_id, ai_run_id=draft.ai_run_id)
        self.add_edges(new_edges, actor_id=actor_id, ai_run_id=draft.ai_run_id)

        logger.info(
            f"Built {len(new_nodes)} nodes and {len(new_edges)} edges from draft {draft.ai_run_id}"
        )
        return id_map

    # ========== Queries ==========

    def strongest_path(self, origin_id: str, target_id: str) -> list[str]:
        """Find the path whose product of edge weights is highest.

        Breadth-first over outgoing edges; a node is expanded at most once.

        Returns:
            Node ids from origin to target, or an empty list when unreachable
        """
        visited: set[str] = set()
        queue = deque([(origin_id, [origin_id], 1.0)])
        best_path: list[str] = []
        best_weight = 0.0

        while queue:
            node_id, path, weight = queue.popleft()

            if node_id == target_id:
                if weight > best_weight:
                    best_path, best_weight = path, weight
                continue

            if node_id in visited:
                continue
            visited.add(node_id)

            for edge in self.outgoing(node_id):
                if edge.target_node_id not in path:
                    queue.append((edge.target_node_id, path + [edge.target_node_id], weight * edge.weight))

        return best_path

    def to_visualization(self) -> dict[str, list[dict[str, Any]]]:
        """Flatten the graph for a front-end graph renderer."""
        return {
            "nodes": [
                {"id": n.id, "label": n.title, "type": n.kind.value, "strength": n.strength}
                for n in self._nodes.values()
            ],
            "edges": [
                {
                    "id": e.id,
                    "source": e.source_node_id,
                    "target": e.target_node_id,
                    "label": RELATION_LABELS[e.relation],
                    "type": e.relation.value,
                    "weight": e.weight,
                }
                for e in self._edges.values()
            ],
        }

    def stats(self, strong_threshold: float = 0.7, weak_threshold: float = 0.3) -> dict[str, Any]:
        """Get graph statistics."""
        nodes = list(self._nodes.values())
        return {
            "node_count": len(nodes),
            "edge_count": len(self._edges),
            "nodes_by_kind": {k.value: sum(1 for n in nodes if n.kind == k) for k in NodeKind},
            "mean_strength": sum(n.strength for n in nodes) / len(nodes) if nodes else 0.0,
            "strong_nodes": sum(1 for n in nodes if n.strength >= strong_threshold),
            "weak_nodes": sum(1 for n in nodes if n.strength <= weak_threshold),
            "ai_generated": sum(1 for n in nodes if n.ai_generated),
        }

    # ========== Persistence ==========

    def save(self) -> None:
        """Save graph to disk."""
        nodes_path = self.path / "nodes.json"
        with open(nodes_path, "w", encoding="utf-8") as f:
            json.dump([n.to_dict() for n in self._nodes.values()], f, indent=2)

        edges_path = self.path / "edges.json"
        with open(edges_path, "w", encoding="utf-8") as f:
            json.dump([e.to_dict() for e in self._edges.values()], f, indent=2)

        logger.info(f"Saved evidence graph for case {self.case_id}: {len(self._nodes)} nodes, {len(self._edges)} edges")

    def load(self) -> None:
        """Load graph from disk."""
        nodes_path = self.path / "nodes.json"
        if nodes_path.exists():
            with open(nodes_path, "r", encoding="utf-8") as f:
                self._nodes = {n["id"]: GraphNode.from_dict(n) for n in json.load(f)}

        edges_path = self.path / "edges.json"
        if edges_path.exists():
            with open(edges_path, "r", encoding="utf-8") as f:
                self._edges = {e["id"]: GraphEdge.from_dict(e) for e in json.load(f)}

        logger.debug(f"Loaded evidence graph for case {self.case_id}: {len(self._nodes)} nodes, {len(self._edges)} edges")
