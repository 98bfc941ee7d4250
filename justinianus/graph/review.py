"""Lawyer review workflow for AI-proposed graph drafts."""

from __future__ import annotations

import logging
from typing import Optional

from justinianus.graph.evidence_graph import EvidenceGraph
from justinianus.graph.models import GraphDraft
from justinianus.graph.storage import DraftStore

logger = logging.getLogger(__name__)


class GraphReviewManager:
    """Coordinates pending drafts and their approval into the case graph."""

    def __init__(self, graph: EvidenceGraph, store: DraftStore | None = None):
        self.graph = graph
        self.store = store or DraftStore(graph.path)

    def queue_draft(self, draft: GraphDraft) -> str:
        draft_id = self.store.queue(draft)
        logger.info(
            f"Queued draft {draft_id} for case {draft.case_id}: "
            f"{len(draft.nodes)} nodes, {len(draft.edges)} edges"
        )
        return draft_id

    def pending_drafts(self) -> list[str]:
        """Return ids of drafts awaiting review."""
        return [path.stem for path in self.store.list_pending()]

    def fetch_draft(self, draft_id: str) -> GraphDraft | None:
        return self.store.load(draft_id)

    def approve_draft(self, draft_id: str, actor_id: Optional[str] = None) -> dict[str, str] | None:
        """Apply a draft to the graph.

        Returns:
            Mapping of temporary id to created node id, or None if no such draft
        """
        draft = self.store.load(draft_id)
        if not draft:
            return None
        id_map = self.graph.build_from_draft(draft, actor_id=actor_id)
        self.graph.recalculate_strengths()
        self.graph.save()
        if self.graph.audit is not None:
            self.graph.audit.record(
                "graph_draft_approved",
                "graph",
                "graph_draft",
                draft_id,
                actor_id=actor_id,
                after={"node_ids": list(id_map.values())},
                ai_run_id=draft.ai_run_id,
            )
        self.store.delete(draft_id)
        return id_map

    def discard_draft(self, draft_id: str, actor_id: Optional[str] = None) -> bool:
        """Discard a draft without touching the graph."""
        draft = self.store.load(draft_id)
        if not draft:
            return False
        self.store.delete(draft_id)
        if self.graph.audit is not None:
            self.graph.audit.record(
                "graph_draft_discarded",
                "graph",
                "graph_draft",
                draft_id,
                actor_id=actor_id,
                ai_run_id=draft.ai_run_id,
            )
        return True
