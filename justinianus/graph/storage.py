"""Persistence for graph drafts awaiting review."""

from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path

from justinianus.graph.models import GraphDraft

logger = logging.getLogger(__name__)


class DraftStore:
    """JSON-file queue of pending graph drafts for one case."""

    def __init__(self, base_path: str | Path):
        self.base_path = Path(base_path)
        self.pending_path = self.base_path / "pending_drafts"
        self.pending_path.mkdir(parents=True, exist_ok=True)

    def draft_id(self, ai_run_id: str) -> str:
        """Convert an AI run id to a safe, unique filename stem."""
        run_hash = hashlib.md5(ai_run_id.encode()).hexdigest()[:8]
        safe_name = "".join(c if c.isalnum() or c in "._-" else "_" for c in ai_run_id)
        return f"{safe_name[:48]}_{run_hash}"

    def queue(self, draft: GraphDraft) -> str:
        """Save a draft for review and return its draft id.

        A draft already queued for the same AI run is replaced.
        """
        draft_id = self.draft_id(draft.ai_run_id)
        pending_file = self.pending_path / f"{draft_id}.json"
        if pending_file.exists():
            logger.warning(f"Replacing pending draft {draft_id} with a new draft for run {draft.ai_run_id}")
        pending_file.write_text(json.dumps(draft.to_dict(), indent=2), encoding="utf-8")
        return draft_id

    def list_pending(self) -> list[Path]:
        """Return pending draft files."""
        return sorted(self.pending_path.glob("*.json"))

    def load(self, draft_id: str) -> GraphDraft | None:
        path = self.pending_path / f"{draft_id}.json"
        if not path.exists():
            return None
        return GraphDraft.from_dict(json.loads(path.read_text(encoding="utf-8")))

    def delete(self, draft_id: str) -> None:
        path = self.pending_path / f"{draft_id}.json"
        if path.exists():
            path.unlink()
