"""Case manager for multi-case workspace handling."""

import json
import logging
import re
import shutil
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from justinianus.audit import AuditLog
from justinianus.cases.case_config import CaseConfig
from justinianus.config_loader import Settings
from justinianus.deadlines.board import DeadlineBoard
from justinianus.deadlines.models import Deadline
from justinianus.errors import NotFoundError
from justinianus.graph.entities import GraphEdge, GraphNode
from justinianus.graph.evidence_graph import EvidenceGraph
from justinianus.graph.review import GraphReviewManager

logger = logging.getLogger(__name__)


class CaseManager:
    """
    Manages case workspaces.

    Each case directory holds:
    - case.json
    - evidence_graph/ (nodes, edges, pending drafts)
    - deadlines.json
    - audit.jsonl

    Graphs and deadline boards are loaded lazily and cached per case.
    """

    def __init__(self, base_path: Path | str, settings: Optional[Settings] = None):
        """Initialize case manager.

        Args:
            base_path: Base path for all data (typically 'data/')
            settings: Settings for deadline defaults; library defaults when omitted
        """
        self.base_path = Path(base_path)
        self.cases_path = self.base_path / "cases"
        self.cases_path.mkdir(parents=True, exist_ok=True)
        self.settings = settings or Settings()

        self._loaded_services: dict[tuple[str, str], Any] = {}

    def _case_dir(self, case_id: str) -> Path:
        return self.cases_path / case_id

    def _require(self, case_id: str) -> CaseConfig:
        case = self.get_case(case_id)
        if case is None:
            raise NotFoundError("case", case_id)
        return case

    def list_cases(self) -> list[CaseConfig]:
        """List all available cases.

        Returns:
            List of CaseConfig, sorted by last accessed (most recent first)
        """
        cases = []

        for case_dir in self.cases_path.iterdir():
            if case_dir.is_dir():
                config_path = case_dir / "case.json"
                if config_path.exists():
                    try:
                        cases.append(CaseConfig.load(config_path))
                    except (OSError, ValueError, KeyError) as e:
                        logger.warning(f"Failed to load case config from {config_path}: {e}")

        return sorted(cases, key=lambda c: c.last_accessed, reverse=True)

    def get_case(self, case_id: str) -> Optional[CaseConfig]:
        """Get case by ID, or None if not found."""
        config_path = self._case_dir(case_id) / "case.json"
        if config_path.exists():
            return CaseConfig.load(config_path)
        return None

    def create_case(
        self,
        title: str,
        reference: str = "",
        client: str = "",
        court: str = "",
        claim_value: Optional[float] = None,
        notes: str = "",
    ) -> CaseConfig:
        """Create a new case workspace.

        Args:
            title: Case title (e.g., "Silva v. Banco Central")
            reference: Court docket number
            client: Client name
            court: Court hearing the case
            claim_value: Amount in dispute
            notes: User notes

        Returns:
            Created CaseConfig
        """
        # Generate folder-safe ID from title
        safe_name = re.sub(r'[^\w\s-]', '', title.lower())
        safe_name = re.sub(r'[\s]+', '-', safe_name).strip('-') or "case"
        case_id = f"{safe_name[:20]}-{datetime.now().strftime('%Y%m%d')}"

        base_id = case_id
        counter = 1
        while self._case_dir(case_id).exists():
            case_id = f"{base_id}-{counter}"
            counter += 1

        case_dir = self._case_dir(case_id)
        case_dir.mkdir(parents=True)
        (case_dir / "evidence_graph").mkdir()

        config = CaseConfig(
            id=case_id,
            title=title,
            reference=reference,
            client=client,
            court=court,
            claim_value=claim_value,
            notes=notes,
            base_path=str(case_dir),
        )
        config.save(case_dir / "case.json")
        AuditLog(config.audit_path).record(
            "case_created", "case", "case", case_id, after=config.to_dict()
        )

        logger.info(f"Created case: {title} ({case_id})")
        return config

    def touch_case(self, case_id: str) -> CaseConfig:
        """Update the last accessed timestamp of a case."""
        case = self._require(case_id)
        case.last_accessed = datetime.now()
        case.save(self._case_dir(case_id) / "case.json")
        return case

    def delete_case(self, case_id: str, confirm: bool = False) -> bool:
        """Delete a case and all its data.

        Args:
            case_id: Case ID to delete
            confirm: Must be True to actually delete

        Returns:
            True if deleted, False otherwise
        """
        if not confirm:
            logger.warning("Delete not confirmed - set confirm=True to delete")
            return False

        case_dir = self._case_dir(case_id)
        if not case_dir.exists():
            logger.warning(f"Case not found: {case_id}")
            return False

        for key in [k for k in self._loaded_services if k[1] == case_id]:
            del self._loaded_services[key]

        shutil.rmtree(case_dir)
        logger.info(f"Deleted case: {case_id}")
        return True

    # ========== Per-case services ==========

    def audit_for(self, case_id: str) -> AuditLog:
        return AuditLog(self._require(case_id).audit_path)

    def graph_for(self, case_id: str) -> EvidenceGraph:
        """Get the evidence graph of a case.

        Raises:
            NotFoundError: If the case does not exist
        """
        key = ("graph", case_id)
        if key not in self._loaded_services:
            case = self._require(case_id)
            self._loaded_services[key] = EvidenceGraph(
                path=case.graph_path,
                case_id=case_id,
                audit=AuditLog(case.audit_path),
            )
        return self._loaded_services[key]

    def deadlines_for(self, case_id: str) -> DeadlineBoard:
        """Get the deadline board of a case.

        Raises:
            NotFoundError: If the case does not exist
        """
        key = ("deadlines", case_id)
        if key not in self._loaded_services:
            case = self._require(case_id)
            cfg = self.settings.deadlines
            self._loaded_services[key] = DeadlineBoard(
                path=case.base_path,
                case_id=case_id,
                audit=AuditLog(case.audit_path),
                adjust_weekends=cfg.adjust_weekends,
                alert_days=cfg.alert_days,
                default_origin=cfg.default_origin,
            )
        return self._loaded_services[key]

    def review_for(self, case_id: str) -> GraphReviewManager:
        """Get the draft review workflow of a case."""
        return GraphReviewManager(self.graph_for(case_id))

    # ========== Data interface ==========

    def list_nodes_for_case(self, case_id: str) -> list[GraphNode]:
        return self.graph_for(case_id).nodes()

    def list_edges_for_case(self, case_id: str) -> list[GraphEdge]:
        return self.graph_for(case_id).edges()

    def list_deadlines_for_case(self, case_id: str) -> list[Deadline]:
        return self.deadlines_for(case_id).list_deadlines()

    def export_case(self, case_id: str) -> dict[str, Any]:
        """Snapshot of a case as plain data (case, nodes, edges, deadlines)."""
        case = self._require(case_id)
        return {
            "case": case.to_dict(),
            "nodes": [n.to_dict() for n in self.list_nodes_for_case(case_id)],
            "edges": [e.to_dict() for e in self.list_edges_for_case(case_id)],
            "deadlines": [d.to_dict() for d in self.list_deadlines_for_case(case_id)],
        }

    def export_case_json(self, case_id: str, export_path: Path | str) -> Path:
        """Write export_case output to a JSON file in export_path."""
        export_dir = Path(export_path)
        export_dir.mkdir(parents=True, exist_ok=True)
        target = export_dir / f"{case_id}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.json"
        with open(target, "w", encoding="utf-8") as f:
            json.dump(self.export_case(case_id), f, indent=2)
        logger.info(f"Exported case to: {target}")
        return target
