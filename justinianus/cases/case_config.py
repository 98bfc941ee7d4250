"""Case configuration data model."""

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Optional
import uuid


@dataclass
class CaseConfig:
    """
    Configuration for a single case.

    Each case has its own evidence graph, deadline board and audit trail.
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    title: str = ""  # "Silva v. Banco Central"
    reference: str = ""  # court docket number
    client: str = ""
    court: str = ""
    claim_value: Optional[float] = None

    created_at: datetime = field(default_factory=datetime.now)
    last_accessed: datetime = field(default_factory=datetime.now)

    # Set when the case directory is created
    base_path: str = ""

    notes: str = ""

    @property
    def graph_path(self) -> Path:
        """Directory holding nodes.json, edges.json and pending drafts."""
        return Path(self.base_path) / "evidence_graph"

    @property
    def audit_path(self) -> Path:
        return Path(self.base_path) / "audit.jsonl"

    @property
    def display_name(self) -> str:
        """Display name for listings."""
        if self.title:
            return self.title
        if self.reference:
            return self.reference
        return f"Case {self.id}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "reference": self.reference,
            "client": self.client,
            "court": self.court,
            "claim_value": self.claim_value,
            "created_at": self.created_at.isoformat(),
            "last_accessed": self.last_accessed.isoformat(),
            "base_path": self.base_path,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CaseConfig":
        """Create from dictionary."""
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            reference=data.get("reference", ""),
            client=data.get("client", ""),
            court=data.get("court", ""),
            claim_value=data.get("claim_value"),
            created_at=datetime.fromisoformat(data["created_at"]),
            last_accessed=datetime.fromisoformat(data["last_accessed"]),
            base_path=data.get("base_path", ""),
            notes=data.get("notes", ""),
        )

    def save(self, path: Path) -> None:
        """Save config to file.

        Args:
            path: Path to case.json file
        """
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: Path) -> "CaseConfig":
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return cls.from_dict(data)
