"""Append-only audit trail for case mutations."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator, Literal, Optional

ActorType = Literal["user", "agent", "system"]


@dataclass
class AuditEvent:
    """One recorded change to a case entity."""

    event: str
    category: str
    entity_type: str
    entity_id: str
    actor_type: ActorType = "user"
    actor_id: Optional[str] = None
    before: Optional[dict[str, Any]] = None
    after: Optional[dict[str, Any]] = None
    ai_run_id: Optional[str] = None
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> dict:
        return asdict(self)


class AuditLog:
    """JSON Lines audit log, one file per case."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def record(
        self,
        event: str,
        category: str,
        entity_type: str,
        entity_id: str,
        actor_type: ActorType = "user",
        actor_id: Optional[str] = None,
        before: Optional[dict[str, Any]] = None,
        after: Optional[dict[str, Any]] = None,
        ai_run_id: Optional[str] = None,
    ) -> AuditEvent:
        """Append an event to the log."""
        entry = AuditEvent(
            event=event,
            category=category,
            entity_type=entity_type,
            entity_id=entity_id,
            actor_type=actor_type,
            actor_id=actor_id,
            before=before,
            after=after,
            ai_run_id=ai_run_id,
        )
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(entry.to_dict()))
            f.write("\n")
        return entry

    def _iter_records(self) -> Iterator[dict]:
        if not self.path.exists():
            return
        with self.path.open("r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line:
                    yield json.loads(line)

    def events(
        self,
        entity_id: Optional[str] = None,
        category: Optional[str] = None,
    ) -> list[AuditEvent]:
        """Return recorded events in insertion order, optionally filtered."""
        results = []
        for record in self._iter_records():
            if entity_id and record.get("entity_id") != entity_id:
                continue
            if category and record.get("category") != category:
                continue
            results.append(AuditEvent(**record))
        return results
