"""Procedural deadline records and business-day arithmetic."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Optional

from justinianus.deadlines.criticality import Criticality, classify_deadline, days_remaining


class DeadlineStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    DRAFT_READY = "draft_ready"
    COMPLETED = "completed"
    MISSED = "missed"


class DeadlinePriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class DeadlineOrigin(str, Enum):
    PUBLICATION = "publication"
    SUMMONS = "summons"
    CONTRACT = "contract"
    MANUAL = "manual"
    AI_DETECTED = "ai_detected"


OPEN_STATUSES = frozenset({DeadlineStatus.PENDING, DeadlineStatus.IN_PROGRESS})
CLOSED_STATUSES = frozenset({DeadlineStatus.COMPLETED, DeadlineStatus.MISSED})

# Business days granted by default for each kind of deadline.
# Kinds missing here (hearing, contractual, limitation, other) have no default.
DEFAULT_TERM_DAYS: dict[str, int] = {
    "answer": 15,
    "appeal": 15,
    "motion": 5,
    "expert_examination": 30,
    "judgment_enforcement": 15,
    "challenge": 15,
    "clarification_motion": 5,
    "payment": 3,
}

DEFAULT_ALERT_DAYS = (10, 7, 5, 3, 1, 0)


def alert_key(days: int) -> str:
    return f"d{days}"


def default_alert_config(alert_days=DEFAULT_ALERT_DAYS) -> dict[str, bool]:
    return {alert_key(d): True for d in alert_days}


def adjust_to_business_day(due: date) -> date:
    """Move a Saturday or Sunday due date to the following Monday."""
    weekday = due.weekday()
    if weekday == 5:
        return due + timedelta(days=2)
    if weekday == 6:
        return due + timedelta(days=1)
    return due


def add_business_days(start: date, days: int) -> date:
    """Count ``days`` business days forward from ``start``, skipping weekends."""
    current = start
    added = 0
    while added < days:
        current += timedelta(days=1)
        if current.weekday() < 5:
            added += 1
    return current


def _parse_date(value) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def _parse_datetime(value) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


@dataclass
class Deadline:
    """A procedural deadline of one case.

    Only ``adjusted_due_date`` drives criticality; days remaining and tier
    are derived on each read and never stored.
    """

    case_id: str
    kind: str
    description: str
    adjusted_due_date: Optional[date] = None
    original_due_date: Optional[date] = None
    origin: DeadlineOrigin = DeadlineOrigin.MANUAL
    priority: DeadlinePriority = DeadlinePriority.MEDIUM
    status: DeadlineStatus = DeadlineStatus.PENDING
    war_room_active: bool = False
    war_room_activated_at: Optional[datetime] = None
    draft_auto_generated: bool = False
    draft_document_id: Optional[str] = None
    assigned_to: Optional[str] = None
    backup_assigned_to: Optional[str] = None
    alert_config: dict[str, bool] = field(default_factory=default_alert_config)
    alerts_sent: list[dict[str, Any]] = field(default_factory=list)
    completed_at: Optional[datetime] = None
    completed_by: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        if self.adjusted_due_date is None:
            raise ValueError(f"Deadline '{self.description}' has no adjusted due date")
        self.adjusted_due_date = _parse_date(self.adjusted_due_date)
        self.original_due_date = _parse_date(self.original_due_date) or self.adjusted_due_date
        self.origin = DeadlineOrigin(self.origin)
        self.priority = DeadlinePriority(self.priority)
        self.status = DeadlineStatus(self.status)

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_STATUSES

    @property
    def is_active(self) -> bool:
        """Still awaiting completion; a ready draft does not close a deadline."""
        return self.status not in CLOSED_STATUSES

    def days_remaining(self, today: Optional[date] = None) -> int:
        return days_remaining(self.adjusted_due_date, today)

    def criticality(self, today: Optional[date] = None) -> Criticality:
        return classify_deadline(self.days_remaining(today))

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "case_id": self.case_id,
            "kind": self.kind,
            "description": self.description,
            "original_due_date": self.original_due_date.isoformat(),
            "adjusted_due_date": self.adjusted_due_date.isoformat(),
            "origin": self.origin.value,
            "priority": self.priority.value,
            "status": self.status.value,
            "war_room_active": self.war_room_active,
            "war_room_activated_at": self.war_room_activated_at.isoformat() if self.war_room_activated_at else None,
            "draft_auto_generated": self.draft_auto_generated,
            "draft_document_id": self.draft_document_id,
            "assigned_to": self.assigned_to,
            "backup_assigned_to": self.backup_assigned_to,
            "alert_config": self.alert_config,
            "alerts_sent": self.alerts_sent,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "completed_by": self.completed_by,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Deadline":
        """Create from dictionary."""
        return cls(
            id=data["id"],
            case_id=data["case_id"],
            kind=data["kind"],
            description=data.get("description", ""),
            original_due_date=_parse_date(data.get("original_due_date")),
            adjusted_due_date=_parse_date(data.get("adjusted_due_date")),
            origin=DeadlineOrigin(data.get("origin", "manual")),
            priority=DeadlinePriority(data.get("priority", "medium")),
            status=DeadlineStatus(data.get("status", "pending")),
            war_room_active=data.get("war_room_active", False),
            war_room_activated_at=_parse_datetime(data.get("war_room_activated_at")),
            draft_auto_generated=data.get("draft_auto_generated", False),
            draft_document_id=data.get("draft_document_id"),
            assigned_to=data.get("assigned_to"),
            backup_assigned_to=data.get("backup_assigned_to"),
            alert_config=data.get("alert_config", default_alert_config()),
            alerts_sent=data.get("alerts_sent", []),
            completed_at=_parse_datetime(data.get("completed_at")),
            completed_by=data.get("completed_by"),
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
        )


def due_alerts(deadline: Deadline, today: Optional[date] = None) -> list[str]:
    """Alert keys that should fire now and have not been sent yet."""
    if not deadline.is_active:
        return []
    remaining = deadline.days_remaining(today)
    sent = {entry.get("alert_key") for entry in deadline.alerts_sent}
    due = []
    for key, enabled in deadline.alert_config.items():
        if not enabled or key in sent:
            continue
        threshold = int(key.lstrip("d"))
        if remaining <= threshold:
            due.append(key)
    return due


def draft_generation_due(deadline: Deadline, today: Optional[date] = None) -> bool:
    """True when a war-room-eligible open deadline still lacks an auto draft."""
    return (
        deadline.is_open
        and not deadline.draft_auto_generated
        and deadline.criticality(today).war_room_eligible
    )
