"""Deadline register for one case."""

import json
import logging
from dataclasses import replace
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional, Sequence

from justinianus.audit import AuditLog
from justinianus.deadlines.criticality import days_remaining, suggest_priority
from justinianus.deadlines.models import (
    DEFAULT_ALERT_DAYS,
    DEFAULT_TERM_DAYS,
    Deadline,
    DeadlineOrigin,
    DeadlinePriority,
    DeadlineStatus,
    add_business_days,
    adjust_to_business_day,
    default_alert_config,
    draft_generation_due,
    due_alerts,
)
from justinianus.errors import NotFoundError

logger = logging.getLogger(__name__)

_IMMUTABLE_FIELDS = {"id", "case_id", "created_at"}

# Board columns per criticality tier; attention and comfortable fall under "later".
_BOARD_GROUPS = {"overdue": "critical", "critical": "critical", "urgent": "urgent"}


class DeadlineBoard:
    """
    JSON-backed register of a case's procedural deadlines.

    Every mutation is saved immediately and written to the audit trail.
    Criticality is never stored; views reclassify against ``today``.
    """

    def __init__(
        self,
        path: Path | str,
        case_id: str,
        audit: Optional[AuditLog] = None,
        adjust_weekends: bool = True,
        alert_days: Sequence[int] = DEFAULT_ALERT_DAYS,
        default_origin: str = "manual",
    ):
        """Initialize deadline board.

        Args:
            path: Case directory holding deadlines.json
            case_id: Case the deadlines belong to
            audit: Optional audit log receiving one event per mutation
            adjust_weekends: Move weekend due dates to the following Monday
            alert_days: Days-before-due at which alerts fire
            default_origin: Origin used when none is given
        """
        self.path = Path(path)
        self.path.mkdir(parents=True, exist_ok=True)
        self.file_path = self.path / "deadlines.json"
        self.case_id = case_id
        self.audit = audit
        self.adjust_weekends = adjust_weekends
        self.alert_days = tuple(alert_days)
        self.default_origin = DeadlineOrigin(default_origin)

        self._deadlines: dict[str, Deadline] = {}
        self.load()

    def _record(self, event: str, deadline_id: str, **kwargs: Any) -> None:
        if self.audit is not None:
            self.audit.record(event, "deadlines", "deadline", deadline_id, **kwargs)

    def _require(self, deadline_id: str) -> Deadline:
        deadline = self._deadlines.get(deadline_id)
        if deadline is None:
            raise NotFoundError("deadline", deadline_id)
        return deadline

    def _store(self, deadline: Deadline) -> Deadline:
        self._deadlines[deadline.id] = deadline
        self.save()
        return deadline

    # ========== Mutations ==========

    def create_deadline(
        self,
        kind: str,
        description: str,
        due_date: Optional[date] = None,
        adjusted_due_date: Optional[date] = None,
        start_date: Optional[date] = None,
        origin: Optional[str] = None,
        priority: Optional[str] = None,
        assigned_to: Optional[str] = None,
        backup_assigned_to: Optional[str] = None,
        actor_id: Optional[str] = None,
        today: Optional[date] = None,
    ) -> Deadline:
        """Register a new deadline.

        Args:
            kind: Deadline kind (answer, appeal, hearing, ...)
            description: What has to be filed or done
            due_date: Statutory due date
            adjusted_due_date: Due date after holidays/weekends; derived from
                due_date when omitted
            start_date: Date the term starts counting from; with no due_date,
                the kind's default term in business days is added to it
            origin: Where the deadline came from
            priority: Explicit priority; suggested from days remaining when omitted
            assigned_to: Responsible lawyer
            backup_assigned_to: Backup lawyer
            actor_id: User creating the deadline
            today: Reference date for the priority suggestion

        Returns:
            Created Deadline

        Raises:
            ValueError: If no due date can be determined
        """
        if due_date is None and start_date is not None and kind in DEFAULT_TERM_DAYS:
            due_date = add_business_days(start_date, DEFAULT_TERM_DAYS[kind])

        if adjusted_due_date is None and due_date is not None:
            adjusted_due_date = adjust_to_business_day(due_date) if self.adjust_weekends else due_date

        if adjusted_due_date is not None and priority is None:
            priority = suggest_priority(days_remaining(adjusted_due_date, today))

        deadline = Deadline(
            case_id=self.case_id,
            kind=kind,
            description=description,
            original_due_date=due_date,
            adjusted_due_date=adjusted_due_date,
            origin=DeadlineOrigin(origin) if origin else self.default_origin,
            priority=DeadlinePriority(priority or "medium"),
            assigned_to=assigned_to,
            backup_assigned_to=backup_assigned_to,
            alert_config=default_alert_config(self.alert_days),
        )
        self._store(deadline)
        self._record(
            "deadline_created",
            deadline.id,
            actor_type="agent" if deadline.origin == DeadlineOrigin.AI_DETECTED else "user",
            actor_id=actor_id,
            after=deadline.to_dict(),
        )
        logger.info(f"Created deadline {deadline.id} ({kind}) due {deadline.adjusted_due_date}")
        return deadline

    def update_deadline(self, deadline_id: str, actor_id: Optional[str] = None, **changes: Any) -> Deadline:
        """Update fields of a deadline.

        Raises:
            NotFoundError: If the deadline does not exist
            ValueError: If an immutable field is changed or a value is invalid
        """
        current = self._require(deadline_id)
        blocked = _IMMUTABLE_FIELDS.intersection(changes)
        if blocked:
            raise ValueError(f"Cannot change {', '.join(sorted(blocked))} of a deadline")

        updated = self._store(replace(current, **changes, updated_at=datetime.now()))
        self._record(
            "deadline_updated",
            deadline_id,
            actor_id=actor_id,
            before=current.to_dict(),
            after=updated.to_dict(),
        )
        return updated

    def activate_war_room(self, deadline_id: str, actor_id: Optional[str] = None) -> Deadline:
        """Put a deadline in war-room mode and raise it to critical priority."""
        current = self._require(deadline_id)
        now = datetime.now()
        updated = self._store(
            replace(
                current,
                war_room_active=True,
                war_room_activated_at=current.war_room_activated_at or now,
                priority=DeadlinePriority.CRITICAL,
                updated_at=now,
            )
        )
        self._record(
            "war_room_activated",
            deadline_id,
            actor_id=actor_id,
            before={"war_room_active": current.war_room_active, "priority": current.priority.value},
            after={"war_room_active": True, "priority": DeadlinePriority.CRITICAL.value},
        )
        logger.info(f"War room activated for deadline {deadline_id}")
        return updated

    def complete_deadline(
        self,
        deadline_id: str,
        actor_id: Optional[str] = None,
        today: Optional[date] = None,
    ) -> str:
        """Mark a deadline completed.

        Returns:
            "on_time" if completed on or before the adjusted due date, else "late"
        """
        current = self._require(deadline_id)
        outcome = "on_time" if current.days_remaining(today) >= 0 else "late"
        now = datetime.now()
        self._store(
            replace(
                current,
                status=DeadlineStatus.COMPLETED,
                completed_at=now,
                completed_by=actor_id,
                updated_at=now,
            )
        )
        self._record(
            "deadline_completed",
            deadline_id,
            actor_id=actor_id,
            before={"status": current.status.value},
            after={"status": DeadlineStatus.COMPLETED.value, "outcome": outcome},
        )
        return outcome

    def mark_missed(self, deadline_id: str, actor_id: Optional[str] = None) -> Deadline:
        current = self._require(deadline_id)
        updated = self._store(replace(current, status=DeadlineStatus.MISSED, updated_at=datetime.now()))
        self._record(
            "deadline_missed",
            deadline_id,
            actor_type="system" if actor_id is None else "user",
            actor_id=actor_id,
            before={"status": current.status.value},
            after={"status": DeadlineStatus.MISSED.value},
        )
        logger.warning(f"Deadline {deadline_id} marked as missed")
        return updated

    def record_alert_sent(
        self,
        deadline_id: str,
        alert_key: str,
        recipients: Optional[list[str]] = None,
        channel: str = "email",
    ) -> Deadline:
        """Remember that an alert went out so it is not sent twice."""
        current = self._require(deadline_id)
        entry = {
            "alert_key": alert_key,
            "sent_at": datetime.now().isoformat(),
            "recipients": recipients or [],
            "channel": channel,
        }
        updated = self._store(
            replace(current, alerts_sent=current.alerts_sent + [entry], updated_at=datetime.now())
        )
        self._record("deadline_alert_sent", deadline_id, actor_type="system", after=entry)
        return updated

    def mark_draft_generated(
        self,
        deadline_id: str,
        document_id: str,
        ai_run_id: Optional[str] = None,
    ) -> Deadline:
        """Attach an auto-generated draft document to a deadline."""
        current = self._require(deadline_id)
        status = DeadlineStatus.DRAFT_READY if current.is_open else current.status
        updated = self._store(
            replace(
                current,
                draft_auto_generated=True,
                draft_document_id=document_id,
                status=status,
                updated_at=datetime.now(),
            )
        )
        self._record(
            "deadline_draft_generated",
            deadline_id,
            actor_type="agent",
            after={"draft_document_id": document_id, "status": status.value},
            ai_run_id=ai_run_id,
        )
        return updated

    # ========== Queries ==========

    def get_deadline(self, deadline_id: str) -> Optional[Deadline]:
        """Get deadline by ID."""
        return self._deadlines.get(deadline_id)

    def list_deadlines(self, status: Optional[DeadlineStatus] = None) -> list[Deadline]:
        """Deadlines sorted by adjusted due date, optionally filtered by status."""
        deadlines = [d for d in self._deadlines.values() if status is None or d.status == status]
        return sorted(deadlines, key=lambda d: d.adjusted_due_date)

    def active_deadlines(self) -> list[Deadline]:
        """Deadlines that are neither completed nor missed."""
        return [d for d in self.list_deadlines() if d.is_active]

    def grouped(self, today: Optional[date] = None) -> dict[str, list[Deadline]]:
        """Active deadlines split by criticality tier into critical, urgent and later.

        Overdue and critical tiers share the critical group.
        """
        groups: dict[str, list[Deadline]] = {"critical": [], "urgent": [], "later": []}
        active = sorted(self.active_deadlines(), key=lambda d: d.days_remaining(today))
        for deadline in active:
            groups[_BOARD_GROUPS.get(deadline.criticality(today).tier, "later")].append(deadline)
        return groups

    def war_room_candidates(self, today: Optional[date] = None) -> list[Deadline]:
        """Active deadlines eligible for a war room that do not have one yet."""
        return [
            d for d in self.active_deadlines()
            if not d.war_room_active and d.criticality(today).war_room_eligible
        ]

    def pending_alerts(self, today: Optional[date] = None) -> dict[str, list[str]]:
        """Alert keys due per deadline id."""
        alerts = {}
        for deadline in self.active_deadlines():
            keys = due_alerts(deadline, today)
            if keys:
                alerts[deadline.id] = keys
        return alerts

    def drafts_due(self, today: Optional[date] = None) -> list[Deadline]:
        """Deadlines that should get an auto-generated draft."""
        return [d for d in self.active_deadlines() if draft_generation_due(d, today)]

    def summary(self, today: Optional[date] = None) -> dict[str, int]:
        """Dashboard counters."""
        active = self.active_deadlines()
        return {
            "active": len(active),
            "critical": sum(1 for d in active if d.criticality(today).war_room_eligible),
            "overdue": sum(1 for d in active if d.criticality(today).tier == "overdue"),
            "war_rooms_active": sum(1 for d in active if d.war_room_active),
            "completed": sum(1 for d in self._deadlines.values() if d.status == DeadlineStatus.COMPLETED),
        }

    # ========== Persistence ==========

    def save(self) -> None:
        """Save deadlines to disk."""
        with open(self.file_path, "w", encoding="utf-8") as f:
            json.dump([d.to_dict() for d in self._deadlines.values()], f, indent=2)

    def load(self) -> None:
        """Load deadlines from disk."""
        if self.file_path.exists():
            with open(self.file_path, "r", encoding="utf-8") as f:
                self._deadlines = {d["id"]: Deadline.from_dict(d) for d in json.load(f)}
        logger.debug(f"Loaded {len(self._deadlines)} deadlines for case {self.case_id}")
