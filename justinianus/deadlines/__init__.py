"""Procedural deadlines: criticality tiers, records and the per-case board."""

from justinianus.deadlines.board import DeadlineBoard
from justinianus.deadlines.criticality import (
    DEADLINE_LADDER,
    Criticality,
    classify_deadline,
    days_remaining,
    suggest_priority,
)
from justinianus.deadlines.models import (
    Deadline,
    DeadlineOrigin,
    DeadlinePriority,
    DeadlineStatus,
)

__all__ = [
    "DeadlineBoard",
    "DEADLINE_LADDER",
    "Criticality",
    "classify_deadline",
    "days_remaining",
    "suggest_priority",
    "Deadline",
    "DeadlineOrigin",
    "DeadlinePriority",
    "DeadlineStatus",
]
