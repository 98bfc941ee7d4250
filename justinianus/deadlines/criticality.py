"""Deadline criticality tiers.

Tier, display label and suggested priority come from a single ladder keyed
by days remaining. Nothing is stored; callers reclassify on every read
because the tier moves with the calendar.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Literal, NamedTuple, Optional, Union

Tier = Literal["overdue", "critical", "urgent", "attention", "comfortable"]
Priority = Literal["low", "medium", "high", "critical"]

WAR_ROOM_MAX_DAYS = 3


class LadderRung(NamedTuple):
    max_days: Optional[int]
    tier: Tier
    label: str
    priority: Priority


# Checked top to bottom; the first rung whose max_days is not exceeded wins.
DEADLINE_LADDER: tuple[LadderRung, ...] = (
    LadderRung(0, "overdue", "overdue", "critical"),
    LadderRung(1, "critical", "today/tomorrow", "critical"),
    LadderRung(3, "critical", "critical", "high"),
    LadderRung(7, "urgent", "urgent", "medium"),
    LadderRung(15, "attention", "attention", "low"),
    LadderRung(None, "comfortable", "comfortable", "low"),
)


@dataclass(frozen=True)
class Criticality:
    """Classification of a deadline on a given day."""

    tier: Tier
    label: str
    war_room_eligible: bool
    suggested_priority: Priority


def _as_date(value: Union[date, datetime]) -> date:
    return value.date() if isinstance(value, datetime) else value


def days_remaining(
    adjusted_due_date: Union[date, datetime],
    today: Optional[Union[date, datetime]] = None,
) -> int:
    """Whole calendar days from today until the adjusted due date.

    Negative once the date has passed.
    """
    today = _as_date(today) if today is not None else date.today()
    return (_as_date(adjusted_due_date) - today).days


def _rung(days: int) -> LadderRung:
    for rung in DEADLINE_LADDER:
        if rung.max_days is None or days <= rung.max_days:
            return rung
    return DEADLINE_LADDER[-1]


def classify_deadline(days: int) -> Criticality:
    """Classify a deadline by its days remaining."""
    rung = _rung(days)
    return Criticality(
        tier=rung.tier,
        label=rung.label,
        war_room_eligible=is_war_room_eligible(days),
        suggested_priority=rung.priority,
    )


def suggest_priority(days: int) -> Priority:
    """Priority pre-selected for a new deadline."""
    return _rung(days).priority


def is_war_room_eligible(days: int) -> bool:
    return days <= WAR_ROOM_MAX_DAYS
