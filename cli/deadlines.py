"""CLI utility for deadlines - shows a case's deadlines by criticality."""

import argparse
import logging
import sys
from datetime import date

from justinianus.cases import CaseManager
from justinianus.config_loader import get_settings
from justinianus.deadlines import Deadline, classify_deadline
from justinianus.deadlines.models import due_alerts
from justinianus.errors import JustinianusError


def format_deadline(deadline: Deadline, today: date) -> str:
    """Format a deadline for display.

    Args:
        deadline: Deadline to format
        today: Reference date

    Returns:
        Formatted string
    """
    remaining = deadline.days_remaining(today)
    crit = deadline.criticality(today)
    flags = []
    if deadline.war_room_active:
        flags.append("WAR ROOM")
    elif crit.war_room_eligible:
        flags.append("war room eligible")
    alerts = due_alerts(deadline, today)
    if alerts:
        flags.append(f"alerts due: {', '.join(alerts)}")

    line = (
        f"  [{crit.label}] {deadline.adjusted_due_date.isoformat()} ({remaining:+d}d) "
        f"{deadline.kind}: {deadline.description} | {deadline.priority.value}"
    )
    if flags:
        line += f" | {'; '.join(flags)}"
    return line


def main(argv=None):
    """Main entry point for deadlines CLI."""
    parser = argparse.ArgumentParser(
        description="Show case deadlines grouped by criticality"
    )
    parser.add_argument("case_id", type=str, nargs="?", help="Case ID")
    parser.add_argument(
        "--today",
        type=date.fromisoformat,
        default=None,
        help="Reference date YYYY-MM-DD (default: today)",
    )
    parser.add_argument(
        "--classify",
        type=int,
        metavar="DAYS",
        help="Print the criticality of a raw days-remaining count and exit",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to config.yaml (default: config/config.yaml)",
    )
    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        help="Data directory holding cases/ (default: paths.data from config)",
    )

    args = parser.parse_args(argv)

    if args.classify is not None:
        crit = classify_deadline(args.classify)
        print(f"{args.classify} day(s): {crit.tier} ({crit.label})")
        print(f"Suggested priority: {crit.suggested_priority}")
        print(f"War room eligible: {'yes' if crit.war_room_eligible else 'no'}")
        return

    if not args.case_id:
        parser.error("case_id is required unless --classify is given")

    settings = get_settings(args.config)
    logging.basicConfig(level=settings.logging.level, format=settings.logging.format)
    today = args.today or date.today()

    try:
        board = CaseManager(args.data_dir or settings.paths.data, settings=settings).deadlines_for(args.case_id)
    except JustinianusError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    summary = board.summary(today)
    print("=" * 60)
    print(
        f"Case {args.case_id}: {summary['active']} active, {summary['critical']} critical, "
        f"{summary['overdue']} overdue, {summary['war_rooms_active']} war room(s)"
    )
    print("=" * 60)

    groups = board.grouped(today)
    for group, title in (("critical", "Critical"), ("urgent", "Urgent"), ("later", "Later")):
        deadlines = groups[group]
        print(f"\n{title}: {len(deadlines)}")
        for deadline in deadlines:
            print(format_deadline(deadline, today))


if __name__ == "__main__":
    main()
