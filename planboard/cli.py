"""
CLI (Command Line Interface).

Terminal commands for teachers and administrators, e.g.:

    planboard check <class_id> <date> <start> <end> [--exclude ID]
    planboard suggest <class_id> <date>
    planboard add <class_id> <date> <start> <end> [--subject ID] [--topic TEXT]
    planboard edit <plan_id> <class_id> <date> <start> <end> [--status S] ...
    planboard overview [--date D] [--mode week|month] [--today D]
    planboard policy show
    planboard policy set [--workdays MTWTF..] [--alert-level L] [--grace N] ...

Exit codes:
    0 ok, 1 store/policy failure, 2 invalid input, 3 slot conflict

Note:
- Data comes from the REST store when PLANBOARD_STORE_URL is set,
  otherwise from the local JSON store (see config.py)
- Output is plain text (no rich formatting)
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from typing import Any

from planboard.config import load_settings
from planboard.conflicts import InvalidWindowError
from planboard.model import AlertLevel, ComplianceStatus, CompliancePolicy, PlanStatus, SchedulingWindow
from planboard.overview import MONTH, WEEK, build_status_grid, overview_dates
from planboard.parse import RecordError, parse_date
from planboard.result import Result
from planboard.service import PlanningGateway, ScheduleConflict


EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID = 2
EXIT_CONFLICT = 3

STATUS_MARKS = {
    ComplianceStatus.DONE: "D",
    ComplianceStatus.PENDING: ".",
    ComplianceStatus.WARNING: "!",
    ComplianceStatus.LATE: "X",
}

WEEKDAY_LETTERS = "MTWTFSS"
DEADLINE_DAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


def _arg_date(value: str) -> date:
    try:
        return parse_date(value)
    except RecordError as e:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}") from e


def _arg_workdays(value: str) -> list[bool]:
    """
    'MTWTF..' -> [True]*5 + [False]*2; any of '.', '-', '_' marks a day off.
    """
    raw = value.strip()
    if len(raw) != 7:
        raise argparse.ArgumentTypeError(f"workdays needs 7 characters (Mon..Sun), got {value!r}")
    return [c not in ".-_" for c in raw]


def _fail(result: Result[Any]) -> int:
    print(f"Error: {result.message}", file=sys.stderr)
    if isinstance(result.error, InvalidWindowError):
        return EXIT_INVALID
    if isinstance(result.error, ScheduleConflict):
        return EXIT_CONFLICT
    return EXIT_FAILURE


def _format_policy(policy: CompliancePolicy) -> str:
    days = "".join(WEEKDAY_LETTERS[i] if on else "." for i, on in enumerate(policy.workdays))
    return "\n".join(
        [
            f"School:        {policy.school_id or '-'}",
            f"Workdays:      {days}",
            f"Deadline:      {DEADLINE_DAY_NAMES[policy.deadline_day]} {policy.deadline_time}",
            f"Alert level:   {policy.alert_level.value}",
            f"Grace period:  {policy.grace_period_days} day(s)",
        ]
    )


def _cmd_check(args: argparse.Namespace, gateway: PlanningGateway) -> int:
    """
    Report whether a proposed lesson time collides with the class's other plans.
    """
    window = SchedulingWindow(
        class_id=args.class_id.strip(),
        date=args.date,
        start_time=args.start,
        end_time=args.end,
        exclude_id=args.exclude,
    )
    result = gateway.check_slot(window)
    if result.is_failure:
        return _fail(result)

    conflict = result.value
    if conflict is None:
        print("No conflicts found.")
        return EXIT_OK

    label = conflict.subject_name or conflict.subject_id or "another lesson"
    print(f"Conflict with: {label} ({conflict.start_time} - {conflict.end_time}) [plan {conflict.id}]")
    return EXIT_CONFLICT


def _cmd_suggest(args: argparse.Namespace, gateway: PlanningGateway) -> int:
    result = gateway.suggest_slot(args.class_id.strip(), args.date)
    if result.is_failure:
        return _fail(result)
    if result.value is None:
        print("No suggestion.")
    else:
        start, end = result.value
        print(f"{start}-{end}")
    return EXIT_OK


def _cmd_add(args: argparse.Namespace, gateway: PlanningGateway) -> int:
    result = gateway.save_lesson_plan(
        class_id=args.class_id.strip(),
        subject_id=args.subject,
        day=args.date,
        start_time=args.start,
        end_time=args.end,
        topic=args.topic or "",
    )
    if result.is_failure:
        return _fail(result)
    plan = result.unwrap()
    print(f"Added: {plan.id} ({plan.date} {plan.start_time}-{plan.end_time})")
    return EXIT_OK


def _cmd_edit(args: argparse.Namespace, gateway: PlanningGateway) -> int:
    result = gateway.update_lesson_plan(
        plan_id=args.plan_id.strip(),
        class_id=args.class_id.strip(),
        day=args.date,
        start_time=args.start,
        end_time=args.end,
        subject_id=args.subject,
        topic=args.topic,
        status=PlanStatus(args.status) if args.status else None,
    )
    if result.is_failure:
        return _fail(result)
    plan = result.unwrap()
    print(f"Updated: {plan.id} ({plan.date} {plan.start_time}-{plan.end_time}, {plan.status.value})")
    return EXIT_OK


def _cmd_overview(args: argparse.Namespace, gateway: PlanningGateway) -> int:
    """
    Print the compliance grid: one line per teacher/class, one mark per day.
    """
    dates = overview_dates(args.date or date.today(), args.mode)
    today = args.today or date.today()

    policy_result = gateway.get_policy()
    if policy_result.is_failure:
        return _fail(policy_result)
    overview_result = gateway.get_planning_overview(dates[0], dates[-1])
    if overview_result.is_failure:
        return _fail(overview_result)

    overview = overview_result.unwrap()
    rows = build_status_grid(overview, dates, policy_result.unwrap(), today)

    print(f"Overview {dates[0]} .. {dates[-1]} (today: {today})")
    print(f"{'':40} {' '.join(d.strftime('%d') for d in dates)}")
    for row in rows:
        label = f"{row.teacher_name} / {row.class_name}"[:40]
        marks = "  ".join(STATUS_MARKS[c.status] for c in row.cells)
        print(f"{label:40}  {marks}")

    for teacher in overview:
        if not teacher.classes:
            print(f"{teacher.teacher_name}: no classes assigned")

    print("Legend: D done, . pending, ! warning, X late")
    return EXIT_OK


def _cmd_policy(args: argparse.Namespace, gateway: PlanningGateway) -> int:
    if args.policy_command == "show":
        result = gateway.get_policy()
    else:
        changes: dict[str, Any] = {}
        if args.workdays is not None:
            changes["workdays"] = args.workdays
        if args.alert_level is not None:
            changes["alert_level"] = args.alert_level
        if args.grace is not None:
            changes["grace_period_days"] = args.grace
        if args.deadline_day is not None:
            changes["deadline_day"] = args.deadline_day
        if args.deadline_time is not None:
            changes["deadline_time"] = args.deadline_time
        if not changes:
            print("Nothing to change.")
            return EXIT_INVALID
        result = gateway.update_policy(changes)

    if result.is_failure:
        return _fail(result)
    print(_format_policy(result.unwrap()))
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="planboard", description="Lesson planning conflicts and compliance")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    parser.add_argument("--env-file", type=str, default=None, help="Read settings from this .env file")
    sub = parser.add_subparsers(dest="command", required=True)

    p_check = sub.add_parser("check", help="Check a proposed lesson time for conflicts")
    p_check.add_argument("class_id", type=str, help="Class ID")
    p_check.add_argument("date", type=_arg_date, help="Lesson date (YYYY-MM-DD)")
    p_check.add_argument("start", type=str, help="Start time (HH:MM)")
    p_check.add_argument("end", type=str, help="End time (HH:MM)")
    p_check.add_argument("--exclude", type=str, default=None, help="ID of the plan being edited")

    p_suggest = sub.add_parser("suggest", help="Suggest the next free slot after the last lesson")
    p_suggest.add_argument("class_id", type=str, help="Class ID")
    p_suggest.add_argument("date", type=_arg_date, help="Lesson date (YYYY-MM-DD)")

    p_add = sub.add_parser("add", help="Add a lesson plan if its slot is free")
    p_add.add_argument("class_id", type=str, help="Class ID")
    p_add.add_argument("date", type=_arg_date, help="Lesson date (YYYY-MM-DD)")
    p_add.add_argument("start", type=str, help="Start time (HH:MM)")
    p_add.add_argument("end", type=str, help="End time (HH:MM)")
    p_add.add_argument("--subject", type=str, default=None, help="Subject ID")
    p_add.add_argument("--topic", type=str, default="", help="Lesson topic")

    p_edit = sub.add_parser("edit", help="Move or change a lesson plan if its new slot is free")
    p_edit.add_argument("plan_id", type=str, help="ID of the plan to change")
    p_edit.add_argument("class_id", type=str, help="Class ID")
    p_edit.add_argument("date", type=_arg_date, help="Lesson date (YYYY-MM-DD)")
    p_edit.add_argument("start", type=str, help="Start time (HH:MM)")
    p_edit.add_argument("end", type=str, help="End time (HH:MM)")
    p_edit.add_argument("--subject", type=str, default=None, help="New subject ID")
    p_edit.add_argument("--topic", type=str, default=None, help="New lesson topic")
    p_edit.add_argument("--status", choices=[s.value for s in PlanStatus], default=None)

    p_overview = sub.add_parser("overview", help="Show the planning compliance grid")
    p_overview.add_argument("--date", type=_arg_date, default=None, help="Any day in the period (default: today)")
    p_overview.add_argument("--mode", choices=[WEEK, MONTH], default=WEEK, help="Week (Mon-Fri) or whole month")
    p_overview.add_argument("--today", type=_arg_date, default=None, help="Evaluate as of this day")

    p_policy = sub.add_parser("policy", help="Show or change the planning policy")
    policy_sub = p_policy.add_subparsers(dest="policy_command", required=True)
    policy_sub.add_parser("show", help="Show the current policy")
    p_set = policy_sub.add_parser("set", help="Change policy fields")
    p_set.add_argument("--workdays", type=_arg_workdays, default=None, help="7 chars Mon..Sun, '.' = day off")
    p_set.add_argument("--alert-level", choices=[a.value for a in AlertLevel], default=None)
    p_set.add_argument("--grace", type=int, default=None, help="Grace period in days")
    p_set.add_argument("--deadline-day", type=int, default=None, help="0=Sunday .. 6=Saturday")
    p_set.add_argument("--deadline-time", type=str, default=None, help="HH:MM")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = load_settings(args.env_file)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(EXIT_INVALID)

    gateway = PlanningGateway.from_settings(settings)

    if args.command == "check":
        raise SystemExit(_cmd_check(args, gateway))
    if args.command == "suggest":
        raise SystemExit(_cmd_suggest(args, gateway))
    if args.command == "add":
        raise SystemExit(_cmd_add(args, gateway))
    if args.command == "edit":
        raise SystemExit(_cmd_edit(args, gateway))
    if args.command == "overview":
        raise SystemExit(_cmd_overview(args, gateway))
    if args.command == "policy":
        raise SystemExit(_cmd_policy(args, gateway))

    raise SystemExit(EXIT_INVALID)
