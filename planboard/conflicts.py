"""
Conflict detection.

Given a candidate lesson interval and the plans already scheduled for a class,
report the first plan it overlaps on the same date.
Overlap rule:
    start < other_end AND end > other_start
Touching intervals (end == other_start) are back-to-back lessons, not conflicts.
"""

from __future__ import annotations

from typing import Iterable, Optional

from planboard.model import LessonPlan, PlanStatus, SchedulingWindow


DEFAULT_LESSON_MINUTES = 50


class InvalidWindowError(ValueError):
    """Raised for a malformed or non-chronological scheduling window."""


def _time_to_minutes(hhmm: str) -> int:
    """
    Convert 'HH:MM' to minutes since midnight.
    Raises InvalidWindowError for invalid formats.
    """
    parts = hhmm.strip().split(":")
    if len(parts) != 2 or not parts[0].isdigit() or not parts[1].isdigit():
        raise InvalidWindowError(f"Invalid time format: {hhmm!r}")
    h = int(parts[0])
    m = int(parts[1])
    if not (0 <= h <= 23 and 0 <= m <= 59):
        raise InvalidWindowError(f"Invalid time value: {hhmm!r}")
    return h * 60 + m


def _minutes_to_time(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def _overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    return a_start < b_end and a_end > b_start


def validate_window(window: SchedulingWindow) -> tuple[int, int]:
    """
    Check that the window is a proper interval and return it in minutes.

    A zero-length or reversed window is rejected, never corrected.
    """
    start = _time_to_minutes(window.start_time)
    end = _time_to_minutes(window.end_time)
    if end <= start:
        raise InvalidWindowError(
            f"End time {window.end_time} must be after start time {window.start_time}"
        )
    return start, end


def _siblings(
    class_id: str, day, existing: Iterable[LessonPlan], exclude_id: Optional[str]
) -> list[LessonPlan]:
    """
    Plans of the same class and date that take part in conflict checks.
    """
    out: list[LessonPlan] = []
    for plan in existing:
        if plan.class_id != class_id or plan.date != day:
            continue
        if exclude_id is not None and plan.id == exclude_id:
            continue
        if plan.status == PlanStatus.CANCELLED:
            continue
        out.append(plan)
    return out


def find_conflict(candidate: SchedulingWindow, existing: Iterable[LessonPlan]) -> Optional[LessonPlan]:
    """
    Return the first plan (in list order) whose interval overlaps the candidate,
    or None when the candidate fits.

    Raises InvalidWindowError if the candidate itself is not a valid interval.
    """
    start, end = validate_window(candidate)

    for plan in _siblings(candidate.class_id, candidate.date, existing, candidate.exclude_id):
        try:
            p_start = _time_to_minutes(plan.start_time)
            p_end = _time_to_minutes(plan.end_time)
        except InvalidWindowError:
            # stored rows with broken times cannot block a save
            continue
        if _overlaps(start, end, p_start, p_end):
            return plan

    return None


def suggest_next_slot(
    class_id: str,
    day,
    existing: Iterable[LessonPlan],
    exclude_id: Optional[str] = None,
    duration_minutes: int = DEFAULT_LESSON_MINUTES,
) -> Optional[tuple[str, str]]:
    """
    Suggest (start, end) for a new lesson right after the sibling plan that
    ends latest, whatever order the plans come in.

    Returns None if the class has no other plans that day, or if the
    suggestion would run past midnight.
    """
    ends: list[int] = []
    for plan in _siblings(class_id, day, existing, exclude_id):
        try:
            ends.append(_time_to_minutes(plan.end_time))
        except InvalidWindowError:
            continue
    if not ends:
        return None

    start = max(ends)
    end = start + duration_minutes
    if end >= 24 * 60:
        return None
    return _minutes_to_time(start), _minutes_to_time(end)
