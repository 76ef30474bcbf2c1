"""
Planning overview: teachers -> classes -> dates with filed plans.

build_overview() only shapes the join. Status derivation is done per cell by
compliance.evaluate(), see build_status_grid().
"""

from __future__ import annotations

import calendar
from collections import defaultdict
from datetime import date, timedelta
from typing import Iterable

from planboard.compliance import evaluate_cells
from planboard.model import (
    ClassAssignment,
    ClassOverview,
    CompliancePolicy,
    GridRow,
    LessonPlan,
    Teacher,
    TeacherOverview,
)


UNNAMED_TEACHER = "(unnamed)"

WEEK = "week"
MONTH = "month"


def build_overview(
    teachers: Iterable[Teacher],
    class_assignments: Iterable[ClassAssignment],
    lesson_plans_in_range: Iterable[LessonPlan],
) -> list[TeacherOverview]:
    """
    Join teachers with their classes and the distinct dates that have plans.

    - teachers keep the order supplied (callers sort by name)
    - classes keep assignment order within a teacher
    - teachers without classes are kept with an empty class list
    """
    # class_id -> set of dates, for O(1) lookup per class
    dates_by_class: dict[str, set[date]] = defaultdict(set)
    for plan in lesson_plans_in_range:
        dates_by_class[plan.class_id].add(plan.date)

    classes_by_teacher: dict[str, list[ClassOverview]] = defaultdict(list)
    for link in class_assignments:
        classes_by_teacher[link.teacher_id].append(
            ClassOverview(
                class_id=link.class_id,
                class_name=link.class_name,
                lesson_dates=sorted(dates_by_class.get(link.class_id, set())),
            )
        )

    out: list[TeacherOverview] = []
    for t in teachers:
        name = (t.name or "").strip() or UNNAMED_TEACHER
        out.append(TeacherOverview(teacher_id=t.id, teacher_name=name, classes=classes_by_teacher.get(t.id, [])))
    return out


def overview_dates(anchor: date, mode: str = WEEK) -> list[date]:
    """
    Column dates of the overview grid.

    week  -> Monday..Friday of the week containing anchor
    month -> every day of anchor's month
    """
    if mode == WEEK:
        monday = anchor - timedelta(days=anchor.weekday())
        return [monday + timedelta(days=i) for i in range(5)]
    if mode == MONTH:
        _, last_day = calendar.monthrange(anchor.year, anchor.month)
        return [date(anchor.year, anchor.month, d) for d in range(1, last_day + 1)]
    raise ValueError(f"Unknown overview mode: {mode!r} (expected {WEEK!r} or {MONTH!r})")


def build_status_grid(
    overview: Iterable[TeacherOverview],
    dates: list[date],
    policy: CompliancePolicy,
    today: date,
) -> list[GridRow]:
    """
    Run every teacher/class/date cell through the compliance engine.

    Teachers without classes produce no rows.
    """
    rows: list[GridRow] = []
    for teacher in overview:
        for cls in teacher.classes:
            rows.append(
                GridRow(
                    teacher_id=teacher.teacher_id,
                    teacher_name=teacher.teacher_name,
                    class_id=cls.class_id,
                    class_name=cls.class_name,
                    cells=evaluate_cells(cls.class_id, None, dates, cls.lesson_dates, policy, today),
                )
            )
    return rows
