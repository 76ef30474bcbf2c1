"""
Parsing (store rows -> model objects).

Both stores (local JSON files and the REST API) hand back plain dict rows in
the same shape as the database tables:

- lesson_plans:   id, class_id, subject_id, date, start_time, end_time, status, ...
- profiles:       id, name
- class_teachers: teacher_id, class_id, class: {id, name}

Important rules:
- dates are ISO 'YYYY-MM-DD'
- time columns may carry seconds ('08:00:00'); the model keeps 'HH:MM'
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Iterable, Mapping, Optional

from planboard.model import (
    ClassAssignment,
    ClassOverview,
    LessonPlan,
    PlanStatus,
    Teacher,
    TeacherOverview,
)


class RecordError(ValueError):
    """Raised when a store row cannot be turned into a model object."""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def parse_date(value: Any) -> date:
    """
    Parse an ISO date (or pass a date through).
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
    except ValueError as e:
        raise RecordError(f"Invalid date: {value!r}") from e


def parse_time(value: Any) -> str:
    """
    Normalize 'H:MM', 'HH:MM:SS' or 'HH:MM:SS.ffffff' to 'HH:MM'.
    """
    raw = str(value or "").strip()
    for fmt in ("%H:%M", "%H:%M:%S", "%H:%M:%S.%f"):
        try:
            return datetime.strptime(raw, fmt).strftime("%H:%M")
        except ValueError:
            continue
    raise RecordError(f"Invalid time: {value!r}")


def _text(row: Mapping[str, Any], key: str) -> str:
    return str(row.get(key) or "").strip()


def _required(row: Mapping[str, Any], key: str) -> str:
    value = _text(row, key)
    if not value:
        raise RecordError(f"Row is missing {key!r}: {dict(row)!r}")
    return value


# ---------------------------------------------------------------------------
# Row parsing
# ---------------------------------------------------------------------------


def parse_lesson_plan(row: Mapping[str, Any]) -> LessonPlan:
    """
    Parse exactly one lesson_plans row.
    """
    try:
        status = PlanStatus(_text(row, "status") or PlanStatus.PLANNED.value)
    except ValueError as e:
        raise RecordError(f"Unknown plan status: {row.get('status')!r}") from e

    subject = row.get("subject")
    subject_name: Optional[str] = None
    if isinstance(subject, Mapping):
        subject_name = _text(subject, "name") or None

    return LessonPlan(
        id=_required(row, "id"),
        class_id=_required(row, "class_id"),
        subject_id=_text(row, "subject_id") or None,
        date=parse_date(row.get("date")),
        start_time=parse_time(row.get("start_time")),
        end_time=parse_time(row.get("end_time")),
        status=status,
        topic=_text(row, "topic"),
        objective=_text(row, "objective"),
        materials=_text(row, "materials"),
        homework=_text(row, "homework"),
        notes=_text(row, "notes"),
        subject_name=subject_name,
    )


def parse_lesson_plans(rows: Iterable[Mapping[str, Any]]) -> list[LessonPlan]:
    return [parse_lesson_plan(r) for r in rows]


def parse_teachers(rows: Iterable[Mapping[str, Any]]) -> list[Teacher]:
    return [Teacher(id=_required(r, "id"), name=_text(r, "name") or None) for r in rows]


def parse_class_assignments(rows: Iterable[Mapping[str, Any]]) -> list[ClassAssignment]:
    """
    Parse class_teachers link rows.

    Links whose class was deleted (class is null) are skipped.
    """
    out: list[ClassAssignment] = []
    for r in rows:
        cls = r.get("class")
        teacher_id = _text(r, "teacher_id")
        if not isinstance(cls, Mapping) or not teacher_id:
            continue
        out.append(
            ClassAssignment(
                teacher_id=teacher_id,
                class_id=_required(cls, "id"),
                class_name=_text(cls, "name"),
            )
        )
    return out


def parse_overview_rows(rows: Iterable[Mapping[str, Any]]) -> list[TeacherOverview]:
    """
    Parse the pre-aggregated overview shape:
    {teacher_id, teacher_name, classes: [{class_id, class_name, lesson_dates}]}
    """
    out: list[TeacherOverview] = []
    for r in rows:
        classes = []
        for c in r.get("classes") or []:
            classes.append(
                ClassOverview(
                    class_id=_required(c, "class_id"),
                    class_name=_text(c, "class_name"),
                    lesson_dates=sorted({parse_date(d) for d in c.get("lesson_dates") or []}),
                )
            )
        out.append(
            TeacherOverview(
                teacher_id=_required(r, "teacher_id"),
                teacher_name=_text(r, "teacher_name"),
                classes=classes,
            )
        )
    return out


def lesson_plan_to_row(plan: LessonPlan) -> dict[str, Any]:
    """
    Inverse of parse_lesson_plan(), used by the local store.
    """
    return {
        "id": plan.id,
        "class_id": plan.class_id,
        "subject_id": plan.subject_id,
        "date": plan.date.isoformat(),
        "start_time": plan.start_time,
        "end_time": plan.end_time,
        "status": plan.status.value,
        "topic": plan.topic,
        "objective": plan.objective,
        "materials": plan.materials,
        "homework": plan.homework,
        "notes": plan.notes,
    }
