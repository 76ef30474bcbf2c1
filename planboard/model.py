"""
Central data model definitions used across the project.

This module defines the canonical structure of lesson plans, the policy
value object and the overview/grid shapes so that:
- all modules share the same field names
- the pure evaluators never deal with raw store rows (see parse.py)
- status and alert values form closed sets instead of free strings
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Optional, Tuple


class PlanStatus(str, Enum):
    PLANNED = "planned"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class AlertLevel(str, Enum):
    STRICT = "strict"
    MODERATE = "moderate"
    DISABLED = "disabled"


class ComplianceStatus(str, Enum):
    """
    Result of evaluating one (date, class, subject) cell.
    """

    DONE = "done"
    PENDING = "pending"
    WARNING = "warning"
    LATE = "late"


@dataclass(frozen=True)
class LessonPlan:
    """
    One scheduled lesson for a class on a date.

    Times are 'HH:MM' strings (minute precision, no time zone).
    """

    id: str
    class_id: str
    subject_id: Optional[str]
    date: date
    start_time: str
    end_time: str
    status: PlanStatus = PlanStatus.PLANNED
    topic: str = ""
    objective: str = ""
    materials: str = ""
    homework: str = ""
    notes: str = ""
    subject_name: Optional[str] = None


@dataclass(frozen=True)
class SchedulingWindow:
    """
    Candidate interval being validated before a plan is saved.

    exclude_id is the id of the plan being edited, so it never conflicts
    with its own previous interval.
    """

    class_id: str
    date: date
    start_time: str
    end_time: str
    exclude_id: Optional[str] = None


@dataclass(frozen=True)
class CompliancePolicy:
    """
    School-wide configuration for compliance evaluation.

    workdays is indexed Monday..Sunday. deadline_day uses 0=Sunday..6=Saturday.
    Instances are validated by policy.validate_policy().
    """

    workdays: Tuple[bool, ...]
    deadline_day: int
    deadline_time: str
    alert_level: AlertLevel
    grace_period_days: int
    school_id: Optional[str] = None


@dataclass(frozen=True)
class ComplianceCell:
    date: date
    class_id: str
    subject_id: Optional[str]
    status: ComplianceStatus


@dataclass(frozen=True)
class Teacher:
    id: str
    name: Optional[str]


@dataclass(frozen=True)
class ClassAssignment:
    """
    Link between a teacher and one of the classes they teach.
    """

    teacher_id: str
    class_id: str
    class_name: str


@dataclass
class ClassOverview:
    class_id: str
    class_name: str
    lesson_dates: List[date] = field(default_factory=list)


@dataclass
class TeacherOverview:
    teacher_id: str
    teacher_name: str
    classes: List[ClassOverview] = field(default_factory=list)


@dataclass
class GridRow:
    """
    One teacher/class row of the status grid, cells in date order.
    """

    teacher_id: str
    teacher_name: str
    class_id: str
    class_name: str
    cells: List[ComplianceCell] = field(default_factory=list)
