"""
Planning gateway: store access for the planning screens.

The gateway fetches rows from a store (storage.LocalStore or client.RestStore),
turns them into model objects and runs the pure checks on them. Every public
method returns a result.Result; store failures never escape as exceptions.
"""

from __future__ import annotations

import logging
import threading
from datetime import date
from typing import Any, Callable, Mapping, Optional, TypeVar

from planboard.config import Settings
from planboard.conflicts import InvalidWindowError, find_conflict, suggest_next_slot, validate_window
from planboard.model import CompliancePolicy, LessonPlan, PlanStatus, SchedulingWindow, TeacherOverview
from planboard.overview import build_overview
from planboard.parse import (
    RecordError,
    lesson_plan_to_row,
    parse_class_assignments,
    parse_lesson_plan,
    parse_lesson_plans,
    parse_overview_rows,
    parse_teachers,
    parse_time,
)
from planboard.policy import DEFAULT_POLICY, InvalidPolicyError, merge_policy, policy_from_dict, policy_to_dict
from planboard.result import Result
from planboard.storage import LocalStore, StoreError


logger = logging.getLogger(__name__)

T = TypeVar("T")

RECOVERABLE_ERRORS = (StoreError, RecordError, InvalidPolicyError)


class ScheduleConflict(Exception):
    """Carried in a failed save result when the slot is taken."""

    def __init__(self, plan: LessonPlan) -> None:
        self.plan = plan
        label = plan.subject_name or plan.subject_id or "another lesson"
        super().__init__(f"Conflicts with {label} ({plan.start_time} - {plan.end_time})")


class LatestRequestGuard:
    """
    Drops results of fetches that were superseded by a newer one.

    Typical use:
        ticket = guard.begin()
        result = gateway.get_planning_overview(...)
        data = guard.accept(ticket, result)   # None if a newer fetch started
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._latest = 0

    def begin(self) -> int:
        with self._lock:
            self._latest += 1
            return self._latest

    def is_current(self, ticket: int) -> bool:
        with self._lock:
            return ticket == self._latest

    def accept(self, ticket: int, value: T) -> Optional[T]:
        if self.is_current(ticket):
            return value
        logger.debug("Discarding superseded result (ticket %d)", ticket)
        return None


def make_store(settings: Settings) -> Any:
    """
    RestStore when a store URL is configured, LocalStore otherwise.
    """
    if settings.store_url:
        from planboard.client import RestStore

        return RestStore(settings.store_url, api_key=settings.api_key, timeout=settings.timeout)
    return LocalStore(settings.data_dir)


class PlanningGateway:
    def __init__(self, store: Any, school_id: str, overview_rpc: Optional[str] = None) -> None:
        self.store = store
        self.school_id = school_id
        self.overview_rpc = overview_rpc

    @classmethod
    def from_settings(cls, settings: Settings) -> "PlanningGateway":
        return cls(make_store(settings), settings.school_id, overview_rpc=settings.overview_rpc)

    def _call(self, what: str, fn: Callable[[], T]) -> Result[T]:
        try:
            return Result.success(fn())
        except RECOVERABLE_ERRORS as e:
            logger.warning("Failed to %s: %s", what, e)
            return Result.failure(f"Failed to {what}: {e}", e)

    # -- lesson plans -------------------------------------------------------

    def get_lesson_plans(self, class_id: str, start: date, end: date) -> Result[list[LessonPlan]]:
        return self._call(
            "load lesson plans",
            lambda: parse_lesson_plans(self.store.fetch_lesson_plans(class_id, start, end)),
        )

    def get_lesson_dates(self, class_id: str, start: date, end: date) -> Result[list[date]]:
        """
        Distinct dates with any plan for the class, ascending.
        """
        return self.get_lesson_plans(class_id, start, end).map(lambda plans: sorted({p.date for p in plans}))

    def check_slot(self, window: SchedulingWindow) -> Result[Optional[LessonPlan]]:
        """
        Success(None) when the slot is free, Success(plan) with the first
        conflicting plan, Failure for an invalid window or a store error.
        """
        try:
            validate_window(window)
        except InvalidWindowError as e:
            return Result.failure(str(e), e)

        plans = self.get_lesson_plans(window.class_id, window.date, window.date)
        return plans.map(lambda existing: find_conflict(window, existing))

    def suggest_slot(self, class_id: str, day: date) -> Result[Optional[tuple[str, str]]]:
        plans = self.get_lesson_plans(class_id, day, day)
        return plans.map(lambda existing: suggest_next_slot(class_id, day, existing))

    def _slot_refusal(self, window: SchedulingWindow, status: Optional[PlanStatus]) -> Optional[Result[Any]]:
        """
        Failure result when the window is invalid or taken, None when the
        plan may be written. Cancelled plans take no slot, so only their
        window shape is checked.
        """
        if status == PlanStatus.CANCELLED:
            try:
                validate_window(window)
            except InvalidWindowError as e:
                return Result.failure(str(e), e)
            return None

        checked = self.check_slot(window)
        if checked.is_failure:
            return Result.failure(checked.message or "", checked.error)
        if checked.value is not None:
            conflict = ScheduleConflict(checked.value)
            return Result.failure(str(conflict), conflict)
        return None

    def save_lesson_plan(
        self,
        class_id: str,
        subject_id: Optional[str],
        day: date,
        start_time: str,
        end_time: str,
        topic: str = "",
        status: PlanStatus = PlanStatus.PLANNED,
    ) -> Result[LessonPlan]:
        """
        Create a plan unless its slot is invalid or already taken.
        """
        window = SchedulingWindow(class_id=class_id, date=day, start_time=start_time, end_time=end_time)
        refusal = self._slot_refusal(window, status)
        if refusal is not None:
            return refusal

        plan = LessonPlan(
            id="",
            class_id=class_id,
            subject_id=subject_id,
            date=day,
            start_time=parse_time(start_time),
            end_time=parse_time(end_time),
            status=status,
            topic=topic,
        )
        return self._call(
            "save lesson plan",
            lambda: parse_lesson_plan(self.store.insert_lesson_plan(lesson_plan_to_row(plan))),
        )

    def update_lesson_plan(
        self,
        plan_id: str,
        class_id: str,
        day: date,
        start_time: str,
        end_time: str,
        subject_id: Optional[str] = None,
        topic: Optional[str] = None,
        status: Optional[PlanStatus] = None,
    ) -> Result[LessonPlan]:
        """
        Move or change an existing plan in place.

        The plan's own previous interval never blocks the move; any other
        non-cancelled plan of the class on that day does. subject_id, topic
        and status are left unchanged when None.
        """
        window = SchedulingWindow(
            class_id=class_id, date=day, start_time=start_time, end_time=end_time, exclude_id=plan_id
        )
        refusal = self._slot_refusal(window, status)
        if refusal is not None:
            return refusal

        changes: dict[str, Any] = {
            "class_id": class_id,
            "date": day.isoformat(),
            "start_time": parse_time(start_time),
            "end_time": parse_time(end_time),
            "is_modified": True,
        }
        if subject_id is not None:
            changes["subject_id"] = subject_id
        if topic is not None:
            changes["topic"] = topic
        if status is not None:
            changes["status"] = status.value

        return self._call(
            "update lesson plan",
            lambda: parse_lesson_plan(self.store.update_lesson_plan(plan_id, changes)),
        )

    # -- overview -----------------------------------------------------------

    def get_planning_overview(self, start: date, end: date) -> Result[list[TeacherOverview]]:
        """
        Teachers -> classes -> dates with plans, joined here unless the
        store provides the aggregation as a server-side function.
        """
        if self.overview_rpc:
            return self._call(
                "load planning overview",
                lambda: parse_overview_rows(self.store.fetch_planning_overview(self.overview_rpc, start, end)),
            )

        def load() -> list[TeacherOverview]:
            teachers = parse_teachers(self.store.fetch_teachers())
            links = parse_class_assignments(self.store.fetch_class_assignments())
            plans = parse_lesson_plans(self.store.fetch_lesson_plans(None, start, end))
            return build_overview(teachers, links, plans)

        return self._call("load planning overview", load)

    # -- policy -------------------------------------------------------------

    def _current_policy(self) -> CompliancePolicy:
        record = self.store.fetch_policy(self.school_id)
        if record is None:
            logger.debug("No planning policy stored for school %s, using defaults", self.school_id)
            return policy_from_dict({**policy_to_dict(DEFAULT_POLICY), "school_id": self.school_id})
        return policy_from_dict(record)

    def get_policy(self) -> Result[CompliancePolicy]:
        return self._call("load planning policy", self._current_policy)

    def update_policy(self, changes: Mapping[str, Any]) -> Result[CompliancePolicy]:
        """
        Merge a partial change set into the stored policy, persist it and
        return the merged record as echoed back by the store.
        """

        def save() -> CompliancePolicy:
            merged = merge_policy(self._current_policy(), changes)
            return policy_from_dict(self.store.upsert_policy(self.school_id, policy_to_dict(merged)))

        return self._call("save planning policy", save)
