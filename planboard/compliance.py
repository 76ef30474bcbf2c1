"""
Compliance status derivation.

Each (date, class, subject) cell is evaluated on its own:

    plan filed                        -> done
    not a workday                     -> pending
    alerts disabled                   -> pending
    overdue by more than grace days   -> late (strict) / warning (moderate)
    otherwise                         -> pending

'today' is always passed in explicitly, so the result depends only on the
arguments.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from planboard.model import AlertLevel, ComplianceCell, CompliancePolicy, ComplianceStatus
from planboard.policy import validate_policy


def weekday_index(day: date) -> int:
    """
    Monday=0 ... Sunday=6, the order of policy.workdays.
    """
    return day.weekday()


def evaluate(day: date, has_plan: bool, policy: CompliancePolicy, today: date) -> ComplianceStatus:
    """
    Derive the compliance status of one cell.

    Raises InvalidPolicyError for a malformed policy instead of guessing.
    """
    validate_policy(policy)

    if has_plan:
        return ComplianceStatus.DONE

    if not policy.workdays[weekday_index(day)]:
        return ComplianceStatus.PENDING

    if policy.alert_level == AlertLevel.DISABLED:
        return ComplianceStatus.PENDING

    days_overdue = (today - day).days
    if days_overdue > policy.grace_period_days:
        if policy.alert_level == AlertLevel.STRICT:
            return ComplianceStatus.LATE
        return ComplianceStatus.WARNING

    return ComplianceStatus.PENDING


def evaluate_cells(
    class_id: str,
    subject_id: Optional[str],
    days: Iterable[date],
    filed_dates: Iterable[date],
    policy: CompliancePolicy,
    today: date,
) -> list[ComplianceCell]:
    """
    Evaluate a run of days for one class/subject, in the order given.
    """
    filed = set(filed_dates)
    return [
        ComplianceCell(
            date=d,
            class_id=class_id,
            subject_id=subject_id,
            status=evaluate(d, d in filed, policy, today),
        )
        for d in days
    ]
