"""
Compliance policy value object helpers.

- validation (fail fast, never guess a default for a broken record)
- conversion from/to the flat dict shape the stores use
- merging of partial updates
"""

from __future__ import annotations

from typing import Any, Mapping

from planboard.model import AlertLevel, CompliancePolicy
from planboard.parse import RecordError, parse_time


POLICY_FIELDS = ("workdays", "deadline_day", "deadline_time", "alert_level", "grace_period_days")


class InvalidPolicyError(ValueError):
    """Raised when a policy record is malformed."""


DEFAULT_POLICY = CompliancePolicy(
    workdays=(True, True, True, True, True, False, False),
    deadline_day=4,
    deadline_time="23:59",
    alert_level=AlertLevel.STRICT,
    grace_period_days=0,
)


def _is_int(value: Any) -> bool:
    # bool is a subclass of int, but True is not a day count
    return isinstance(value, int) and not isinstance(value, bool)


def _valid_hhmm(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    parts = value.split(":")
    if len(parts) != 2 or not all(p.isdigit() and len(p) == 2 for p in parts):
        return False
    return 0 <= int(parts[0]) <= 23 and 0 <= int(parts[1]) <= 59


def validate_policy(policy: CompliancePolicy) -> CompliancePolicy:
    """
    Check every field of the policy and return it unchanged.

    Raises InvalidPolicyError on the first problem found.
    """
    workdays = policy.workdays
    if not isinstance(workdays, (tuple, list)) or len(workdays) != 7:
        raise InvalidPolicyError(f"workdays must have exactly 7 entries, got {workdays!r}")
    if not all(isinstance(d, bool) for d in workdays):
        raise InvalidPolicyError(f"workdays entries must be booleans, got {workdays!r}")

    if not isinstance(policy.alert_level, AlertLevel):
        raise InvalidPolicyError(f"Unknown alert level: {policy.alert_level!r}")

    if not _is_int(policy.grace_period_days) or policy.grace_period_days < 0:
        raise InvalidPolicyError(f"grace_period_days must be an integer >= 0, got {policy.grace_period_days!r}")

    if not _is_int(policy.deadline_day) or not (0 <= policy.deadline_day <= 6):
        raise InvalidPolicyError(f"deadline_day must be 0 (Sunday) .. 6 (Saturday), got {policy.deadline_day!r}")

    if not _valid_hhmm(policy.deadline_time):
        raise InvalidPolicyError(f"deadline_time must be HH:MM, got {policy.deadline_time!r}")

    return policy


def policy_from_dict(data: Mapping[str, Any]) -> CompliancePolicy:
    """
    Build a validated policy from a store record.

    Extra keys such as 'id' or timestamps are ignored, missing keys are errors.
    Store time columns may carry seconds ('23:59:00'); they are normalized to HH:MM.
    """
    missing = [k for k in POLICY_FIELDS if k not in data]
    if missing:
        raise InvalidPolicyError(f"Policy record is missing: {', '.join(missing)}")

    workdays = data["workdays"]
    if not isinstance(workdays, (list, tuple)):
        raise InvalidPolicyError(f"workdays must be a list, got {workdays!r}")

    try:
        alert_level = AlertLevel(data["alert_level"])
    except ValueError as e:
        raise InvalidPolicyError(f"Unknown alert level: {data['alert_level']!r}") from e

    try:
        deadline_time = parse_time(data["deadline_time"])
    except RecordError as e:
        raise InvalidPolicyError(f"deadline_time must be HH:MM, got {data['deadline_time']!r}") from e

    school_id = data.get("school_id")
    policy = CompliancePolicy(
        workdays=tuple(workdays),
        deadline_day=data["deadline_day"],
        deadline_time=deadline_time,
        alert_level=alert_level,
        grace_period_days=data["grace_period_days"],
        school_id=str(school_id) if school_id is not None else None,
    )
    return validate_policy(policy)


def policy_to_dict(policy: CompliancePolicy) -> dict[str, Any]:
    out: dict[str, Any] = {
        "workdays": list(policy.workdays),
        "deadline_day": policy.deadline_day,
        "deadline_time": policy.deadline_time,
        "alert_level": policy.alert_level.value,
        "grace_period_days": policy.grace_period_days,
    }
    if policy.school_id is not None:
        out["school_id"] = policy.school_id
    return out


def merge_policy(current: CompliancePolicy, changes: Mapping[str, Any]) -> CompliancePolicy:
    """
    Apply a partial change set to a policy and validate the result.

    Unknown keys are rejected so a typo never silently keeps the old value.
    """
    unknown = sorted(set(changes) - set(POLICY_FIELDS))
    if unknown:
        raise InvalidPolicyError(f"Unknown policy field(s): {', '.join(unknown)}")

    merged = policy_to_dict(current)
    merged.update(changes)
    return policy_from_dict(merged)
