"""
Unit tests for the compliance status engine.

2026-10-19 is a Monday; 2026-10-17 the Saturday before it.
"""

import unittest
from dataclasses import replace
from datetime import date, timedelta

from planboard.compliance import evaluate, evaluate_cells, weekday_index
from planboard.model import AlertLevel, ComplianceStatus
from planboard.policy import DEFAULT_POLICY, InvalidPolicyError


TODAY = date(2026, 10, 19)
YESTERDAY = TODAY - timedelta(days=1)
ALL_DAYS = (True,) * 7


class TestEvaluate(unittest.TestCase):
    def test_filed_plan_is_done_regardless_of_policy(self) -> None:
        policy = replace(DEFAULT_POLICY, alert_level=AlertLevel.STRICT)
        for day in (YESTERDAY, TODAY, date(2026, 10, 17), date(2026, 1, 1)):
            with self.subTest(day=day):
                self.assertEqual(evaluate(day, True, policy, TODAY), ComplianceStatus.DONE)

    def test_missed_day_strict_is_late(self) -> None:
        policy = replace(DEFAULT_POLICY, workdays=ALL_DAYS, alert_level=AlertLevel.STRICT)
        self.assertEqual(evaluate(YESTERDAY, False, policy, TODAY), ComplianceStatus.LATE)

    def test_missed_day_moderate_is_warning(self) -> None:
        policy = replace(DEFAULT_POLICY, workdays=ALL_DAYS, alert_level=AlertLevel.MODERATE)
        self.assertEqual(evaluate(YESTERDAY, False, policy, TODAY), ComplianceStatus.WARNING)

    def test_non_workday_is_pending_even_when_overdue(self) -> None:
        saturday = date(2026, 10, 17)
        self.assertEqual(weekday_index(saturday), 5)
        self.assertEqual(evaluate(saturday, False, DEFAULT_POLICY, TODAY), ComplianceStatus.PENDING)

    def test_alerts_disabled_is_pending(self) -> None:
        policy = replace(DEFAULT_POLICY, workdays=ALL_DAYS, alert_level=AlertLevel.DISABLED)
        self.assertEqual(evaluate(date(2026, 9, 1), False, policy, TODAY), ComplianceStatus.PENDING)

    def test_today_and_future_are_pending(self) -> None:
        policy = replace(DEFAULT_POLICY, workdays=ALL_DAYS)
        self.assertEqual(evaluate(TODAY, False, policy, TODAY), ComplianceStatus.PENDING)
        self.assertEqual(evaluate(TODAY + timedelta(days=3), False, policy, TODAY), ComplianceStatus.PENDING)

    def test_grace_period_delays_escalation(self) -> None:
        policy = replace(DEFAULT_POLICY, workdays=ALL_DAYS, grace_period_days=2)
        self.assertEqual(evaluate(TODAY - timedelta(days=1), False, policy, TODAY), ComplianceStatus.PENDING)
        self.assertEqual(evaluate(TODAY - timedelta(days=2), False, policy, TODAY), ComplianceStatus.PENDING)
        self.assertEqual(evaluate(TODAY - timedelta(days=3), False, policy, TODAY), ComplianceStatus.LATE)

    def test_grace_period_has_no_upper_bound(self) -> None:
        policy = replace(DEFAULT_POLICY, workdays=ALL_DAYS, grace_period_days=30)
        self.assertEqual(evaluate(TODAY - timedelta(days=30), False, policy, TODAY), ComplianceStatus.PENDING)
        self.assertEqual(evaluate(TODAY - timedelta(days=31), False, policy, TODAY), ComplianceStatus.LATE)

    def test_malformed_workdays_fail_fast(self) -> None:
        policy = replace(DEFAULT_POLICY, workdays=(True,) * 5)
        with self.assertRaises(InvalidPolicyError):
            evaluate(TODAY, False, policy, TODAY)

    def test_same_inputs_same_answer(self) -> None:
        policy = replace(DEFAULT_POLICY, workdays=ALL_DAYS)
        results = {evaluate(YESTERDAY, False, policy, TODAY) for _ in range(5)}
        self.assertEqual(results, {ComplianceStatus.LATE})


class TestEvaluateCells(unittest.TestCase):
    def test_cells_follow_day_order(self) -> None:
        days = [TODAY - timedelta(days=3), TODAY - timedelta(days=2), TODAY - timedelta(days=1), TODAY]
        # Fri, Sat, Sun, Mon
        cells = evaluate_cells("7A", "math", days, {days[0]}, DEFAULT_POLICY, TODAY)
        self.assertEqual([c.date for c in cells], days)
        self.assertEqual(
            [c.status for c in cells],
            [ComplianceStatus.DONE, ComplianceStatus.PENDING, ComplianceStatus.PENDING, ComplianceStatus.PENDING],
        )
        self.assertTrue(all(c.class_id == "7A" and c.subject_id == "math" for c in cells))


if __name__ == "__main__":
    unittest.main()
