"""
Unit tests for the teacher -> class -> dates overview and the status grid.
"""

import unittest
from datetime import date

from planboard.model import ClassAssignment, ComplianceStatus, LessonPlan, Teacher
from planboard.overview import UNNAMED_TEACHER, build_overview, build_status_grid, overview_dates
from planboard.policy import DEFAULT_POLICY


def plan(pid: str, class_id: str, day: date, subject: str = "math") -> LessonPlan:
    return LessonPlan(id=pid, class_id=class_id, subject_id=subject, date=day, start_time="08:00", end_time="08:50")


class TestBuildOverview(unittest.TestCase):
    def test_teacher_with_two_classes_one_filed(self) -> None:
        teachers = [Teacher("t1", "Ana")]
        links = [ClassAssignment("t1", "7A", "7th A"), ClassAssignment("t1", "7B", "7th B")]
        plans = [plan("p1", "7A", date(2026, 10, 19)), plan("p2", "7A", date(2026, 10, 20))]

        result = build_overview(teachers, links, plans)

        self.assertEqual(len(result), 1)
        self.assertEqual([c.class_id for c in result[0].classes], ["7A", "7B"])
        self.assertEqual(result[0].classes[0].lesson_dates, [date(2026, 10, 19), date(2026, 10, 20)])
        self.assertEqual(result[0].classes[1].lesson_dates, [])

    def test_dates_are_distinct_per_class(self) -> None:
        day = date(2026, 10, 19)
        plans = [plan("p1", "7A", day, "math"), plan("p2", "7A", day, "art")]
        result = build_overview([Teacher("t1", "Ana")], [ClassAssignment("t1", "7A", "7th A")], plans)
        self.assertEqual(result[0].classes[0].lesson_dates, [day])

    def test_teacher_without_classes_is_kept(self) -> None:
        teachers = [Teacher("t1", "Ana"), Teacher("t2", "Bruno")]
        result = build_overview(teachers, [ClassAssignment("t1", "7A", "7th A")], [])
        self.assertEqual([t.teacher_id for t in result], ["t1", "t2"])
        self.assertEqual(result[1].classes, [])

    def test_order_follows_input(self) -> None:
        teachers = [Teacher("t2", "Zoe"), Teacher("t1", "Ana")]
        links = [ClassAssignment("t2", "9B", "9th B"), ClassAssignment("t2", "8A", "8th A")]
        result = build_overview(teachers, links, [])
        self.assertEqual([t.teacher_name for t in result], ["Zoe", "Ana"])
        self.assertEqual([c.class_id for c in result[0].classes], ["9B", "8A"])

    def test_shared_class_appears_under_each_teacher(self) -> None:
        teachers = [Teacher("t1", "Ana"), Teacher("t2", "Bruno")]
        links = [ClassAssignment("t1", "7A", "7th A"), ClassAssignment("t2", "7A", "7th A")]
        result = build_overview(teachers, links, [plan("p1", "7A", date(2026, 10, 19))])
        self.assertEqual(result[0].classes[0].lesson_dates, result[1].classes[0].lesson_dates)

    def test_unnamed_teacher(self) -> None:
        result = build_overview([Teacher("t1", None)], [], [])
        self.assertEqual(result[0].teacher_name, UNNAMED_TEACHER)


class TestOverviewDates(unittest.TestCase):
    def test_week_is_monday_to_friday(self) -> None:
        days = overview_dates(date(2026, 10, 22), "week")
        self.assertEqual(days[0], date(2026, 10, 19))
        self.assertEqual(days[-1], date(2026, 10, 23))
        self.assertEqual(len(days), 5)

    def test_month_has_every_day(self) -> None:
        self.assertEqual(len(overview_dates(date(2026, 2, 10), "month")), 28)
        days = overview_dates(date(2026, 10, 19), "month")
        self.assertEqual((days[0], days[-1], len(days)), (date(2026, 10, 1), date(2026, 10, 31), 31))

    def test_unknown_mode(self) -> None:
        with self.assertRaises(ValueError):
            overview_dates(date(2026, 10, 19), "year")


class TestStatusGrid(unittest.TestCase):
    def test_grid_rows_and_statuses(self) -> None:
        teachers = [Teacher("t1", "Ana"), Teacher("t2", "Bruno")]
        links = [ClassAssignment("t1", "7A", "7th A"), ClassAssignment("t1", "7B", "7th B")]
        overview = build_overview(teachers, links, [plan("p1", "7A", date(2026, 10, 19))])
        days = overview_dates(date(2026, 10, 19), "week")

        rows = build_status_grid(overview, days, DEFAULT_POLICY, today=date(2026, 10, 21))

        self.assertEqual([(r.teacher_id, r.class_id) for r in rows], [("t1", "7A"), ("t1", "7B")])
        self.assertEqual(
            [c.status for c in rows[0].cells],
            [
                ComplianceStatus.DONE,
                ComplianceStatus.LATE,
                ComplianceStatus.PENDING,
                ComplianceStatus.PENDING,
                ComplianceStatus.PENDING,
            ],
        )
        self.assertEqual(rows[1].cells[0].status, ComplianceStatus.LATE)
        self.assertIsNone(rows[1].cells[0].subject_id)


if __name__ == "__main__":
    unittest.main()
