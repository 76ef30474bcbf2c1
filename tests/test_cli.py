"""
Tests for CLI entry points.

These tests focus on:
- exit codes (0 ok, 2 invalid input, 3 conflict)
- printed output for the main commands
- running against a local JSON store in a temporary directory
  (to avoid touching real data during tests)
"""

import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest import mock

from planboard.cli import main


class TestCLI(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        base = Path(self._tmp.name)
        (base / "lesson_plans.json").write_text(
            json.dumps(
                [{"id": "p1", "class_id": "7A", "subject_id": "math", "date": "2026-10-19", "start_time": "08:00", "end_time": "08:50", "status": "planned", "subject": {"name": "Math"}}]
            ),
            encoding="utf-8",
        )
        (base / "profiles.json").write_text(json.dumps([{"id": "t1", "name": "Ana", "role": "TEACHER"}]), encoding="utf-8")
        (base / "class_teachers.json").write_text(
            json.dumps([{"teacher_id": "t1", "class_id": "7A", "class": {"id": "7A", "name": "7th A"}}]),
            encoding="utf-8",
        )
        self.env_file = base / "empty.env"
        self.env_file.write_text("", encoding="utf-8")
        self._env = mock.patch.dict(os.environ, {"PLANBOARD_DATA_DIR": str(base), "PLANBOARD_SCHOOL_ID": "s1"}, clear=True)
        self._env.start()

    def tearDown(self) -> None:
        self._env.stop()
        self._tmp.cleanup()

    def run_cli(self, *argv: str) -> tuple[int, str]:
        out = io.StringIO()
        with redirect_stdout(out), self.assertRaises(SystemExit) as ctx:
            main(["--env-file", str(self.env_file), *argv])
        return ctx.exception.code, out.getvalue()

    def test_check_conflict_exit_code(self) -> None:
        code, out = self.run_cli("check", "7A", "2026-10-19", "08:30", "09:00")
        self.assertEqual(code, 3)
        self.assertIn("Conflict with: Math (08:00 - 08:50)", out)

    def test_check_back_to_back_is_free(self) -> None:
        code, out = self.run_cli("check", "7A", "2026-10-19", "08:50", "09:40")
        self.assertEqual(code, 0)
        self.assertIn("No conflicts found.", out)

    def test_check_invalid_window(self) -> None:
        with redirect_stdout(io.StringIO()), mock.patch("sys.stderr", new=io.StringIO()):
            code, _ = self.run_cli("check", "7A", "2026-10-19", "09:00", "08:00")
        self.assertEqual(code, 2)

    def test_bad_date_argument(self) -> None:
        with mock.patch("sys.stderr", new=io.StringIO()):
            code, _ = self.run_cli("check", "7A", "19.10.2026", "09:00", "10:00")
        self.assertNotEqual(code, 0)

    def test_suggest_and_add(self) -> None:
        code, out = self.run_cli("suggest", "7A", "2026-10-19")
        self.assertEqual((code, out.strip()), (0, "08:50-09:40"))

        code, out = self.run_cli("add", "7A", "2026-10-19", "08:50", "09:40", "--topic", "Fractions")
        self.assertEqual(code, 0)
        self.assertIn("Added:", out)

        with mock.patch("sys.stderr", new=io.StringIO()):
            code, _ = self.run_cli("add", "7A", "2026-10-19", "09:00", "09:30")
        self.assertEqual(code, 3)

    def test_edit_moves_plan_and_blocks_overlap(self) -> None:
        code, out = self.run_cli("edit", "p1", "7A", "2026-10-19", "08:10", "9:00", "--topic", "Fractions")
        self.assertEqual(code, 0)
        self.assertIn("Updated: p1 (2026-10-19 08:10-09:00, planned)", out)

        code, _ = self.run_cli("add", "7A", "2026-10-19", "09:00", "09:50")
        self.assertEqual(code, 0)
        with mock.patch("sys.stderr", new=io.StringIO()):
            code, _ = self.run_cli("edit", "p1", "7A", "2026-10-19", "09:30", "10:20")
        self.assertEqual(code, 3)

        code, out = self.run_cli("check", "7A", "2026-10-19", "08:00", "08:10")
        self.assertEqual(code, 0)

    def test_overview_grid(self) -> None:
        code, out = self.run_cli("overview", "--date", "2026-10-19", "--today", "2026-10-21")
        self.assertEqual(code, 0)
        line = next(l for l in out.splitlines() if l.startswith("Ana / 7th A"))
        self.assertEqual(line.split()[-5:], ["D", "X", ".", ".", "."])

    def test_policy_set_and_show(self) -> None:
        code, out = self.run_cli("policy", "set", "--alert-level", "moderate", "--grace", "2", "--workdays", "MTWTFS.")
        self.assertEqual(code, 0)
        self.assertIn("Alert level:   moderate", out)

        code, out = self.run_cli("policy", "show")
        self.assertEqual(code, 0)
        self.assertIn("Workdays:      MTWTFS.", out)
        self.assertIn("Grace period:  2 day(s)", out)

    def test_policy_set_invalid(self) -> None:
        with mock.patch("sys.stderr", new=io.StringIO()):
            code, _ = self.run_cli("policy", "set", "--grace", "-1")
        self.assertEqual(code, 1)


if __name__ == "__main__":
    unittest.main()
