"""
Local JSON store.

This module manages a directory of JSON files shaped like the database tables:

    data/planning_config.json   {"<school_id>": {policy record}, ...}
    data/lesson_plans.json      [lesson_plans rows]
    data/profiles.json          [{"id", "name", "role"}]
    data/class_teachers.json    [{"teacher_id", "class_id", "class": {"id", "name"}}]

It offers the same fetch/insert/update/upsert methods as client.RestStore, so the
gateway can work against either one. Used when no remote store URL is
configured, and by the tests.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import date
from pathlib import Path
from typing import Any, Optional


logger = logging.getLogger(__name__)

TEACHER_ROLE = "TEACHER"


class StoreError(Exception):
    """Raised when a store cannot be read or written."""


class StoreAuthError(StoreError):
    """Raised when the store rejects our credentials."""


def _default_data_dir() -> Path:
    """
    <package>/data, used when PLANBOARD_DATA_DIR is not set.
    """
    base_dir = Path(__file__).resolve().parent
    return base_dir / "data"


class LocalStore:
    def __init__(self, data_dir: str | Path | None = None) -> None:
        self.data_dir = Path(data_dir) if data_dir is not None else _default_data_dir()

    # -- file helpers -------------------------------------------------------

    def _read(self, name: str, default: Any) -> Any:
        path = self.data_dir / name
        # First run: file does not exist yet
        if not path.exists():
            logger.debug("%s not found, using empty data", path)
            return default
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            raise StoreError(f"Cannot read {path}: {e}") from e

    def _write(self, name: str, data: Any) -> None:
        path = self.data_dir / name
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as e:
            raise StoreError(f"Cannot write {path}: {e}") from e

    def _rows(self, name: str) -> list[dict[str, Any]]:
        data = self._read(name, [])
        if not isinstance(data, list):
            raise StoreError(f"{name} must contain a JSON list")
        return [r for r in data if isinstance(r, dict)]

    # -- lesson plans -------------------------------------------------------

    def fetch_lesson_plans(self, class_id: Optional[str], start: date, end: date) -> list[dict[str, Any]]:
        """
        Rows in [start, end] (inclusive), ordered by date then start time.
        class_id=None returns every class.
        """
        lo, hi = start.isoformat(), end.isoformat()
        rows = [
            r
            for r in self._rows("lesson_plans.json")
            if (class_id is None or str(r.get("class_id")) == class_id) and lo <= str(r.get("date", "")) <= hi
        ]
        rows.sort(key=lambda r: (str(r.get("date", "")), str(r.get("start_time", ""))))
        return rows

    def insert_lesson_plan(self, row: dict[str, Any]) -> dict[str, Any]:
        rows = self._rows("lesson_plans.json")
        saved = dict(row)
        if not saved.get("id"):
            saved["id"] = str(uuid.uuid4())
        rows.append(saved)
        self._write("lesson_plans.json", rows)
        logger.info("Saved lesson plan %s for class %s on %s", saved["id"], saved.get("class_id"), saved.get("date"))
        return saved

    def update_lesson_plan(self, plan_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        """
        Apply changes to the row with this id and return the updated row.
        """
        rows = self._rows("lesson_plans.json")
        for i, row in enumerate(rows):
            if str(row.get("id")) == plan_id:
                updated = {**row, **changes, "id": row["id"]}
                rows[i] = updated
                self._write("lesson_plans.json", rows)
                logger.info("Updated lesson plan %s", plan_id)
                return updated
        raise StoreError(f"Lesson plan {plan_id} not found")

    # -- roster -------------------------------------------------------------

    def fetch_teachers(self) -> list[dict[str, Any]]:
        rows = [r for r in self._rows("profiles.json") if r.get("role") == TEACHER_ROLE]
        rows.sort(key=lambda r: str(r.get("name") or ""))
        return rows

    def fetch_class_assignments(self) -> list[dict[str, Any]]:
        return self._rows("class_teachers.json")

    # -- policy -------------------------------------------------------------

    def fetch_policy(self, school_id: str) -> Optional[dict[str, Any]]:
        configs = self._read("planning_config.json", {})
        if not isinstance(configs, dict):
            raise StoreError("planning_config.json must contain a JSON object")
        record = configs.get(school_id)
        return dict(record) if isinstance(record, dict) else None

    def upsert_policy(self, school_id: str, record: dict[str, Any]) -> dict[str, Any]:
        """
        Insert or replace the school's policy record and echo it back.
        """
        configs = self._read("planning_config.json", {})
        if not isinstance(configs, dict):
            raise StoreError("planning_config.json must contain a JSON object")
        saved = {**record, "school_id": school_id}
        configs[school_id] = saved
        self._write("planning_config.json", configs)
        logger.info("Saved planning policy for school %s", school_id)
        return dict(saved)
