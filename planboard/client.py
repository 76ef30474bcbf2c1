"""
REST store client.

Talks to a PostgREST-style API (as exposed by Supabase) over HTTP:

    GET   /rest/v1/lesson_plans?class_id=eq.X&date=gte.A&date=lte.B&order=date,start_time
    GET   /rest/v1/profiles?role=eq.TEACHER&order=name
    GET   /rest/v1/class_teachers?select=teacher_id,class_id,class:classes(id,name)
    GET   /rest/v1/planning_config?school_id=eq.S
    POST  /rest/v1/planning_config?on_conflict=school_id   (upsert)
    POST  /rest/v1/lesson_plans
    POST  /rest/v1/rpc/<overview function>

Every failure is raised as storage.StoreError (StoreAuthError for 401/403),
so requests exceptions never leak to callers.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional

import requests

from planboard.storage import TEACHER_ROLE, StoreAuthError, StoreError


logger = logging.getLogger(__name__)

USER_AGENT = "planboard/0.1.0"


class RestStore:
    """HTTP client for the remote relational store."""

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        """
        Args:
            base_url: project URL, e.g. https://xyz.supabase.co
            api_key: sent as 'apikey' header and bearer token
            timeout: per-request timeout in seconds
            session: optional pre-built session (tests pass a mock)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session if session is not None else requests.Session()
        self._session.headers.update({"User-Agent": USER_AGENT, "Accept": "application/json"})
        if api_key:
            self._session.headers.update({"apikey": api_key, "Authorization": f"Bearer {api_key}"})

    def close(self) -> None:
        self._session.close()

    def _request(
        self,
        method: str,
        path: str,
        params: Any = None,
        json_body: Any = None,
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        url = f"{self.base_url}/rest/v1/{path.lstrip('/')}"
        logger.debug("%s %s params=%s", method, url, params)
        try:
            resp = self._session.request(
                method, url, params=params, json=json_body, headers=headers, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise StoreError(f"{method} {path} failed: {e}") from e

        if resp.status_code in (401, 403):
            raise StoreAuthError(f"{method} {path} was rejected ({resp.status_code})")
        try:
            resp.raise_for_status()
        except requests.HTTPError as e:
            raise StoreError(f"{method} {path} failed ({resp.status_code}): {resp.text[:200]}") from e

        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise StoreError(f"{method} {path} returned invalid JSON") from e

    def _rows(self, data: Any, path: str) -> list[dict[str, Any]]:
        if data is None:
            return []
        if not isinstance(data, list):
            raise StoreError(f"{path} returned {type(data).__name__}, expected a list")
        return [r for r in data if isinstance(r, dict)]

    # -- lesson plans -------------------------------------------------------

    def fetch_lesson_plans(self, class_id: Optional[str], start: date, end: date) -> list[dict[str, Any]]:
        params: list[tuple[str, str]] = [
            ("select", "*,subject:subjects(name)"),
            ("date", f"gte.{start.isoformat()}"),
            ("date", f"lte.{end.isoformat()}"),
            ("order", "date,start_time"),
        ]
        if class_id is not None:
            params.append(("class_id", f"eq.{class_id}"))
        return self._rows(self._request("GET", "lesson_plans", params=params), "lesson_plans")

    def insert_lesson_plan(self, row: dict[str, Any]) -> dict[str, Any]:
        payload = {k: v for k, v in row.items() if v is not None and k != "id"}
        data = self._rows(
            self._request("POST", "lesson_plans", json_body=payload, headers={"Prefer": "return=representation"}),
            "lesson_plans",
        )
        if not data:
            raise StoreError("lesson_plans insert returned no row")
        logger.info("Saved lesson plan %s", data[0].get("id"))
        return data[0]

    def update_lesson_plan(self, plan_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        payload = {k: v for k, v in changes.items() if k != "id"}
        data = self._rows(
            self._request(
                "PATCH",
                "lesson_plans",
                params={"id": f"eq.{plan_id}"},
                json_body=payload,
                headers={"Prefer": "return=representation"},
            ),
            "lesson_plans",
        )
        # PostgREST answers an unmatched filter with an empty list
        if not data:
            raise StoreError(f"Lesson plan {plan_id} not found")
        logger.info("Updated lesson plan %s", plan_id)
        return data[0]

    # -- roster -------------------------------------------------------------

    def fetch_teachers(self) -> list[dict[str, Any]]:
        params = {"select": "id,name", "role": f"eq.{TEACHER_ROLE}", "order": "name"}
        return self._rows(self._request("GET", "profiles", params=params), "profiles")

    def fetch_class_assignments(self) -> list[dict[str, Any]]:
        params = {"select": "teacher_id,class_id,class:classes(id,name)"}
        return self._rows(self._request("GET", "class_teachers", params=params), "class_teachers")

    def fetch_planning_overview(self, function: str, start: date, end: date) -> list[dict[str, Any]]:
        """
        Server-side aggregation, same shape as overview.build_overview() output.
        """
        body = {"start_date": start.isoformat(), "end_date": end.isoformat()}
        return self._rows(self._request("POST", f"rpc/{function}", json_body=body), function)

    # -- policy -------------------------------------------------------------

    def fetch_policy(self, school_id: str) -> Optional[dict[str, Any]]:
        params = {"select": "*", "school_id": f"eq.{school_id}", "limit": "1"}
        rows = self._rows(self._request("GET", "planning_config", params=params), "planning_config")
        return rows[0] if rows else None

    def upsert_policy(self, school_id: str, record: dict[str, Any]) -> dict[str, Any]:
        payload = {k: v for k, v in record.items() if k != "id"}
        payload["school_id"] = school_id
        rows = self._rows(
            self._request(
                "POST",
                "planning_config",
                params={"on_conflict": "school_id"},
                json_body=payload,
                headers={"Prefer": "resolution=merge-duplicates,return=representation"},
            ),
            "planning_config",
        )
        if not rows:
            raise StoreError("planning_config upsert returned no row")
        logger.info("Saved planning policy for school %s", school_id)
        return rows[0]
