"""View-model assembly shared by the dashboard, task and sprint pages."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from flask import current_app

from .api_client import ApiClient, ApiError, items_of
from .roles import is_admin

logger = logging.getLogger("taskwise.viewmodels")

DONE_STATUS = "Concluída"
BLOCKED_STATUS = "Bloqueada"
STARTED_SPRINT = "Started"

RISK_OPTIONS = ["Baixo", "Médio", "Alto"]
COMPLEXITY_OPTIONS = ["Baixa", "Média", "Alta"]
STATUS_OPTIONS = ["Criada", "Em andamento", BLOCKED_STATUS, DONE_STATUS]

ALL_TASKS_PAGE = {"page": 1, "pageSize": 1000}


def empty_task_page(page: int = 1, page_size: int = 10) -> dict[str, Any]:
    return {"items": [], "page": page, "pageSize": page_size, "total": 0, "totalPages": 0}


def select_sprint(sprints: Sequence[Mapping[str, Any]], sprint_id: str | None = None) -> Mapping[str, Any] | None:
    """Explicit ``sprint_id``, else the started sprint, else the first one."""
    if sprint_id:
        for s in sprints:
            if str(s.get("id")) == str(sprint_id):
                return s
    for s in sprints:
        if s.get("status") == STARTED_SPRINT:
            return s
    return sprints[0] if sprints else None


def needs_details(task: Mapping[str, Any]) -> bool:
    return task.get("totalHours") is None or task.get("totalDays") is None or not task.get("dueDate")


def _fetch_detail(api: ApiClient, task_id: Any) -> dict[str, Any] | None:
    try:
        detail = api.get(f"/tasks/{task_id}")
    except ApiError as e:
        logger.warning("Task detail fetch failed task_id=%s status=%s: %s", task_id, e.status, e.message)
        return None
    return detail if isinstance(detail, dict) else None


def enrich_tasks(api: ApiClient, tasks: Sequence[dict[str, Any]], max_workers: int | None = None) -> list[dict[str, Any]]:
    """Fill in totals/due dates the list endpoint left out.

    Incomplete items are fetched one by one in parallel; each detail record is
    merged over its list item by id. Items whose fetch fails are kept as they
    came.
    """
    incomplete = [t for t in tasks if needs_details(t) and t.get("id") is not None]
    if not incomplete:
        return list(tasks)
    if max_workers is None:
        max_workers = int(current_app.config.get("ENRICH_MAX_WORKERS", 8))
    with ThreadPoolExecutor(max_workers=min(max_workers, len(incomplete))) as pool:
        details = list(pool.map(lambda t: _fetch_detail(api, t["id"]), incomplete))
    by_id = {str(d.get("id")): d for d in details if d and d.get("id") is not None}
    return [{**t, **by_id[str(t.get("id"))]} if str(t.get("id")) in by_id else t for t in tasks]


def pending_by_sprint(tasks: Iterable[Mapping[str, Any]]) -> dict[str, bool]:
    """``{sprintId: True}`` for every sprint holding a task not yet done."""
    pending: dict[str, bool] = {}
    for t in tasks:
        sid = t.get("sprintId")
        if sid and t.get("status") != DONE_STATUS:
            pending[str(sid)] = True
    return pending


def has_pending(tasks: Iterable[Mapping[str, Any]]) -> bool:
    return any(t.get("status") != DONE_STATUS for t in tasks)


def without_sprint(tasks: Iterable[Mapping[str, Any]]) -> list[Mapping[str, Any]]:
    return [t for t in tasks if not t.get("sprintId")]


def _reduce_user(u: Mapping[str, Any]) -> dict[str, Any]:
    return {"id": u.get("id"), "name": u.get("name"), "email": u.get("email"), "role": u.get("role")}


def available_users(api: ApiClient, current_user: Mapping[str, Any] | None) -> list[dict[str, Any]]:
    """Users that can be picked as assignee.

    Older API builds lack ``/users/available``; admins then fall back to the
    full user list.
    """
    try:
        return items_of(api.get("/users/available"))
    except ApiError as e:
        if e.status == 404 and is_admin(current_user):
            try:
                return [_reduce_user(u) for u in items_of(api.get("/users"))]
            except ApiError as fallback_err:
                logger.warning("Admin user list fallback failed status=%s", fallback_err.status)
                return []
        logger.warning("Available users fetch failed status=%s: %s", e.status, e.message)
        return []


def task_form_options() -> dict[str, list[str]]:
    return {"riskOptions": list(RISK_OPTIONS), "complexityOptions": list(COMPLEXITY_OPTIONS)}
