"""Sprint pages. Reads are open to any member; every mutation is Admin-only."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, flash, redirect, render_template, request, url_for
from flask.typing import ResponseReturnValue

from . import messages
from .api_client import ApiError, items_of, session_api
from .app_authz import admin_required, login_required
from .errors import failure_message
from .messages import StatusMessages
from .viewmodels import ALL_TASKS_PAGE, enrich_tasks, has_pending, pending_by_sprint, without_sprint

bp = Blueprint("sprints_ui", __name__, url_prefix="/sprints")

CAPACITY_LEVELS = ("junior", "pleno", "senior")


class CapacityError(ValueError):
    pass


def _task_ids() -> list[str]:
    return [t for t in request.form.getlist("taskIds") if t]


def _capacity() -> dict[str, int | float | None]:
    out: dict[str, int | float | None] = {}
    for level in CAPACITY_LEVELS:
        raw = (request.form.get(level) or "").strip()
        if not raw:
            out[level] = None
            continue
        try:
            value = float(raw)
        except ValueError as e:
            raise CapacityError(level) from e
        out[level] = int(value) if value.is_integer() else value
    return out


def _sprint_action(
    sprint_id: str,
    path: str,
    action: str,
    success: str,
    table: StatusMessages | None = None,
    payload: dict[str, Any] | None = None,
    back: str = "detail",
) -> ResponseReturnValue:
    target = (
        url_for("sprints_ui.sprint_detail", sprint_id=sprint_id)
        if back == "detail"
        else url_for("sprints_ui.list_sprints")
    )
    try:
        session_api().patch(path, payload)
    except ApiError as err:
        flash(failure_message(action, err, messages.describe(err, table)), "danger")
        return redirect(target)
    flash(success, "success")
    return redirect(target)


@bp.get("")
@login_required
def list_sprints() -> ResponseReturnValue:
    api = session_api()
    try:
        sprints = items_of(api.get("/sprints"))
        tasks_all = items_of(api.get("/tasks", params=ALL_TASKS_PAGE))
    except ApiError as err:
        flash(failure_message("carregar sprints", err), "danger")
        return render_template("sprints/list.html", title="Sprints - TaskWise", sprints=[], tasks=[], pending_by_sprint={})
    return render_template(
        "sprints/list.html",
        title="Sprints - TaskWise",
        sprints=sprints,
        tasks=without_sprint(tasks_all),
        pending_by_sprint=pending_by_sprint(tasks_all),
    )


@bp.get("/<sprint_id>")
@login_required
def sprint_detail(sprint_id: str) -> ResponseReturnValue:
    api = session_api()
    try:
        sprint = api.get(f"/sprints/{sprint_id}") or {}
        in_sprint = items_of(api.get("/tasks", params={"sprintId": sprint.get("id", sprint_id), **ALL_TASKS_PAGE}))
        in_sprint = enrich_tasks(api, in_sprint)
        available = without_sprint(items_of(api.get("/tasks", params=ALL_TASKS_PAGE)))
    except ApiError as err:
        flash(failure_message("carregar sprint", err), "danger")
        return redirect(url_for("sprints_ui.list_sprints"))
    return render_template(
        "sprints/detail.html",
        title=f"Sprint {sprint.get('name', '')} - TaskWise",
        sprint=sprint,
        tasks_in_sprint=in_sprint,
        tasks_without_sprint=available,
        has_pending=has_pending(in_sprint),
    )


@bp.post("")
@login_required
@admin_required
def create_sprint() -> ResponseReturnValue:
    try:
        capacity = _capacity()
    except CapacityError:
        flash("Capacidade deve ser numérica.", "warning")
        return redirect(url_for("sprints_ui.list_sprints"))
    payload: dict[str, Any] = {
        "name": request.form.get("name"),
        "taskIds": _task_ids(),
        "capacity": capacity if any(v is not None for v in capacity.values()) else None,
    }
    try:
        session_api().post("/sprints", payload)
    except ApiError as err:
        flash(failure_message("criar sprint", err), "danger")
        return redirect(url_for("sprints_ui.list_sprints"))
    flash("Sprint criada", "success")
    return redirect(url_for("sprints_ui.list_sprints"))


@bp.post("/<sprint_id>/start")
@login_required
@admin_required
def start_sprint(sprint_id: str) -> ResponseReturnValue:
    return _sprint_action(
        sprint_id, f"/sprints/{sprint_id}/start", "iniciar sprint", "Sprint iniciada", messages.SPRINT_START, back="list"
    )


@bp.post("/<sprint_id>/close")
@login_required
@admin_required
def close_sprint(sprint_id: str) -> ResponseReturnValue:
    return _sprint_action(
        sprint_id, f"/sprints/{sprint_id}/close", "encerrar sprint", "Sprint encerrada", messages.SPRINT_CLOSE, back="list"
    )


@bp.post("/<sprint_id>/capacity")
@login_required
@admin_required
def set_capacity(sprint_id: str) -> ResponseReturnValue:
    try:
        capacity = _capacity()
    except CapacityError:
        flash("Capacidade deve ser numérica.", "warning")
        return redirect(url_for("sprints_ui.sprint_detail", sprint_id=sprint_id))
    return _sprint_action(
        sprint_id, f"/sprints/{sprint_id}/capacity", "definir capacidade", "Capacidade atualizada", payload=capacity
    )


@bp.post("/<sprint_id>/tasks")
@login_required
@admin_required
def add_tasks(sprint_id: str) -> ResponseReturnValue:
    return _sprint_action(
        sprint_id,
        f"/sprints/{sprint_id}/tasks",
        "adicionar tarefas",
        "Tarefas adicionadas à sprint",
        messages.SPRINT_ADD_TASKS,
        payload={"taskIds": _task_ids()},
    )


@bp.post("/<sprint_id>/tasks/remove")
@login_required
@admin_required
def remove_tasks(sprint_id: str) -> ResponseReturnValue:
    return _sprint_action(
        sprint_id,
        f"/sprints/{sprint_id}/tasks/remove",
        "remover tarefas",
        "Tarefas removidas da sprint",
        messages.SPRINT_REMOVE_TASKS,
        payload={"taskIds": _task_ids()},
    )
