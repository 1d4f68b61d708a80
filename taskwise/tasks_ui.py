"""Task pages: list with filters, create/edit form, status, assignee, delete."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, flash, redirect, render_template, request, url_for
from flask.typing import ResponseReturnValue

from . import messages
from .api_client import ApiError, items_of, session_api
from .app_authz import admin_required, login_required
from .app_sessions import get_user
from .errors import failure_message
from .pert import validate_form
from .viewmodels import (
    BLOCKED_STATUS,
    STATUS_OPTIONS,
    available_users,
    empty_task_page,
    enrich_tasks,
    task_form_options,
)

bp = Blueprint("tasks_ui", __name__, url_prefix="/tasks")

FILTER_KEYS = ("status", "sprintId", "risco", "complexidade", "assigneeId")
DEFAULT_PAGE_SIZE = 10

PERT_FAILED = "Validação PERT falhou: garanta O ≤ M ≤ P em todas as fases."


def _int_arg(name: str, default: int) -> int:
    raw = request.args.get(name)
    try:
        value = int(raw) if raw else default
    except ValueError:
        return default
    return value if value >= 1 else default


def _list_params() -> dict[str, Any]:
    params: dict[str, Any] = {k: (request.args.get(k) or None) for k in FILTER_KEYS}
    params["page"] = _int_arg("page", 1)
    params["pageSize"] = _int_arg("pageSize", DEFAULT_PAGE_SIZE)
    return params


def _page_url(params: dict[str, Any], page: int) -> str:
    args = {k: v for k, v in params.items() if v is not None}
    args["page"] = page
    return url_for("tasks_ui.list_tasks", **args)


def _pager(params: dict[str, Any], data: dict[str, Any]) -> dict[str, str | None]:
    page = params["page"]
    total_pages = int(data.get("totalPages") or 0)
    return {
        "prev_url": _page_url(params, page - 1) if page > 1 else None,
        "next_url": _page_url(params, page + 1) if page < total_pages else None,
    }


def _task_payload(phases: dict[str, Any]) -> dict[str, Any]:
    form = request.form
    return {
        "title": form.get("title"),
        "description": form.get("description") or None,
        "risco": form.get("risco") or None,
        "complexidade": form.get("complexidade") or None,
        "sprintId": form.get("sprintId") or None,
        "phases": phases,
    }


@bp.get("")
@login_required
def list_tasks() -> ResponseReturnValue:
    params = _list_params()
    api = session_api()
    try:
        data = api.get("/tasks", params=params) or {}
        data = dict(data, items=enrich_tasks(api, items_of(data)))
        sprints = items_of(api.get("/sprints"))
    except ApiError as err:
        flash(failure_message("carregar tarefas", err), "danger")
        return render_template(
            "tasks/list.html",
            title="Tarefas - TaskWise",
            data=empty_task_page(),
            sprints=[],
            users=[],
            filters=params,
            statusOptions=STATUS_OPTIONS,
            prev_url=None,
            next_url=None,
            **task_form_options(),
        )
    users = available_users(api, get_user())
    return render_template(
        "tasks/list.html",
        title="Tarefas - TaskWise",
        data=data,
        sprints=sprints,
        users=users,
        filters=params,
        statusOptions=STATUS_OPTIONS,
        **_pager(params, data),
        **task_form_options(),
    )


@bp.get("/new")
@login_required
def new_task() -> ResponseReturnValue:
    api = session_api()
    try:
        sprints = items_of(api.get("/sprints"))
    except ApiError as err:
        flash(failure_message("carregar formulário", err), "danger")
        return redirect(url_for("tasks_ui.list_tasks"))
    return render_template(
        "tasks/form.html",
        title="Nova Tarefa - TaskWise",
        task=None,
        sprints=sprints,
        users=available_users(api, get_user()),
        statusOptions=STATUS_OPTIONS,
        **task_form_options(),
    )


@bp.post("")
@login_required
def create_task() -> ResponseReturnValue:
    pert = validate_form(request.form)
    if not pert.valid:
        flash(PERT_FAILED, "warning")
        return redirect(url_for("tasks_ui.new_task"))
    try:
        session_api().post("/tasks", _task_payload(pert.phases))
    except ApiError as err:
        flash(failure_message("criar tarefa", err, messages.describe(err, messages.TASK_CREATE)), "danger")
        return redirect(url_for("tasks_ui.new_task"))
    flash("Tarefa criada com sucesso", "success")
    return redirect(url_for("tasks_ui.list_tasks"))


@bp.get("/<task_id>")
@login_required
def task_detail(task_id: str) -> ResponseReturnValue:
    api = session_api()
    try:
        task = api.get(f"/tasks/{task_id}") or {}
        sprints = items_of(api.get("/sprints"))
    except ApiError as err:
        flash(failure_message("carregar a tarefa", err), "danger")
        return redirect(url_for("tasks_ui.list_tasks"))
    return render_template(
        "tasks/form.html",
        title=f"Tarefa {task.get('title', '')} - TaskWise",
        task=task,
        sprints=sprints,
        users=available_users(api, get_user()),
        statusOptions=STATUS_OPTIONS,
        **task_form_options(),
    )


@bp.post("/<task_id>")
@login_required
def update_task(task_id: str) -> ResponseReturnValue:
    detail_url = url_for("tasks_ui.task_detail", task_id=task_id)
    pert = validate_form(request.form)
    if not pert.valid:
        flash(PERT_FAILED, "warning")
        return redirect(detail_url)
    try:
        session_api().put(f"/tasks/{task_id}", _task_payload(pert.phases))
    except ApiError as err:
        flash(failure_message("atualizar tarefa", err, messages.describe(err, messages.TASK_UPDATE)), "danger")
        return redirect(detail_url)
    flash("Tarefa atualizada", "success")
    return redirect(detail_url)


@bp.post("/<task_id>/delete")
@login_required
@admin_required
def delete_task(task_id: str) -> ResponseReturnValue:
    try:
        session_api().delete(f"/tasks/{task_id}")
    except ApiError as err:
        flash(failure_message("excluir tarefa", err, messages.describe(err, messages.TASK_DELETE)), "danger")
        return redirect(url_for("tasks_ui.task_detail", task_id=task_id))
    flash("Tarefa excluída com sucesso", "success")
    return redirect(url_for("tasks_ui.list_tasks"))


@bp.post("/<task_id>/status")
@login_required
def change_status(task_id: str) -> ResponseReturnValue:
    detail_url = url_for("tasks_ui.task_detail", task_id=task_id)
    desired = request.form.get("status") or ""
    reason = (request.form.get("motivo") or "").strip()
    responsible = (request.form.get("responsavelId") or "").strip()
    api = session_api()
    try:
        current = (api.get(f"/tasks/{task_id}") or {}).get("status")
        is_blocking = desired == BLOCKED_STATUS and bool(reason) and bool(responsible)
        if desired == current and not is_blocking:
            flash("Nenhuma alteração de status para aplicar.", "info")
            return redirect(detail_url)
        if desired == BLOCKED_STATUS and not is_blocking:
            flash("Para bloquear, informe o motivo e o responsável pelo desbloqueio.", "warning")
            return redirect(detail_url)
        payload: dict[str, Any] = {"status": desired}
        if is_blocking:
            payload["block"] = {"motivo": reason, "responsavelId": responsible}
        api.patch(f"/tasks/{task_id}/status", payload)
    except ApiError as err:
        flash(failure_message("alterar status", err, messages.describe(err, messages.TASK_STATUS)), "danger")
        return redirect(detail_url)
    flash("Status atualizado", "success")
    return redirect(detail_url)


@bp.post("/<task_id>/assign")
@login_required
def assign_task(task_id: str) -> ResponseReturnValue:
    detail_url = url_for("tasks_ui.task_detail", task_id=task_id)
    user_id = (request.form.get("assigneeId") or "").strip()
    if not user_id:
        flash("Selecione um responsável.", "warning")
        return redirect(detail_url)
    try:
        session_api().patch(f"/tasks/{task_id}/assign/{user_id}")
    except ApiError as err:
        flash(failure_message("definir responsável", err), "danger")
        return redirect(detail_url)
    flash("Responsável atualizado", "success")
    return redirect(detail_url)
