from __future__ import annotations

from flask import Blueprint, current_app, flash, jsonify, redirect, render_template, request, url_for
from flask.typing import ResponseReturnValue

from . import messages
from .api_client import ApiError, extract_message, items_of, session_api
from .app_authz import admin_required, json_login_required, login_required
from .errors import failure_message, json_error

bp = Blueprint("users_ui", __name__, url_prefix="/users")


def _me_error_message(err: ApiError) -> str:
    base = current_app.config["API_BASE_URL"]
    if err.status == 404:
        return f"Endpoint não encontrado na API. Verifique se a API está rodando em {base}"
    if err.status == 401:
        return "Token inválido ou expirado. Faça login novamente."
    if err.unreachable:
        return f"Não foi possível conectar à API. Verifique se está rodando em {base}"
    if err.payload is not None:
        return extract_message(err.payload) or "Erro na API"
    return err.message or "Erro desconhecido"


@bp.get("/me")
@json_login_required
def me() -> ResponseReturnValue:
    """Current user as JSON, for page scripts. Never redirects."""
    try:
        data = session_api().get("/users/me")
    except ApiError as err:
        return json_error(_me_error_message(err), err.status or 500)
    if data is None:
        return json_error("Resposta inválida da API", 500)
    return jsonify(data)


@bp.get("")
@login_required
@admin_required
def list_users() -> ResponseReturnValue:
    try:
        users = items_of(session_api().get("/users"))
    except ApiError as err:
        flash(failure_message("carregar usuários", err), "danger")
        users = []
    return render_template("users/list.html", title="Usuários - TaskWise", users=users)


@bp.get("/new")
@login_required
@admin_required
def new_user() -> ResponseReturnValue:
    return render_template("users/new.html", title="Novo Usuário - TaskWise", action_path=url_for("users_ui.create_user"))


@bp.post("")
@login_required
@admin_required
def create_user() -> ResponseReturnValue:
    payload = {
        "name": request.form.get("name"),
        "email": request.form.get("email"),
        "password": request.form.get("password"),
    }
    try:
        session_api().post("/users", payload)
    except ApiError as err:
        flash(failure_message("criar usuário", err, messages.describe(err, messages.USER_VALIDATION)), "danger")
        return redirect(url_for("users_ui.new_user"))
    flash("Usuário criado com sucesso", "success")
    return redirect(url_for("users_ui.list_users"))
