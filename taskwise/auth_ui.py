"""Login, signup, logout, timezone and liveness endpoints (no session token required)."""

from __future__ import annotations

from flask import Blueprint, current_app, flash, jsonify, redirect, render_template, request, url_for
from flask.typing import ResponseReturnValue

from . import messages
from .api_client import ApiError, api_client
from .app_sessions import clear_session, get_timezone, get_token, persist_login, set_timezone
from .errors import failure_message

bp = Blueprint("auth_ui", __name__)


@bp.get("/login")
def login() -> ResponseReturnValue:
    if get_token():
        return redirect(url_for("dashboard.dashboard_home"))
    return render_template("login.html", title="Login - TaskWise")


@bp.post("/login")
def login_submit() -> ResponseReturnValue:
    email = (request.form.get("email") or "").strip()
    password = request.form.get("password") or ""
    if not email or not password:
        flash("Informe e-mail e senha.", "warning")
        return redirect(url_for("auth_ui.login"))
    try:
        data = api_client(None, get_timezone()).post("/auth/login", {"email": email, "password": password}) or {}
    except ApiError as err:
        flash(f"Login falhou ({err.status or 'erro'}): {err.message}", "danger")
        return redirect(url_for("auth_ui.login"))
    token = data.get("token")
    if not token:
        flash("Login falhou (erro): resposta da API sem token.", "danger")
        return redirect(url_for("auth_ui.login"))
    persist_login(token, data.get("user"))
    current_app.logger.info("Login ok email=%s", email)
    return redirect(url_for("dashboard.dashboard_home"))


@bp.get("/signup")
def signup() -> ResponseReturnValue:
    if get_token():
        return redirect(url_for("dashboard.dashboard_home"))
    return render_template("users/new.html", title="Criar conta - TaskWise", action_path=url_for("auth_ui.signup_submit"))


@bp.post("/signup")
def signup_submit() -> ResponseReturnValue:
    payload = {
        "name": request.form.get("name"),
        "email": request.form.get("email"),
        "password": request.form.get("password"),
    }
    try:
        # public endpoint: no token even if one happens to be in session
        api_client(None, get_timezone()).post("/users", payload)
    except ApiError as err:
        flash(failure_message("criar conta", err, messages.describe(err, messages.USER_VALIDATION)), "danger")
        return redirect(url_for("auth_ui.signup"))
    flash("Conta criada com sucesso. Faça login.", "success")
    return redirect(url_for("auth_ui.login"))


@bp.post("/logout")
def logout() -> ResponseReturnValue:
    clear_session()
    return redirect(url_for("auth_ui.login"))


@bp.post("/tz")
def set_tz() -> ResponseReturnValue:
    body = request.get_json(silent=True) if request.is_json else None
    tz = (body or {}).get("tz") if isinstance(body, dict) else request.form.get("tz")
    if tz:
        set_timezone(str(tz))
    return jsonify({"ok": True, "tz": get_timezone()})


@bp.get("/healthz")
def healthz() -> ResponseReturnValue:
    # the upstream API is not probed
    return jsonify({"status": "ok"})
