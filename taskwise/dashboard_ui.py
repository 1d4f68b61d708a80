from __future__ import annotations

from flask import Blueprint, current_app, flash, redirect, render_template, request, url_for
from flask.typing import ResponseReturnValue

from .api_client import ApiError, items_of, session_api
from .app_authz import login_required
from .errors import failure_message
from .viewmodels import select_sprint

bp = Blueprint("dashboard", __name__)


@bp.get("/")
@login_required
def root_redirect() -> ResponseReturnValue:
    return redirect(url_for("dashboard.dashboard_home"))


@bp.get("/dashboard")
@login_required
def dashboard_home() -> ResponseReturnValue:
    """Selected sprint plus its summary.

    The sprint and summary sub-fetches degrade on their own; only a failing
    sprint list empties the page.
    """
    api = session_api()
    try:
        sprints = items_of(api.get("/sprints"))
    except ApiError as err:
        flash(failure_message("carregar dashboard", err), "danger")
        return render_template(
            "dashboard.html", title="Dashboard - TaskWise", sprints=[], selected_sprint=None, summary=None
        )

    selected = select_sprint(sprints, request.args.get("sprintId"))
    selected_sprint = None
    summary = None
    if selected:
        # list copies can be stale right after start/capacity changes
        try:
            selected_sprint = api.get(f"/sprints/{selected['id']}") or selected
        except ApiError as err:
            current_app.logger.warning("Sprint re-fetch failed id=%s status=%s", selected.get("id"), err.status)
            selected_sprint = selected
        try:
            summary = api.get("/dashboard/summary", params={"sprintId": selected["id"]})
        except ApiError as err:
            current_app.logger.warning("Dashboard summary failed sprintId=%s status=%s", selected.get("id"), err.status)
            summary = None
    return render_template(
        "dashboard.html",
        title="Dashboard - TaskWise",
        sprints=sprints,
        selected_sprint=selected_sprint,
        summary=summary,
    )
