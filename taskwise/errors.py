"""Central error handling.

Route handlers recover from upstream failures themselves; the handlers here
are the safety net so the web process never answers with a bare traceback.
"""
from __future__ import annotations

import traceback
import uuid
from typing import Any

from flask import Flask, flash, jsonify, redirect, render_template, request, url_for
from werkzeug.exceptions import HTTPException
from werkzeug.wrappers.response import Response

from .api_client import ApiError

# Endpoints consumed by scripts rather than navigation
JSON_PATHS = ("/users/me", "/tz", "/healthz")


def json_error(message: str, status: int) -> tuple[Response, int]:
    return jsonify({"error": message}), status


def wants_json() -> bool:
    if request.path in JSON_PATHS:
        return True
    best = request.accept_mimetypes.best_match(["application/json", "text/html"])
    return best == "application/json" and request.accept_mimetypes[best] > request.accept_mimetypes["text/html"]


def failure_message(action: str, err: ApiError, detail: str | None = None) -> str:
    """``Falha ao <action> (<status|erro>): <detail>`` as shown in flash banners."""
    return f"Falha ao {action} ({err.status or 'erro'}): {detail or err.message}"


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ApiError)
    def _h_api(err: ApiError) -> Any:
        app.logger.warning("Unhandled upstream error path=%s status=%s: %s", request.path, err.status, err.message)
        if wants_json():
            return json_error(err.message, err.status or 502)
        flash(failure_message("processar a requisição", err), "danger")
        return redirect(url_for("dashboard.dashboard_home"))

    @app.errorhandler(HTTPException)
    def _h_http(ex: HTTPException) -> Any:
        status = ex.code or 500
        if wants_json():
            return json_error(ex.description or ex.name, status)
        return render_template("error.html", title=f"{status} - TaskWise", status=status, detail=ex.description), status

    @app.errorhandler(Exception)
    def _h_exception(ex: Exception) -> Any:
        incident_id = str(uuid.uuid4())
        app.logger.error(
            "Unhandled exception incident_id=%s path=%s\n%s", incident_id, request.path, traceback.format_exc()
        )
        if wants_json():
            resp, _ = json_error("Erro interno", 500)
            resp.headers["X-Incident-Id"] = incident_id
            return resp, 500
        return (
            render_template(
                "error.html",
                title="Erro - TaskWise",
                status=500,
                detail="Erro interno inesperado.",
                incident_id=incident_id,
            ),
            500,
        )


__all__ = ["json_error", "failure_message", "register_error_handlers", "wants_json"]
