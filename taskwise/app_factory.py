"""Flask application factory.

Provides:
 - App factory with configuration override (Config field names or Flask keys)
 - Per-request hooks: request id, flash drain, ``?tz=`` capture, timing log line
 - Template context: current user, timezone, flash messages, role helper
 - Blueprint registration (auth, dashboard, tasks, sprints, users)
 - Central error handlers
"""

from __future__ import annotations

import time
import uuid
from typing import Any

from dotenv import load_dotenv
from flask import Flask, g, request
from werkzeug.wrappers.response import Response

from .app_sessions import get_timezone, get_user, set_timezone
from .auth_ui import bp as auth_ui_bp
from .config import Config
from .dashboard_ui import bp as dashboard_bp
from .errors import register_error_handlers
from .flash import FlashMailbox
from .logging_setup import configure_logging
from .roles import is_admin
from .sprints_ui import bp as sprints_ui_bp
from .tasks_ui import bp as tasks_ui_bp
from .users_ui import bp as users_ui_bp


def create_app(config_override: dict[str, Any] | None = None) -> Flask:
    load_dotenv()
    app = Flask(__name__)

    # --- Configuration ---
    cfg = Config.from_env()
    if config_override:
        known = {k: v for k, v in config_override.items() if hasattr(cfg, k)}
        if known:
            cfg.override(known)
    app.config.update(cfg.to_flask_dict())
    if config_override:
        for k, v in config_override.items():  # also allow direct Flask config keys
            if k.isupper():
                app.config[k] = v

    # --- Logging ---
    log = configure_logging(app.config["LOG_LEVEL"])

    mailbox = FlashMailbox()

    @app.before_request
    def _before_req() -> None:
        g._t0 = time.perf_counter()
        g.request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
        if request.endpoint == "static":
            g.flash = []
            return None
        # One render lifetime: whatever was queued before this request is shown now
        g.flash = mailbox.take()
        tz = request.args.get("tz")
        if tz and app.config.get("TZ_FROM_QUERY"):
            set_timezone(tz)
        return None

    @app.context_processor
    def inject_context() -> dict[str, Any]:
        user = get_user()
        # messages queued while rendering this very request belong to this page
        messages = list(getattr(g, "flash", [])) + mailbox.take()
        g.flash = messages
        return {
            "current_user": user,
            "is_admin": is_admin(user),
            "tz": get_timezone(),
            "flash_messages": messages,
        }

    @app.after_request
    def _after_req(resp: Response) -> Response:
        dur_ms = int((time.perf_counter() - getattr(g, "_t0", time.perf_counter())) * 1000)
        rid = getattr(g, "request_id", None) or str(uuid.uuid4())
        resp.headers["X-Request-Id"] = rid
        resp.headers["X-Request-Duration-ms"] = str(dur_ms)
        if "Cache-Control" not in resp.headers and request.endpoint != "static":
            resp.headers["Cache-Control"] = "no-store"
        user = get_user() or {}
        log.info(
            {
                "request_id": rid,
                "method": request.method,
                "path": request.path,
                "status": resp.status_code,
                "duration_ms": dur_ms,
                "user_id": user.get("id"),
            }
        )
        return resp

    # --- Error handling ---
    register_error_handlers(app)

    # --- Blueprints ---
    app.register_blueprint(auth_ui_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(tasks_ui_bp)
    app.register_blueprint(sprints_ui_bp)
    app.register_blueprint(users_ui_bp)

    app.logger.info("TaskWise web ready api=%s", app.config["API_BASE_URL"])
    return app


__all__ = ["create_app"]
