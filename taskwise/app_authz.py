"""Authorization decorators for UI routes.

``login_required`` bounces anonymous sessions to the login page,
``admin_required`` (stacked below it) sends non-admins back where they came
from with a warning, and ``json_login_required`` answers 401 JSON for
script-facing endpoints.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import ParamSpec, TypeVar
from urllib.parse import urlsplit

from flask import flash, redirect, request, url_for
from flask.typing import ResponseReturnValue

from .app_sessions import get_token, get_user
from .errors import json_error
from .roles import is_admin

P = ParamSpec("P")
R = TypeVar("R")

ADMIN_ONLY_MESSAGE = "Ação restrita a Admin."
UNAUTHENTICATED_MESSAGE = "Não autenticado. Faça login novamente."


def back_url(default_endpoint: str = "dashboard.dashboard_home") -> str:
    """Referer when it points at this host, otherwise ``default_endpoint``."""
    ref = request.referrer
    if ref:
        parts = urlsplit(ref)
        if not parts.netloc or parts.netloc == request.host:
            return ref
    return url_for(default_endpoint)


def login_required(fn: Callable[P, R]) -> Callable[P, R | ResponseReturnValue]:
    @wraps(fn)
    def wrapper(*args: P.args, **kwargs: P.kwargs):  # type: ignore[no-untyped-def]
        if not get_token():
            return redirect(url_for("auth_ui.login"))
        return fn(*args, **kwargs)

    return wrapper


def admin_required(fn: Callable[P, R]) -> Callable[P, R | ResponseReturnValue]:
    @wraps(fn)
    def wrapper(*args: P.args, **kwargs: P.kwargs):  # type: ignore[no-untyped-def]
        if not is_admin(get_user()):
            flash(ADMIN_ONLY_MESSAGE, "warning")
            return redirect(back_url())
        return fn(*args, **kwargs)

    return wrapper


def json_login_required(fn: Callable[P, R]) -> Callable[P, R | ResponseReturnValue]:
    @wraps(fn)
    def wrapper(*args: P.args, **kwargs: P.kwargs):  # type: ignore[no-untyped-def]
        if not get_token():
            return json_error(UNAUTHENTICATED_MESSAGE, 401)
        return fn(*args, **kwargs)

    return wrapper
