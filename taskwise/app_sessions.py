"""Session helpers.

All session access goes through these functions, each taking the session
mapping explicitly (defaulting to the Flask request session), so handlers never
poke at keys directly.
"""
from __future__ import annotations

from collections.abc import MutableMapping
from typing import Any, TypedDict, cast

from flask import session as flask_session

TOKEN_KEY = "token"
USER_KEY = "user"
TZ_KEY = "tz"


class SessionUser(TypedDict, total=False):
    id: str
    name: str
    email: str
    role: str


def persist_login(token: str, user: dict[str, Any] | None, sess: MutableMapping[str, Any] | None = None) -> None:
    """Store the API token and user returned by a successful login."""
    s = flask_session if sess is None else sess
    s[TOKEN_KEY] = token
    s[USER_KEY] = dict(user) if user else None


def get_token(sess: MutableMapping[str, Any] | None = None) -> str | None:
    s = flask_session if sess is None else sess
    token = s.get(TOKEN_KEY)
    return str(token) if token else None


def get_user(sess: MutableMapping[str, Any] | None = None) -> SessionUser | None:
    s = flask_session if sess is None else sess
    user = s.get(USER_KEY)
    if not isinstance(user, dict):
        return None
    return cast(SessionUser, user)


def get_timezone(sess: MutableMapping[str, Any] | None = None) -> str | None:
    s = flask_session if sess is None else sess
    tz = s.get(TZ_KEY)
    return str(tz) if tz else None


def set_timezone(tz: str, sess: MutableMapping[str, Any] | None = None) -> None:
    s = flask_session if sess is None else sess
    s[TZ_KEY] = str(tz)


def clear_session(sess: MutableMapping[str, Any] | None = None) -> None:
    s = flask_session if sess is None else sess
    s.clear()
