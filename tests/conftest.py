import json as jsonlib
import os
import sys
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlsplit

import pytest
import requests

# Path setup before any project imports to satisfy E402
ROOT = os.path.dirname(__file__)
PARENT = os.path.abspath(os.path.join(ROOT, ".."))
if PARENT not in sys.path:  # pragma: no cover - environment dependent
    sys.path.insert(0, PARENT)

API_BASE = "http://api.test"


def _lazy_imports():
    from taskwise.app_factory import create_app  # noqa: E402

    return create_app


def make_response(status: int = 200, body: Any = None) -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp._content = b"" if body is None else jsonlib.dumps(body).encode("utf-8")
    resp.headers["Content-Type"] = "application/json"
    return resp


@dataclass
class ApiCall:
    method: str
    path: str
    params: dict | None = None
    json: dict | None = None
    headers: dict = field(default_factory=dict)


class FakeApi:
    """Stands in for ``requests.request`` and routes on (method, path).

    A route is either ``(status, body)``, a callable taking the :class:`ApiCall`
    and returning ``(status, body)``, or an exception instance to raise.
    Unknown routes answer 404.
    """

    def __init__(self):
        self.routes: dict[tuple[str, str], Any] = {}
        self.calls: list[ApiCall] = []

    def on(self, method: str, path: str, status: int = 200, body: Any = None, handler: Any = None) -> "FakeApi":
        self.routes[(method.upper(), path)] = handler if handler is not None else (status, body)
        return self

    def __call__(self, method, url, headers=None, params=None, json=None, **_kw):
        call = ApiCall(method.upper(), urlsplit(url).path, params, json, dict(headers or {}))
        self.calls.append(call)
        route = self.routes.get((call.method, call.path))
        if route is None:
            return make_response(404, {"message": f"Rota {call.path} não encontrada"})
        if isinstance(route, BaseException):
            raise route
        if callable(route):
            route = route(call)
        status, body = route
        return make_response(status, body)

    def calls_to(self, method: str, path: str) -> list[ApiCall]:
        return [c for c in self.calls if c.method == method.upper() and c.path == path]

    def last(self, method: str, path: str) -> ApiCall:
        matching = self.calls_to(method, path)
        assert matching, f"no {method} {path} call recorded"
        return matching[-1]


@pytest.fixture
def app():
    create_app = _lazy_imports()
    return create_app({"TESTING": True, "SECRET_KEY": "test", "api_base_url": API_BASE, "default_timezone": None})


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def fake_api(monkeypatch):
    fake = FakeApi()
    monkeypatch.setattr("taskwise.api_client.requests.request", fake)
    return fake


def login(client, role: str = "member", user_id: str = "u1", tz: str | None = None, token: str = "tok-123"):
    with client.session_transaction() as sess:
        sess["token"] = token
        sess["user"] = {"id": user_id, "name": "Ana", "email": "ana@example.com", "role": role}
        if tz:
            sess["tz"] = tz


def flashes(client) -> list[dict]:
    """Messages queued for the next render, left in place."""
    with client.session_transaction() as sess:
        return [{"type": kind, "message": message} for kind, message in sess.get("_flashes") or []]


@pytest.fixture
def member_client(client):
    login(client, role="member")
    return client


@pytest.fixture
def admin_client(client):
    login(client, role="Admin", user_id="adm1")
    return client
