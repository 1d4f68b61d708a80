"""HTTP client for the upstream TaskWise REST API.

Every outbound call carries ``X-Timezone`` and, when a session token exists,
``Authorization: Bearer <token>``. Non-2xx answers and transport failures are
raised as :class:`ApiError`; callers decide how to degrade.
"""

from __future__ import annotations

import logging
from typing import Any

import requests
from flask import current_app

from .app_sessions import get_timezone, get_token

logger = logging.getLogger("taskwise.api")

FALLBACK_TIMEZONE = "UTC"


class ApiError(Exception):
    """Upstream call failed (HTTP error status or unreachable API)."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        payload: Any = None,
        unreachable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.payload = payload
        self.unreachable = unreachable

    @classmethod
    def from_response(cls, resp: requests.Response) -> ApiError:
        try:
            payload = resp.json()
        except ValueError:
            payload = None
        message = extract_message(payload) or f"Request failed with status code {resp.status_code}"
        return cls(message, status=resp.status_code, payload=payload)


def extract_message(payload: Any) -> str | None:
    """Pull a human readable message out of an API error body.

    The API answers either ``[{"message": ..., "code": ...}, ...]`` (validation
    errors) or ``{"message": ...}`` / ``{"error": ...}``.
    """
    if isinstance(payload, list):
        first = payload[0] if payload else None
        if isinstance(first, dict):
            msg = first.get("message") or first.get("code")
            return str(msg) if msg else None
        return None
    if isinstance(payload, dict):
        msg = payload.get("message") or payload.get("error")
        return str(msg) if msg else None
    return None


def compact(data: dict[str, Any] | None) -> dict[str, Any] | None:
    """Drop keys whose value is None (nested dicts included)."""
    if data is None:
        return None
    out: dict[str, Any] = {}
    for k, v in data.items():
        if isinstance(v, dict):
            v = compact(v)
        if v is not None:
            out[k] = v
    return out


def resolve_timezone(timezone: str | None, default: str | None) -> str:
    return timezone or default or FALLBACK_TIMEZONE


class ApiClient:
    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timezone: str | None = None,
        *,
        default_timezone: str | None = None,
        timeout: float | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers: dict[str, str] = {
            "Accept": "application/json",
            "X-Timezone": resolve_timezone(timezone, default_timezone),
        }
        if token:
            self.headers["Authorization"] = f"Bearer {token}"

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        url = self.url(path)
        try:
            resp = requests.request(
                method=method,
                url=url,
                headers=dict(self.headers),
                params=compact(params),
                json=compact(json),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("API unreachable method=%s url=%s error=%s", method, url, e)
            raise ApiError(
                f"Não foi possível conectar à API. Verifique se está rodando em {self.base_url}",
                unreachable=True,
            ) from e
        if resp.status_code >= 400:
            err = ApiError.from_response(resp)
            logger.info("API error method=%s path=%s status=%s message=%s", method, path, err.status, err.message)
            raise err
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError:
            return None

    def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: dict[str, Any] | None = None) -> Any:
        return self.request("POST", path, json=json)

    def put(self, path: str, json: dict[str, Any] | None = None) -> Any:
        return self.request("PUT", path, json=json)

    def patch(self, path: str, json: dict[str, Any] | None = None) -> Any:
        return self.request("PATCH", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)


def api_client(token: str | None = None, timezone: str | None = None) -> ApiClient:
    cfg = current_app.config
    return ApiClient(
        cfg["API_BASE_URL"],
        token,
        timezone,
        default_timezone=cfg.get("DEFAULT_TIMEZONE"),
        timeout=cfg.get("API_TIMEOUT_SECONDS"),
    )


def session_api() -> ApiClient:
    """Client scoped to the current session's token and timezone."""
    return api_client(get_token(), get_timezone())


def items_of(data: Any) -> list[dict[str, Any]]:
    """List payloads come wrapped as ``{"items": [...], ...}``."""
    if isinstance(data, dict):
        return list(data.get("items") or [])
    return []
