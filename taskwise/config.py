from __future__ import annotations

import os
from dataclasses import dataclass


def _optional_float(raw: str | None) -> float | None:
    if raw is None or not raw.strip():
        return None
    return float(raw)


@dataclass
class Config:
    secret_key: str = "taskwise-web-secret"
    api_base_url: str = "http://localhost:3000"
    default_timezone: str | None = None  # process-wide fallback for X-Timezone
    api_timeout_seconds: float | None = None  # None = transport default
    enrich_max_workers: int = 8
    tz_from_query: bool = True
    session_cookie_secure: bool = False
    log_level: str = "INFO"
    port: int = 4000

    @classmethod
    def from_env(cls) -> Config:
        return cls(
            secret_key=os.getenv("SECRET_KEY", "taskwise-web-secret"),
            api_base_url=os.getenv("API_BASE_URL", "http://localhost:3000"),
            default_timezone=os.getenv("TZ") or None,
            api_timeout_seconds=_optional_float(os.getenv("API_TIMEOUT_SECONDS")),
            enrich_max_workers=int(os.getenv("ENRICH_MAX_WORKERS", "8")),
            tz_from_query=bool(int(os.getenv("TZ_FROM_QUERY", "1"))),
            session_cookie_secure=bool(int(os.getenv("SESSION_COOKIE_SECURE", "0"))),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            port=int(os.getenv("PORT", "4000")),
        )

    def override(self, d: dict):
        for k, v in d.items():
            if hasattr(self, k):
                setattr(self, k, v)

    def to_flask_dict(self):
        return {
            "SECRET_KEY": self.secret_key,
            "API_BASE_URL": self.api_base_url.rstrip("/"),
            "DEFAULT_TIMEZONE": self.default_timezone,
            "API_TIMEOUT_SECONDS": self.api_timeout_seconds,
            "ENRICH_MAX_WORKERS": max(1, int(self.enrich_max_workers)),
            "TZ_FROM_QUERY": self.tz_from_query,
            "LOG_LEVEL": self.log_level,
            "PORT": self.port,
            # Session lives in a signed cookie; never readable from scripts
            "SESSION_COOKIE_HTTPONLY": True,
            "SESSION_COOKIE_SAMESITE": "Lax",
            "SESSION_COOKIE_SECURE": self.session_cookie_secure,
        }
