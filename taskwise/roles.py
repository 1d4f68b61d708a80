"""Roles known to the upstream API.

Only ``Admin`` unlocks anything locally; every other value is a regular member.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

Role = Literal["Admin", "member"]

ADMIN: Role = "Admin"
MEMBER: Role = "member"


def is_admin(user: Mapping[str, Any] | None) -> bool:
    return bool(user) and user.get("role") == ADMIN  # type: ignore[union-attr]


__all__ = ["Role", "ADMIN", "MEMBER", "is_admin"]
