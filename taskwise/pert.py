"""PERT estimate validation for task forms.

Each of the four phases carries optimistic/most-likely/pessimistic hours and
must satisfy ``O <= M <= P`` with all three numeric. The API re-checks; this
only keeps obviously bad forms from leaving the browser session.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

# phase name -> form field prefix
PHASES: dict[str, str] = {
    "analiseModelagem": "am",
    "execucao": "ex",
    "reteste": "re",
    "documentacao": "do",
}
POINTS = ("O", "M", "P")


@dataclass(frozen=True)
class PhaseViolation:
    phase: str
    reason: str


@dataclass
class PertResult:
    phases: dict[str, dict[str, float | int]] = field(default_factory=dict)
    violations: list[PhaseViolation] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.violations


def _number(raw: Any) -> float | int | None:
    if raw is None:
        return None
    try:
        value = float(str(raw).strip().replace(",", "."))
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return int(value) if value.is_integer() else value


def phases_from_form(form: Mapping[str, Any]) -> dict[str, dict[str, Any]]:
    """Collect ``am_O``, ``ex_M``... fields into ``{phase: {O, M, P}}``."""
    return {
        phase: {point: form.get(f"{prefix}_{point}") for point in POINTS}
        for phase, prefix in PHASES.items()
    }


def validate_phases(raw_phases: Mapping[str, Mapping[str, Any] | None]) -> PertResult:
    result = PertResult()
    for phase in PHASES:
        estimate = raw_phases.get(phase) or {}
        values = {point: _number(estimate.get(point)) for point in POINTS}
        missing = [point for point, v in values.items() if v is None]
        if missing:
            result.violations.append(PhaseViolation(phase, f"valores não numéricos: {', '.join(missing)}"))
            continue
        o, m, p = values["O"], values["M"], values["P"]
        if not (o <= m <= p):  # type: ignore[operator]
            result.violations.append(PhaseViolation(phase, "esperado O ≤ M ≤ P"))
            continue
        result.phases[phase] = values  # type: ignore[assignment]
    return result


def validate_form(form: Mapping[str, Any]) -> PertResult:
    return validate_phases(phases_from_form(form))


__all__ = ["PHASES", "PhaseViolation", "PertResult", "phases_from_form", "validate_phases", "validate_form"]
