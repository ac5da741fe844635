"""Evaluation engine constants and shared arithmetic.

All thresholds, cadence windows and credit weights used by the evaluators
live here so the rollup code carries no magic numbers.
"""

from __future__ import annotations

import math

from app.models.enums import CadenceType, Severity

# ── Freshness ───────────────────────────────────────────────────────────

# days_until_expiry in [0, EXPIRING_SOON_DAYS] → EXPIRING_SOON
EXPIRING_SOON_DAYS: int = 7

# Cadence type → validity window in calendar months. ON_CHANGE has no window.
CADENCE_MONTHS: dict[str, int] = {
    CadenceType.CONTINUOUS.value: 1,
    CadenceType.MONTHLY.value: 1,
    CadenceType.QUARTERLY.value: 3,
    CadenceType.ANNUAL.value: 12,
    CadenceType.ONCE_PER_INSPECTION.value: 12,
}

# Unknown cadence without an explicit review interval
DEFAULT_CADENCE_MONTHS: int = 1

# Requirement with no cadence rule at all
DEFAULT_CADENCE_TYPE: str = CadenceType.MONTHLY.value

# ── Rollup ──────────────────────────────────────────────────────────────

# Credit a PARTIAL obligation earns in both domain and overall scores
PARTIAL_CREDIT: float = 0.5

UNKNOWN_DOMAIN: str = "UNKNOWN"

# ── Risks ───────────────────────────────────────────────────────────────

# Marks engine-owned risk rows; manual risks never carry it
AUTO_RISK_TITLE_PREFIX: str = "[Auto-detected]"

RISK_SEVERITY_BY_OBLIGATION_SEVERITY: dict[str, str] = {
    Severity.CRITICAL.value: Severity.CRITICAL.value,
    Severity.HIGH.value: Severity.HIGH.value,
    Severity.MEDIUM.value: Severity.MEDIUM.value,
    Severity.LOW.value: Severity.LOW.value,
}
DEFAULT_RISK_SEVERITY: str = Severity.MEDIUM.value


def round_half_up(value: float) -> int:
    """Round to nearest int with .5 going up (percentages are never negative)."""
    return int(math.floor(value + 0.5))


def percentage(numerator: float, denominator: int) -> int:
    """Return round_half_up(100 * numerator / denominator), 0 when denominator is 0."""
    if denominator <= 0:
        return 0
    return round_half_up(100 * numerator / denominator)
