"""Evidence freshness calculator.

Turns an upload timestamp and a cadence rule into an expiry date and a
freshness state. Pure: identical (uploaded_at, cadence, now) always yields
the identical result.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

from dateutil.relativedelta import relativedelta

from app.models.enums import CadenceType
from app.services.evaluation.evaluation_constants import (
    CADENCE_MONTHS,
    DEFAULT_CADENCE_MONTHS,
    EXPIRING_SOON_DAYS,
)
from app.services.evaluation.results import EvidenceFreshness, FreshnessResult

logger = logging.getLogger(__name__)

_ONE_DAY = timedelta(days=1)


def as_utc(value: datetime) -> datetime:
    """Return value as an aware UTC datetime; naive values are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _cadence_key(cadence_type: object) -> str | None:
    if isinstance(cadence_type, CadenceType):
        return cadence_type.value
    return cadence_type if isinstance(cadence_type, str) else None


def cadence_window_months(cadence_type: str | None, review_months: int | None) -> int:
    """Return validity window in months for a cadence type.

    Unrecognized types fall back to review_months when positive, else one month.
    Never raises; a bad cadence rule degrades to the default window.
    """
    months = CADENCE_MONTHS.get(_cadence_key(cadence_type))
    if months is not None:
        return months
    if review_months is not None and review_months > 0:
        return review_months
    logger.debug(
        "Unrecognized cadence %r without review interval; using %d month(s)",
        cadence_type,
        DEFAULT_CADENCE_MONTHS,
    )
    return DEFAULT_CADENCE_MONTHS


def classify_days_until_expiry(days_until_expiry: int) -> EvidenceFreshness:
    """< 0 → STALE; 0..EXPIRING_SOON_DAYS → EXPIRING_SOON; otherwise FRESH."""
    if days_until_expiry < 0:
        return EvidenceFreshness.STALE
    if days_until_expiry <= EXPIRING_SOON_DAYS:
        return EvidenceFreshness.EXPIRING_SOON
    return EvidenceFreshness.FRESH


def calculate_evidence_freshness(
    uploaded_at: datetime | None,
    cadence_type: str | None,
    review_months: int | None = None,
    now: datetime | None = None,
) -> FreshnessResult:
    """Calculate freshness for evidence uploaded at uploaded_at.

    Args:
        uploaded_at: Upload timestamp of the latest linked artifact, or None.
        cadence_type: CadenceType value (or any string; unknown values degrade).
        review_months: Explicit review interval, used for unknown cadence types.
        now: Evaluation instant (default: current UTC time).

    Returns:
        FreshnessResult. expires_at/days_until_expiry are None for MISSING and
        ON_CHANGE evidence.
    """
    if uploaded_at is None:
        return FreshnessResult(EvidenceFreshness.MISSING, None, None)

    # Valid until superseded
    if _cadence_key(cadence_type) == CadenceType.ON_CHANGE.value:
        return FreshnessResult(EvidenceFreshness.FRESH, None, None)

    now = as_utc(now) if now is not None else datetime.now(UTC)
    months = cadence_window_months(cadence_type, review_months)
    expires_at = as_utc(uploaded_at) + relativedelta(months=months)

    # Floor division on timedelta floors toward -inf, matching floor((expiry - now) / 1 day)
    days_until_expiry = (expires_at - now) // _ONE_DAY

    return FreshnessResult(
        freshness=classify_days_until_expiry(days_until_expiry),
        expires_at=expires_at,
        days_until_expiry=days_until_expiry,
    )
