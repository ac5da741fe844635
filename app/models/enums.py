"""Enumerations stored as plain strings on compliance models."""

from __future__ import annotations

from enum import Enum


class ObligationDomain(str, Enum):
    """Regulatory domain an obligation belongs to."""

    LABOR = "LABOR"
    PRIVACY = "PRIVACY"
    FINANCE = "FINANCE"
    CONTRACTS = "CONTRACTS"
    SECURITY = "SECURITY"
    TRAINING = "TRAINING"


class Severity(str, Enum):
    """Obligation and risk severity."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class CadenceType(str, Enum):
    """How often evidence for a requirement must be refreshed."""

    CONTINUOUS = "CONTINUOUS"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    ANNUAL = "ANNUAL"
    ONCE_PER_INSPECTION = "ONCE_PER_INSPECTION"
    ON_CHANGE = "ON_CHANGE"


class RiskStatus(str, Enum):
    """Lifecycle of a risk item."""

    OPEN = "OPEN"
    IN_REVIEW = "IN_REVIEW"
    MITIGATED = "MITIGATED"
    ACCEPTED = "ACCEPTED"
