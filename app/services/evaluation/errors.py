"""Evaluation error taxonomy."""

from __future__ import annotations

import time


class EvaluationNotFoundError(LookupError):
    """Requested entity does not exist for the given tenant (not found or access denied)."""


class ControlNotFoundError(EvaluationNotFoundError):
    pass


class ObligationNotFoundError(EvaluationNotFoundError):
    pass


class TenantNotFoundError(EvaluationNotFoundError):
    pass


class EvaluationTimeoutError(TimeoutError):
    """Raised when one tenant's evaluation exceeds its time bound."""


def check_deadline(deadline: float | None, tenant_id: object) -> None:
    """Raise EvaluationTimeoutError if the monotonic deadline has passed.

    Called before every storage lookup; those are the evaluation's only I/O
    boundaries, so a slow tenant is stopped at the next one.
    """
    if deadline is None:
        return
    if time.monotonic() > deadline:
        raise EvaluationTimeoutError(f"Evaluation for tenant {tenant_id} timed out")
