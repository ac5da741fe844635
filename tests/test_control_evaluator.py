"""Tests for control and obligation rollups."""

import uuid
from datetime import UTC, datetime

import pytest
from sqlalchemy.orm import Session

from app.services.evaluation.control_evaluator import (
    control_status_from_counts,
    evaluate_control,
)
from app.services.evaluation.errors import ControlNotFoundError, ObligationNotFoundError
from app.services.evaluation.obligation_evaluator import (
    evaluate_obligation,
    obligation_status_from_counts,
)
from app.services.evaluation.results import ControlStatus, RequirementStatus
from tests.factories import (
    NOW,
    failing_control,
    make_artifact,
    make_control,
    make_obligation,
    make_requirement,
    make_tenant,
    passing_control,
)

FRESH = datetime(2026, 3, 10, tzinfo=UTC)
EXPIRING = datetime(2026, 2, 18, 12, 0, tzinfo=UTC)


class TestControlStatusFromCounts:
    @pytest.mark.parametrize(
        ("passed", "warned", "failed", "expected"),
        [
            (0, 0, 0, ControlStatus.NOT_EVALUATED),
            (2, 0, 0, ControlStatus.PASS),
            (1, 1, 0, ControlStatus.PARTIAL),
            (1, 0, 1, ControlStatus.FAIL),
            (0, 1, 1, ControlStatus.FAIL),
            (0, 2, 0, ControlStatus.PARTIAL),
        ],
    )
    def test_rollup(self, passed, warned, failed, expected) -> None:
        assert control_status_from_counts(passed, warned, failed) == expected


class TestEvaluateControl:
    def test_no_requirements_is_not_evaluated(self, db: Session) -> None:
        tenant = make_tenant(db)
        control = make_control(db, tenant)

        result = evaluate_control(db, tenant.id, control.id, now=NOW)

        assert result.status == ControlStatus.NOT_EVALUATED
        assert result.pass_rate == 0
        assert result.evidence_evaluations == []
        assert result.last_evaluated_at == NOW

    def test_pass_and_warn_is_partial(self, db: Session) -> None:
        tenant = make_tenant(db)
        control = make_control(db, tenant)
        fresh_req = make_requirement(db, control, code="REQ-A")
        expiring_req = make_requirement(db, control, code="REQ-B")
        make_artifact(db, tenant, uploaded_at=FRESH, linked_to=[fresh_req])
        make_artifact(db, tenant, uploaded_at=EXPIRING, linked_to=[expiring_req])

        result = evaluate_control(db, tenant.id, control.id, now=NOW)

        assert [e.status for e in result.evidence_evaluations] == [
            RequirementStatus.PASS,
            RequirementStatus.WARN,
        ]
        assert result.status == ControlStatus.PARTIAL
        assert result.pass_rate == 50

    def test_pass_and_fail_is_fail(self, db: Session) -> None:
        tenant = make_tenant(db)
        control = make_control(db, tenant)
        fresh_req = make_requirement(db, control, code="REQ-A")
        make_requirement(db, control, code="REQ-B")
        make_artifact(db, tenant, uploaded_at=FRESH, linked_to=[fresh_req])

        result = evaluate_control(db, tenant.id, control.id, now=NOW)

        assert result.status == ControlStatus.FAIL
        assert result.pass_rate == 50

    def test_all_pass(self, db: Session) -> None:
        tenant = make_tenant(db)
        control = make_control(db, tenant)
        reqs = [make_requirement(db, control, code=f"REQ-{i}") for i in range(2)]
        make_artifact(db, tenant, uploaded_at=FRESH, linked_to=reqs)

        result = evaluate_control(db, tenant.id, control.id, now=NOW)

        assert result.status == ControlStatus.PASS
        assert result.pass_rate == 100

    def test_pass_rate_rounds_half_up(self, db: Session) -> None:
        """2 of 3 passing → 67."""
        tenant = make_tenant(db)
        control = make_control(db, tenant)
        reqs = [make_requirement(db, control, code=f"REQ-{i}") for i in range(3)]
        make_artifact(db, tenant, uploaded_at=FRESH, linked_to=reqs[:2])

        result = evaluate_control(db, tenant.id, control.id, now=NOW)

        assert result.pass_rate == 67

    def test_other_tenants_control_is_not_found(self, db: Session) -> None:
        owner = make_tenant(db, name="Owner")
        intruder = make_tenant(db, name="Intruder")
        control = make_control(db, owner)

        with pytest.raises(ControlNotFoundError, match="not found or access denied"):
            evaluate_control(db, intruder.id, control.id, now=NOW)

    def test_unknown_control_is_not_found(self, db: Session) -> None:
        tenant = make_tenant(db)
        with pytest.raises(ControlNotFoundError):
            evaluate_control(db, tenant.id, uuid.uuid4(), now=NOW)


class TestEvaluateObligation:
    @pytest.mark.parametrize(
        ("passing", "total", "expected"),
        [
            (0, 0, ControlStatus.NOT_EVALUATED),
            (3, 3, ControlStatus.PASS),
            (0, 2, ControlStatus.FAIL),
            (1, 2, ControlStatus.PARTIAL),
        ],
    )
    def test_status_from_counts(self, passing, total, expected) -> None:
        assert obligation_status_from_counts(passing, total) == expected

    def test_all_controls_pass(self, db: Session) -> None:
        tenant = make_tenant(db)
        obligation = make_obligation(db, tenant)
        passing_control(db, tenant, "CTL-A", [obligation])
        passing_control(db, tenant, "CTL-B", [obligation])

        result = evaluate_obligation(db, tenant.id, obligation.id, now=NOW)

        assert result.overall_status == ControlStatus.PASS
        assert result.pass_rate == 100
        assert [c.control_code for c in result.control_evaluations] == ["CTL-A", "CTL-B"]

    def test_mixed_controls_are_partial(self, db: Session) -> None:
        tenant = make_tenant(db)
        obligation = make_obligation(db, tenant)
        passing_control(db, tenant, "CTL-A", [obligation])
        failing_control(db, tenant, "CTL-B", [obligation])

        result = evaluate_obligation(db, tenant.id, obligation.id, now=NOW)

        assert result.overall_status == ControlStatus.PARTIAL
        assert result.pass_rate == 50

    def test_partial_controls_only_is_fail(self, db: Session) -> None:
        """A PARTIAL control is not a passing control."""
        tenant = make_tenant(db)
        obligation = make_obligation(db, tenant)
        control = make_control(db, tenant, obligations=[obligation])
        requirement = make_requirement(db, control)
        make_artifact(db, tenant, uploaded_at=EXPIRING, linked_to=[requirement])

        result = evaluate_obligation(db, tenant.id, obligation.id, now=NOW)

        assert result.control_evaluations[0].status == ControlStatus.PARTIAL
        assert result.overall_status == ControlStatus.FAIL

    def test_no_controls_is_not_evaluated(self, db: Session) -> None:
        tenant = make_tenant(db)
        obligation = make_obligation(db, tenant)

        result = evaluate_obligation(db, tenant.id, obligation.id, now=NOW)

        assert result.overall_status == ControlStatus.NOT_EVALUATED
        assert result.pass_rate == 0

    def test_other_tenants_obligation_is_not_found(self, db: Session) -> None:
        owner = make_tenant(db, name="Owner")
        intruder = make_tenant(db, name="Intruder")
        obligation = make_obligation(db, owner)

        with pytest.raises(ObligationNotFoundError):
            evaluate_obligation(db, intruder.id, obligation.id, now=NOW)

    def test_foreign_control_linked_to_obligation_aborts(self, db: Session) -> None:
        """A control of another tenant linked in is never evaluated under this tenant."""
        tenant = make_tenant(db, name="Owner")
        other = make_tenant(db, name="Other")
        obligation = make_obligation(db, tenant)
        passing_control(db, other, "CTL-X", [obligation])

        with pytest.raises(ControlNotFoundError):
            evaluate_obligation(db, tenant.id, obligation.id, now=NOW)
