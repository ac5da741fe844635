"""Tests for evaluation API routes (/api/evaluation/*)."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.models import RiskItem
from app.services.evaluation.evaluation_jobs import run_nightly_evaluation
from tests.factories import (
    failing_control,
    make_artifact,
    make_control,
    make_manual_risk,
    make_obligation,
    make_requirement,
    make_tenant,
)


@pytest.fixture
def seeded(db: Session) -> dict:
    """Tenant with one passing and one failing obligation (evidence dated relative to now)."""
    tenant = make_tenant(db)
    ok = make_obligation(db, tenant, code="OBL-1", domain="LABOR")
    gap = make_obligation(db, tenant, code="OBL-2", domain="PRIVACY", severity="CRITICAL")
    control = make_control(db, tenant, code="CTL-A", obligations=[ok])
    requirement = make_requirement(db, control)
    make_artifact(
        db, tenant, uploaded_at=datetime.now(UTC) - timedelta(days=1), linked_to=[requirement]
    )
    failing = failing_control(db, tenant, "CTL-B", [gap])
    return {"tenant": tenant, "ok": ok, "gap": gap, "control": control, "failing": failing}


class TestAuth:
    def test_missing_token_returns_422(self, client_with_db: TestClient, seeded: dict) -> None:
        """Requests without the X-Internal-Token header are rejected."""
        response = client_with_db.get(f"/api/evaluation/{seeded['tenant'].id}/readiness")
        assert response.status_code == 422

    def test_wrong_token_returns_403(self, client_with_db: TestClient, seeded: dict) -> None:
        response = client_with_db.get(
            f"/api/evaluation/{seeded['tenant'].id}/readiness",
            headers={"X-Internal-Token": "wrong-token"},
        )
        assert response.status_code == 403


class TestEvaluateEndpoints:
    def test_evaluate_control(
        self, client_with_db: TestClient, auth_headers: dict, seeded: dict
    ) -> None:
        response = client_with_db.post(
            "/api/evaluation/control",
            json={"tenant_id": str(seeded["tenant"].id), "control_id": str(seeded["control"].id)},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "PASS"
        assert data["pass_rate"] == 100
        assert data["evidence_evaluations"][0]["freshness"] == "FRESH"

    def test_evaluate_control_of_other_tenant_returns_404(
        self, client_with_db: TestClient, auth_headers: dict, seeded: dict, db: Session
    ) -> None:
        """Never another tenant's data: foreign ids look like unknown ids."""
        intruder = make_tenant(db, name="Intruder")

        response = client_with_db.post(
            "/api/evaluation/control",
            json={"tenant_id": str(intruder.id), "control_id": str(seeded["control"].id)},
            headers=auth_headers,
        )

        assert response.status_code == 404

    def test_evaluate_obligation(
        self, client_with_db: TestClient, auth_headers: dict, seeded: dict
    ) -> None:
        response = client_with_db.post(
            "/api/evaluation/obligation",
            json={"tenant_id": str(seeded["tenant"].id), "obligation_id": str(seeded["gap"].id)},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["overall_status"] == "FAIL"
        assert data["control_evaluations"][0]["control_code"] == "CTL-B"

    def test_evaluate_unknown_obligation_returns_404(
        self, client_with_db: TestClient, auth_headers: dict, seeded: dict
    ) -> None:
        response = client_with_db.post(
            "/api/evaluation/obligation",
            json={"tenant_id": str(seeded["tenant"].id), "obligation_id": str(uuid.uuid4())},
            headers=auth_headers,
        )
        assert response.status_code == 404

    def test_readiness(self, client_with_db: TestClient, auth_headers: dict, seeded: dict) -> None:
        response = client_with_db.post(
            "/api/evaluation/readiness",
            json={"tenant_id": str(seeded["tenant"].id)},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["overall"] == 50
        assert data["by_domain"] == {"LABOR": 100, "PRIVACY": 0}

    def test_readiness_get(self, client_with_db: TestClient, auth_headers: dict, seeded: dict) -> None:
        response = client_with_db.get(
            f"/api/evaluation/{seeded['tenant'].id}/readiness", headers=auth_headers
        )
        assert response.status_code == 200
        assert response.json()["total_obligations"] == 2

    def test_unknown_tenant_returns_404(
        self, client_with_db: TestClient, auth_headers: dict, seeded: dict
    ) -> None:
        response = client_with_db.get(
            f"/api/evaluation/{uuid.uuid4()}/readiness", headers=auth_headers
        )
        assert response.status_code == 404
        assert response.json()["detail"] == "Tenant not found"

    def test_invalid_body_returns_422(self, client_with_db: TestClient, auth_headers: dict) -> None:
        response = client_with_db.post(
            "/api/evaluation/readiness", json={"tenant_id": "not-a-uuid"}, headers=auth_headers
        )
        assert response.status_code == 422


class TestRiskEndpoints:
    def test_get_current_risks_does_not_persist(
        self, client_with_db: TestClient, auth_headers: dict, seeded: dict, db: Session
    ) -> None:
        tenant = seeded["tenant"]

        response = client_with_db.get(f"/api/evaluation/{tenant.id}/risks", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 2
        assert {r["risk_type"] for r in data["risks"]} == {"MISSING_EVIDENCE", "FAILED_CONTROL"}
        assert db.query(RiskItem).filter(RiskItem.tenant_id == tenant.id).count() == 0

    def test_post_risks_persists(
        self, client_with_db: TestClient, auth_headers: dict, seeded: dict, db: Session
    ) -> None:
        tenant = seeded["tenant"]
        make_manual_risk(db, tenant)

        for _ in range(2):
            response = client_with_db.post(
                "/api/evaluation/risks", json={"tenant_id": str(tenant.id)}, headers=auth_headers
            )
            assert response.status_code == 200

        items = client_with_db.get(
            f"/api/evaluation/{tenant.id}/risk-items", headers=auth_headers
        ).json()
        assert items["total"] == 3
        assert [i["severity"] for i in items["items"]] == ["CRITICAL", "CRITICAL", "LOW"]


class TestRunAndJobs:
    def test_run_full_evaluation(
        self, client_with_db: TestClient, auth_headers: dict, seeded: dict
    ) -> None:
        response = client_with_db.post(
            "/api/evaluation/run",
            json={"tenant_id": str(seeded["tenant"].id)},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["readiness_score"]["overall"] == 50
        assert len(data["risks"]) == 2
        assert data["duration_ms"] >= 0

    def test_trigger_records_job_history(
        self, client_with_db: TestClient, auth_headers: dict, seeded: dict
    ) -> None:
        tenant = seeded["tenant"]

        response = client_with_db.post(
            f"/api/evaluation/{tenant.id}/trigger", headers=auth_headers
        )
        assert response.status_code == 200

        history = client_with_db.get("/api/evaluation/jobs/history", headers=auth_headers).json()
        assert len(history) == 1
        assert history[0]["job_type"] == "manual_evaluation"
        assert history[0]["tenant_id"] == str(tenant.id)
        assert history[0]["status"] == "completed"

    def test_trigger_unknown_tenant_returns_404(
        self, client_with_db: TestClient, auth_headers: dict
    ) -> None:
        response = client_with_db.post(
            f"/api/evaluation/{uuid.uuid4()}/trigger", headers=auth_headers
        )
        assert response.status_code == 404

    def test_history_limit_validated(self, client_with_db: TestClient, auth_headers: dict) -> None:
        response = client_with_db.get(
            "/api/evaluation/jobs/history", params={"limit": 0}, headers=auth_headers
        )
        assert response.status_code == 422

    def test_history_passes_limit(self, client_with_db: TestClient, auth_headers: dict) -> None:
        with patch("app.api.evaluation.get_job_history", return_value=[]) as history:
            response = client_with_db.get(
                "/api/evaluation/jobs/history", params={"limit": 3}, headers=auth_headers
            )
        assert response.status_code == 200
        assert history.call_args[1]["limit"] == 3

    def test_history_default_comes_from_settings(
        self, client_with_db: TestClient, auth_headers: dict, db: Session
    ) -> None:
        """Without ?limit the listing size is JOB_HISTORY_LIMIT, not a route constant."""
        for _ in range(5):
            run_nightly_evaluation(db)

        with patch(
            "app.services.evaluation.evaluation_jobs.get_settings",
            return_value=MagicMock(job_history_limit=3),
        ):
            response = client_with_db.get("/api/evaluation/jobs/history", headers=auth_headers)

        assert response.status_code == 200
        assert len(response.json()) == 3
