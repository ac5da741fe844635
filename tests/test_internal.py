"""Tests for internal job endpoints (/internal/run_nightly_evaluation, /internal/run_weekly_evaluation)."""

from __future__ import annotations

from unittest.mock import patch

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.models import JobRun
from tests.factories import failing_control, make_obligation, make_tenant
from tests.test_constants import TEST_INTERNAL_JOB_TOKEN

VALID_TOKEN = TEST_INTERNAL_JOB_TOKEN  # matches conftest.py env setup

SUMMARY = {
    "status": "completed",
    "job_run_id": 42,
    "job_type": "nightly_evaluation",
    "tenants_processed": 3,
    "success_count": 2,
    "error_count": 1,
    "errors": [{"tenant_id": "t-b", "error": "boom"}],
    "duration_ms": 120,
    "error": None,
}


class TestRunNightlyEvaluation:
    @patch("app.services.evaluation.evaluation_jobs.run_nightly_evaluation")
    def test_valid_token_runs_job(self, mock_job, client: TestClient):
        """POST /internal/run_nightly_evaluation with valid token triggers the batch."""
        mock_job.return_value = SUMMARY

        response = client.post(
            "/internal/run_nightly_evaluation",
            headers={"X-Internal-Token": VALID_TOKEN},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "completed"
        assert data["job_run_id"] == 42
        assert data["success_count"] == 2
        assert data["error_count"] == 1
        mock_job.assert_called_once()

    def test_missing_token_returns_422(self, client: TestClient):
        """POST /internal/run_nightly_evaluation without token header returns 422."""
        response = client.post("/internal/run_nightly_evaluation")
        assert response.status_code == 422

    def test_wrong_token_returns_403(self, client: TestClient):
        """POST /internal/run_nightly_evaluation with wrong token returns 403."""
        response = client.post(
            "/internal/run_nightly_evaluation",
            headers={"X-Internal-Token": "wrong-token"},
        )
        assert response.status_code == 403

    @patch("app.services.evaluation.evaluation_jobs.run_nightly_evaluation")
    def test_job_exception_returns_failed(self, mock_job, client: TestClient):
        """Unexpected job errors are reported in the body, not as a 500."""
        mock_job.side_effect = RuntimeError("DB connection lost")

        response = client.post(
            "/internal/run_nightly_evaluation",
            headers={"X-Internal-Token": VALID_TOKEN},
        )

        assert response.status_code == 200
        assert response.json() == {"status": "failed", "error": "DB connection lost"}

    def test_end_to_end_with_db(self, client_with_db: TestClient, db: Session):
        """Runs the real batch against the test session and records a JobRun."""
        tenant = make_tenant(db)
        obligation = make_obligation(db, tenant)
        failing_control(db, tenant, "CTL-A", [obligation])

        response = client_with_db.post(
            "/internal/run_nightly_evaluation",
            headers={"X-Internal-Token": VALID_TOKEN},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "completed"
        assert data["tenants_processed"] == 1
        job = db.get(JobRun, data["job_run_id"])
        assert job.job_type == "nightly_evaluation"


class TestRunWeeklyEvaluation:
    @patch("app.services.evaluation.evaluation_jobs.run_weekly_deep_evaluation")
    def test_valid_token_runs_job(self, mock_job, client: TestClient):
        """POST /internal/run_weekly_evaluation with valid token triggers the weekly batch."""
        mock_job.return_value = {**SUMMARY, "job_type": "weekly_deep_evaluation"}

        response = client.post(
            "/internal/run_weekly_evaluation",
            headers={"X-Internal-Token": VALID_TOKEN},
        )

        assert response.status_code == 200
        assert response.json()["tenants_processed"] == 3
        mock_job.assert_called_once()

    def test_wrong_token_returns_403(self, client: TestClient):
        response = client.post(
            "/internal/run_weekly_evaluation",
            headers={"X-Internal-Token": "wrong-token"},
        )
        assert response.status_code == 403
