"""
Application configuration. Loads from environment variables.
Secrets and sensitive config must never be hardcoded.
"""

import os

from dotenv import load_dotenv

load_dotenv()
from functools import lru_cache


@lru_cache(maxsize=1)
def get_settings() -> "Settings":
    """Return cached settings instance."""
    return Settings()


class Settings:
    """Application settings loaded from environment."""

    # App
    app_name: str = "ComplianceOS Evaluation"
    debug: bool = False

    # Database (postgresql+psycopg for psycopg3; use postgresql:// for psycopg2)
    database_url: str = "postgresql+psycopg://localhost:5432/complianceos_dev"
    db_connect_timeout: int = 10  # seconds

    # Security
    internal_job_token: str = ""  # Required for /api/evaluation/* and /internal/*

    # Scheduler: in-process cron runner. Disable when an external cron hits /internal/*.
    scheduler_enabled: bool = False
    scheduler_timezone: str = "Asia/Seoul"
    nightly_evaluation_cron: str = "0 2 * * *"
    weekly_evaluation_cron: str = "0 3 * * 0"
    scheduler_poll_seconds: float = 30.0

    # Per-tenant evaluation bound; 0 = unbounded
    tenant_evaluation_timeout_seconds: float = 300.0

    job_history_limit: int = 10

    def __init__(self) -> None:
        self.app_name = os.getenv("APP_NAME", self.app_name)
        self.debug = os.getenv("DEBUG", "false").lower() == "true"

        default_user = os.getenv("PGUSER") or os.getenv("USER") or "postgres"
        default_url = (
            f"postgresql+psycopg://{default_user}:"
            f"{os.getenv('PGPASSWORD', '')}@"
            f"{os.getenv('PGHOST', 'localhost')}:"
            f"{os.getenv('PGPORT', '5432')}/"
            f"{os.getenv('PGDATABASE', 'complianceos_dev')}"
        )
        raw_url = os.getenv("DATABASE_URL", default_url)
        # Ensure psycopg3 driver if URL uses generic postgresql://
        if raw_url.startswith("postgresql://") and not raw_url.startswith("postgresql+psycopg"):
            raw_url = raw_url.replace("postgresql://", "postgresql+psycopg://", 1)
        self.database_url = raw_url
        self.db_connect_timeout = int(os.getenv("DB_CONNECT_TIMEOUT", str(self.db_connect_timeout)))

        self.internal_job_token = os.getenv("INTERNAL_JOB_TOKEN", "")

        self.scheduler_enabled = os.getenv("SCHEDULER_ENABLED", "false").lower() == "true"
        self.scheduler_timezone = os.getenv("SCHEDULER_TIMEZONE", self.scheduler_timezone)
        self.nightly_evaluation_cron = os.getenv(
            "NIGHTLY_EVALUATION_CRON", self.nightly_evaluation_cron
        )
        self.weekly_evaluation_cron = os.getenv(
            "WEEKLY_EVALUATION_CRON", self.weekly_evaluation_cron
        )
        self.scheduler_poll_seconds = float(
            os.getenv("SCHEDULER_POLL_SECONDS", str(self.scheduler_poll_seconds))
        )
        self.tenant_evaluation_timeout_seconds = float(
            os.getenv(
                "TENANT_EVALUATION_TIMEOUT_SECONDS",
                str(self.tenant_evaluation_timeout_seconds),
            )
        )
        self.job_history_limit = int(os.getenv("JOB_HISTORY_LIMIT", str(self.job_history_limit)))
