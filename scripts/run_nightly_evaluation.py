#!/usr/bin/env python3
"""Run the nightly evaluation job locally or from an external cron.

Usage:
    python scripts/run_nightly_evaluation.py
    python scripts/run_nightly_evaluation.py --weekly

Evaluates every active tenant (readiness score + risk items) and records a JobRun.
Exits 0 when the job completed (even with per-tenant failures), 1 when it failed.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.db.session import SessionLocal
from app.services.evaluation.evaluation_jobs import (
    run_nightly_evaluation,
    run_weekly_deep_evaluation,
)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run scheduled compliance evaluation")
    parser.add_argument(
        "--weekly",
        action="store_true",
        help="Run the weekly deep evaluation instead of the nightly pass",
    )
    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        job = run_weekly_deep_evaluation if args.weekly else run_nightly_evaluation
        result = job(db)
        print(
            f"status={result['status']} "
            f"job_run_id={result['job_run_id']} "
            f"tenants_processed={result['tenants_processed']} "
            f"success_count={result['success_count']} "
            f"error_count={result['error_count']} "
            f"duration_ms={result['duration_ms']}"
        )
        for err in result["errors"]:
            print(f"tenant_id={err['tenant_id']} error={err['error']}", file=sys.stderr)
        if result.get("error") and not result["errors"]:
            print(f"error={result['error']}", file=sys.stderr)
        return 0 if result["status"] == "completed" else 1
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
