"""In-process cron job runner for scheduled evaluations.

An explicit JobRunner holds (cron expression, timezone, handler)
registrations and is driven by an injected clock, so tests advance fake time
and call tick() instead of sleeping. Per job: IDLE → RUNNING → IDLE; a tick
that finds the job RUNNING skips it. In production start() polls tick() from
a daemon thread for the lifetime of the app.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.services.evaluation.cron import CronExpression
from app.services.evaluation.evaluation_jobs import (
    run_nightly_evaluation,
    run_weekly_deep_evaluation,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

NIGHTLY_JOB_NAME = "nightly-evaluation"
WEEKLY_JOB_NAME = "weekly-deep-evaluation"

# Minutes a late tick may look back for missed fire times (e.g. a long previous job)
MAX_CATCHUP_MINUTES: int = 60

# How far back a late tick looks for fire times it is about to skip, for the warning only
MAX_MISSED_SCAN_DAYS: int = 7


class JobState(str, Enum):
    IDLE = "IDLE"
    RUNNING = "RUNNING"


@dataclass
class ScheduledJob:
    """One registration: fire handler when cron matches in timezone."""

    name: str
    cron: CronExpression
    timezone: ZoneInfo
    handler: Callable[[], object]
    state: JobState = JobState.IDLE
    last_fired_minute: datetime | None = None
    last_error: str | None = None
    run_count: int = 0


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _floor_minute(moment: datetime) -> datetime:
    return moment.replace(second=0, microsecond=0)


class JobRunner:
    """Explicit scheduler: registrations + injected clock + optional polling thread."""

    def __init__(self, clock: Clock | None = None, poll_seconds: float = 30.0) -> None:
        self._clock = clock or _utc_now
        self._poll_seconds = poll_seconds
        self._jobs: list[ScheduledJob] = []
        self._lock = threading.Lock()
        self._last_tick: datetime | None = None
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def jobs(self) -> list[ScheduledJob]:
        return list(self._jobs)

    def register(
        self,
        name: str,
        cron_expression: str,
        timezone_name: str,
        handler: Callable[[], object],
    ) -> ScheduledJob:
        """Register a handler. Raises CronParseError / ZoneInfoNotFoundError on bad config."""
        job = ScheduledJob(
            name=name,
            cron=CronExpression.parse(cron_expression),
            timezone=ZoneInfo(timezone_name),
            handler=handler,
        )
        self._jobs.append(job)
        logger.info("Registered job %s: cron=%r tz=%s", name, cron_expression, timezone_name)
        return job

    def _due_minute(self, job: ScheduledJob, since: datetime, until: datetime) -> datetime | None:
        """Latest scheduled minute in (since, until] for job, in job's timezone, or None."""
        minute = _floor_minute(until)
        floor = _floor_minute(since)
        while minute > floor:
            local = minute.astimezone(job.timezone)
            if job.cron.matches(local) and job.last_fired_minute != local:
                return local
            minute -= timedelta(minutes=1)
        return None

    def _warn_missed(self, job: ScheduledJob, since: datetime, until: datetime) -> None:
        """Log the latest fire time in (since, until] that is too old to catch up."""
        since = max(since, until - timedelta(days=MAX_MISSED_SCAN_DAYS))
        missed = self._due_minute(job, since, until)
        if missed is not None:
            logger.warning(
                "Job %s missed fire time %s (more than %d minutes late); skipped",
                job.name,
                missed.isoformat(),
                MAX_CATCHUP_MINUTES,
            )

    def due_jobs(self) -> list[tuple[ScheduledJob, datetime]]:
        """Jobs whose cron matched since the previous tick; advances the tick cursor."""
        now = self._clock()
        if now.tzinfo is None:
            now = now.replace(tzinfo=UTC)
        requested = self._last_tick or (now - timedelta(minutes=1))
        catchup_floor = now - timedelta(minutes=MAX_CATCHUP_MINUTES)
        since = max(requested, catchup_floor)
        self._last_tick = now

        due = []
        for job in self._jobs:
            if requested < catchup_floor:
                self._warn_missed(job, requested, catchup_floor)
            minute = self._due_minute(job, since, now)
            if minute is not None:
                due.append((job, minute))
        return due

    def tick(self) -> list[str]:
        """Run every due job once. Returns names of jobs that ran."""
        ran: list[str] = []
        for job, minute in self.due_jobs():
            if self.run_job(job, minute):
                ran.append(job.name)
        return ran

    def run_job(self, job: ScheduledJob, scheduled_minute: datetime | None = None) -> bool:
        """Run job's handler unless it is already RUNNING.

        Handler exceptions are logged and kept on the job; they never stop the runner.
        """
        with self._lock:
            if job.state == JobState.RUNNING:
                logger.warning("Job %s still running; skipping this fire time", job.name)
                return False
            job.state = JobState.RUNNING
            if scheduled_minute is not None:
                job.last_fired_minute = scheduled_minute

        logger.info("Starting scheduled job %s", job.name)
        try:
            job.handler()
            job.last_error = None
        except Exception as exc:
            job.last_error = str(exc)
            logger.exception("Scheduled job %s failed", job.name)
        finally:
            job.run_count += 1
            with self._lock:
                job.state = JobState.IDLE
        return True

    def start(self) -> None:
        """Start the polling thread (no-op if already running)."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run_forever, name="evaluation-scheduler", daemon=True
        )
        self._thread.start()
        logger.info("Job runner started with %d job(s)", len(self._jobs))

    def stop(self, timeout: float | None = 10.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("Job runner stopped")

    def _run_forever(self) -> None:
        while not self._stop.is_set():
            try:
                self.tick()
            except Exception:
                logger.exception("Job runner tick failed")
            self._stop.wait(self._poll_seconds)


def _session_job(
    session_factory: Callable[[], Session],
    job: Callable[[Session], dict],
) -> Callable[[], dict]:
    """Wrap a batch job so each run gets its own session."""

    def handler() -> dict:
        db = session_factory()
        try:
            return job(db)
        finally:
            db.close()

    return handler


def build_evaluation_runner(
    session_factory: Callable[[], Session],
    settings: Settings | None = None,
    clock: Clock | None = None,
) -> JobRunner:
    """JobRunner with the nightly and weekly deep evaluation jobs registered from settings."""
    settings = settings or get_settings()
    runner = JobRunner(clock=clock, poll_seconds=settings.scheduler_poll_seconds)
    runner.register(
        NIGHTLY_JOB_NAME,
        settings.nightly_evaluation_cron,
        settings.scheduler_timezone,
        _session_job(session_factory, run_nightly_evaluation),
    )
    runner.register(
        WEEKLY_JOB_NAME,
        settings.weekly_evaluation_cron,
        settings.scheduler_timezone,
        _session_job(session_factory, run_weekly_deep_evaluation),
    )
    return runner
