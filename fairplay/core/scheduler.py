"""Background job scheduler for the reveal, invitation and attendance jobs."""
import logging
from datetime import UTC, datetime, timedelta

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlmodel import Session

from fairplay.calendar.invites import GoogleCalendarInviteSink
from fairplay.core.config import settings
from fairplay.core.database import engine
from fairplay.jobs.attendance import process_attendance
from fairplay.jobs.invitations import dispatch_invites
from fairplay.jobs.reveal import process_reveals
from fairplay.jobs.state import JobState
from fairplay.store.documents import DocumentStore

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler(timezone=settings.scheduler_timezone)

REVEAL_JOB_ID = "participant_reveal"
INVITES_JOB_ID = "calendar_invites"
ATTENDANCE_JOB_ID = "attendance_snapshot"


def _run(job_id: str, job) -> dict | None:
    """Run one job in its own session and record the outcome.

    Failures are logged and recorded; the next scheduled tick retries.
    """
    try:
        with Session(engine) as session:
            stats = job(DocumentStore(session), datetime.now(UTC))
    except Exception as e:
        logger.error(f"Job {job_id} failed: {e}")
        JobState.record_failure(job_id, str(e))
        return None

    logger.info(f"Job {job_id} completed: {stats}")
    JobState.record_success(job_id, stats)
    return stats


def reveal_job():
    """Scheduled list reveal."""
    lookback = timedelta(hours=settings.reveal_lookback_hours)
    return _run(REVEAL_JOB_ID, lambda store, now: process_reveals(store, now, lookback))


def invites_job():
    """Scheduled invitation dispatch."""
    lookback = timedelta(hours=settings.invite_lookback_hours)
    sink = GoogleCalendarInviteSink()
    return _run(
        INVITES_JOB_ID, lambda store, now: dispatch_invites(store, sink, now, lookback)
    )


def attendance_job():
    """Scheduled attendance snapshot."""
    lookahead = timedelta(hours=settings.attendance_lookahead_hours)
    return _run(
        ATTENDANCE_JOB_ID, lambda store, now: process_attendance(store, now, lookahead)
    )


JOBS = (
    (REVEAL_JOB_ID, reveal_job, settings.reveal_cron_minutes),
    (INVITES_JOB_ID, invites_job, settings.invites_cron_minutes),
    (ATTENDANCE_JOB_ID, attendance_job, settings.attendance_cron_minutes),
)


def start_scheduler():
    """Start the background scheduler."""
    for job_id, func, minutes in JOBS:
        scheduler.add_job(
            func,
            trigger=CronTrigger(minute=minutes, timezone=settings.scheduler_timezone),
            id=job_id,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
    scheduler.start()
    logger.info(
        "Scheduler started: "
        + ", ".join(f"{job_id} at minutes {minutes}" for job_id, _, minutes in JOBS)
    )


def shutdown_scheduler():
    """Graceful shutdown."""
    scheduler.shutdown(wait=False)
    logger.info("Scheduler shut down")
