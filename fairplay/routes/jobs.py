"""Read-only status routes for the batch jobs."""
from fastapi import APIRouter

from fairplay.core.config import settings
from fairplay.core.scheduler import JOBS, scheduler
from fairplay.jobs.state import JobState

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get("/status")
async def jobs_status():
    """
    Get the status of each scheduled job.

    Returns JSON with the cron schedule, next run time and the outcome of
    the last run (time, success flag, error and statistics) per job.
    """
    jobs = {}
    for job_id, _, minutes in JOBS:
        status = JobState.get_status(job_id)
        scheduled = scheduler.get_job(job_id) if scheduler.running else None
        next_run = getattr(scheduled, "next_run_time", None)
        jobs[job_id] = {
            "cron_minutes": minutes,
            "next_run_time": next_run.isoformat() if next_run else None,
            "last_run_time": (
                status["last_run_time"].isoformat() if status["last_run_time"] else None
            ),
            "last_run_success": status["success"],
            "last_run_error": status["error"],
            "last_run_stats": status["stats"],
        }

    return {
        "scheduler_enabled": settings.scheduler_enabled,
        "scheduler_running": scheduler.running,
        "timezone": settings.scheduler_timezone,
        "jobs": jobs,
    }
