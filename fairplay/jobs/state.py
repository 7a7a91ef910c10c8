"""Track the outcome of the last run of each batch job."""
from datetime import UTC, datetime


class JobState:
    """In-process record of each job's last run, exposed by /jobs/status."""

    _runs: dict[str, dict] = {}

    @classmethod
    def record_success(cls, job_id: str, stats: dict) -> None:
        cls._runs[job_id] = {
            "last_run_time": datetime.now(UTC),
            "success": True,
            "error": None,
            "stats": stats,
        }

    @classmethod
    def record_failure(cls, job_id: str, error: str) -> None:
        cls._runs[job_id] = {
            "last_run_time": datetime.now(UTC),
            "success": False,
            "error": error,
            "stats": None,
        }

    @classmethod
    def get_status(cls, job_id: str) -> dict:
        return cls._runs.get(
            job_id,
            {"last_run_time": None, "success": None, "error": None, "stats": None},
        )

    @classmethod
    def clear(cls) -> None:
        cls._runs.clear()
