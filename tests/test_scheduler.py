"""Tests for the scheduled job wrappers."""

from datetime import UTC, datetime, timedelta

import pytest

from fairplay.core import scheduler as scheduler_module
from fairplay.core.scheduler import (
    ATTENDANCE_JOB_ID,
    INVITES_JOB_ID,
    REVEAL_JOB_ID,
    attendance_job,
    invites_job,
    reveal_job,
)
from fairplay.jobs.state import JobState
from fairplay.models import EventInstance


@pytest.fixture(autouse=True)
def use_test_engine(engine, monkeypatch):
    monkeypatch.setattr(scheduler_module, "engine", engine)


class TestJobWrappers:
    def test_reveal_job_records_success(self, session, make_instance, make_participant):
        make_instance(
            participants=[make_participant("a")],
            list_reveal_datetime=datetime.now(UTC) - timedelta(minutes=10),
        )

        stats = reveal_job()

        assert stats["processed"] == 1
        status = JobState.get_status(REVEAL_JOB_ID)
        assert status["success"] is True
        assert status["stats"] == stats
        session.expire_all()
        assert session.get(EventInstance, "instance-1").participants_list_processed is True

    def test_attendance_job_records_success(self, make_instance, make_participant, make_user):
        make_user("a")
        make_instance(
            participants=[make_participant("a")],
            event_start_datetime=datetime.now(UTC) + timedelta(minutes=30),
        )

        stats = attendance_job()

        assert stats["attendance_updates"] == 1
        assert JobState.get_status(ATTENDANCE_JOB_ID)["success"] is True

    def test_failure_is_recorded_not_raised(self, monkeypatch):
        def broken(store, now, lookback):
            raise RuntimeError("store unavailable")

        monkeypatch.setattr(scheduler_module, "process_reveals", broken)

        assert reveal_job() is None
        status = JobState.get_status(REVEAL_JOB_ID)
        assert status["success"] is False
        assert status["error"] == "store unavailable"

    def test_invites_job_uses_calendar_sink(self, monkeypatch):
        calls = []

        def fake_dispatch(store, sink, now, lookback):
            calls.append((type(sink).__name__, lookback))
            return {"sent": 0}

        monkeypatch.setattr(scheduler_module, "dispatch_invites", fake_dispatch)

        assert invites_job() == {"sent": 0}
        assert calls == [("GoogleCalendarInviteSink", timedelta(hours=2))]
        assert JobState.get_status(INVITES_JOB_ID)["success"] is True

    def test_unknown_job_has_empty_status(self):
        assert JobState.get_status("nope") == {
            "last_run_time": None,
            "success": None,
            "error": None,
            "stats": None,
        }
