"""Shared test fixtures."""

from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from fairplay.jobs.state import JobState
from fairplay.main import app
from fairplay.models import EventInstance, Participant, UserProfile
from fairplay.store.documents import DocumentStore, WriteBatch

NOW = datetime(2025, 3, 1, 10, 0, tzinfo=UTC)


@pytest.fixture(name="engine")
def engine_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Create a new database session for each test."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="store")
def store_fixture(session: Session) -> DocumentStore:
    return DocumentStore(session)


@pytest.fixture(name="client")
def client_fixture():
    """Test client without lifespan, so the scheduler stays stopped."""
    client = TestClient(app)
    yield client


@pytest.fixture(autouse=True)
def clear_job_state():
    JobState.clear()
    yield
    JobState.clear()


@pytest.fixture(name="now")
def now_fixture() -> datetime:
    return NOW


@pytest.fixture(name="commit_calls")
def commit_calls_fixture(monkeypatch) -> list[int]:
    """Record the size of every batch commit issued."""
    calls = []
    original = WriteBatch.commit

    def counting_commit(self):
        calls.append(len(self))
        return original(self)

    monkeypatch.setattr(WriteBatch, "commit", counting_commit)
    return calls


@pytest.fixture(name="make_participant")
def make_participant_fixture():
    """Factory for participant documents."""

    def _make(
        uid: str,
        is_organizer: bool = False,
        registered_at: datetime | None = None,
    ) -> Participant:
        return Participant(
            uid=uid,
            display_name=uid.title(),
            photo_url=f"https://example.com/{uid}.png",
            is_organizer=is_organizer,
            registered_at=registered_at or NOW - timedelta(days=1),
        )

    return _make


@pytest.fixture(name="make_instance")
def make_instance_fixture(session: Session):
    """Factory for event instances, defaulting to a sorted-soon instance."""

    def _make(instance_id: str = "instance-1", participants=None, **fields) -> EventInstance:
        values = {
            "group_id": "g1",
            "event_id": "event-1",
            "title": "Thursday football",
            "description": "Bring a ball",
            "location": "Pitch 3",
            "spots": 2,
            "registration_open_datetime": NOW - timedelta(days=3),
            "list_reveal_datetime": NOW - timedelta(hours=1),
            "event_start_datetime": NOW + timedelta(hours=1),
        }
        values.update(fields)
        if participants is not None:
            values["participants"] = [
                p.to_document() if isinstance(p, Participant) else p for p in participants
            ]

        instance = EventInstance(id=instance_id, **values)
        session.add(instance)
        session.commit()
        session.refresh(instance)
        return instance

    return _make


@pytest.fixture(name="make_user")
def make_user_fixture(session: Session):
    """Factory for user profiles with an optional attendance history."""

    def _make(uid: str, history: dict[str, datetime] | None = None, email: str | None = "") -> UserProfile:
        user = UserProfile(
            uid=uid,
            email=f"{uid}@example.com" if email == "" else email,
            display_name=uid.title(),
            attendance_history={
                group: when.isoformat() for group, when in (history or {}).items()
            },
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make
