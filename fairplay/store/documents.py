"""Document store accessor used by the batch jobs.

The jobs never talk to the database directly. They get a ``DocumentStore``
passed in, read through it, and stage every mutation on a ``WriteBatch``.
Staged operations are plain UPDATE statements kept in memory; nothing
reaches the database until ``commit()`` runs them all in one transaction.

Every write targets specific fields. Attendance history entries are updated
with SQLite's ``json_set`` so that an update for one group never clobbers
the entries of other groups written concurrently by another job.
"""
import logging
from collections.abc import Iterable
from datetime import datetime

from sqlalchemy import func, update
from sqlmodel import Session, col, select

from fairplay.models import EventInstance, Participant, UserProfile
from fairplay.models.timestamps import as_utc, format_timestamp

logger = logging.getLogger(__name__)

# Instance fields the jobs are allowed to query by range
RANGE_FIELDS = ("list_reveal_datetime", "event_start_datetime")


def attendance_path(group_id: str) -> str:
    """JSON path of the ``attendance_history`` entry for ``group_id``.

    SQLite path labels are quoted but have no escape syntax, so a group id
    containing a double quote cannot be addressed and is rejected.
    """
    if not group_id or '"' in group_id:
        raise ValueError(f"Group id {group_id!r} cannot be used as an attendance key")
    return f'$."{group_id}"'


class WriteBatch:
    """Field-level updates staged locally and committed atomically."""

    def __init__(self, session: Session):
        self._session = session
        self._operations = []

    def __len__(self) -> int:
        return len(self._operations)

    def save_ranking(self, instance_id: str, participants: list[Participant]) -> None:
        """Store the ranked participant list and flag the instance as revealed."""
        self._update_instance(
            instance_id,
            participants=[p.to_document() for p in participants],
            participants_list_processed=True,
        )

    def mark_attendance_processed(self, instance_id: str) -> None:
        self._update_instance(instance_id, attendance_processed=True)

    def mark_invites_sent(self, instance_id: str) -> None:
        self._update_instance(instance_id, calendar_invites_sent=True)

    def set_last_attended(self, uid: str, group_id: str, when: datetime) -> None:
        """Stage ``attendance_history.<group_id> = when`` for one user."""
        path = attendance_path(group_id)
        history = func.coalesce(col(UserProfile.attendance_history), func.json_object())
        self._operations.append(
            update(UserProfile)
            .where(col(UserProfile.uid) == uid)
            .values(attendance_history=func.json_set(history, path, format_timestamp(when)))
        )

    def commit(self) -> None:
        """Apply all staged operations in a single transaction.

        Either every staged update becomes visible or none does; on failure
        the transaction is rolled back and the error propagates.
        """
        if not self._operations:
            return

        connection = self._session.connection()
        try:
            for statement in self._operations:
                connection.execute(statement)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        logger.debug(f"Committed batch of {len(self._operations)} operations")
        self._operations = []

    def _update_instance(self, instance_id: str, **fields) -> None:
        self._operations.append(
            update(EventInstance).where(col(EventInstance.id) == instance_id).values(**fields)
        )


class DocumentStore:
    """Read access to event instances and user profiles plus write batches."""

    def __init__(self, session: Session):
        self.session = session

    def query_instances(
        self, field: str, start: datetime, end: datetime
    ) -> list[EventInstance]:
        """Event instances whose ``field`` lies in the closed range [start, end]."""
        if field not in RANGE_FIELDS:
            raise ValueError(f"Cannot range-query event instances by {field!r}")

        column = getattr(EventInstance, field)
        statement = (
            select(EventInstance)
            .where(column >= as_utc(start))
            .where(column <= as_utc(end))
            .order_by(column)
        )
        return list(self.session.exec(statement).all())

    def get_instance(self, instance_id: str) -> EventInstance | None:
        """Read one instance by id, bypassing anything cached in the session."""
        return self.session.get(EventInstance, instance_id, populate_existing=True)

    def get_users(self, uids: Iterable[str]) -> dict[str, UserProfile]:
        """Fetch the profiles for ``uids`` in one query, keyed by uid.

        Unknown uids are simply missing from the result.
        """
        wanted = {uid for uid in uids if uid}
        if not wanted:
            return {}

        statement = select(UserProfile).where(col(UserProfile.uid).in_(wanted))
        return {user.uid: user for user in self.session.exec(statement).all()}

    def batch(self) -> WriteBatch:
        return WriteBatch(self.session)
