"""Typed access to per-user "last attended this group" timestamps."""
import logging
from collections.abc import Iterable
from datetime import datetime

from fairplay.store.documents import DocumentStore, WriteBatch

logger = logging.getLogger(__name__)


class AttendanceStore:
    """Reads and stages writes of ``UserProfile.attendance_history`` entries."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def lookup(self, uids: Iterable[str], group_id: str) -> dict[str, datetime | None]:
        """Last attendance in ``group_id`` for every uid that has a profile.

        Users without a profile are left out of the result, users that never
        attended the group map to None. An entry that cannot be parsed as a
        timestamp is logged and treated as never attended.
        """
        users = self.store.get_users(uids)
        lookup = {}
        for uid, user in users.items():
            try:
                lookup[uid] = user.last_attended(group_id)
            except (TypeError, ValueError) as e:
                logger.warning(
                    f"Ignoring unreadable attendance of user {uid} in group {group_id}: {e}"
                )
                lookup[uid] = None
        return lookup

    def record(self, batch: WriteBatch, uid: str, group_id: str, when: datetime) -> None:
        """Stage a new last-attendance timestamp for ``uid`` in ``group_id``."""
        batch.set_last_attended(uid, group_id, when)
