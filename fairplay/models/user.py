"""User profile model.

Profiles are owned by the sign-in flow. The batch jobs read them for
attendance history and email addresses, and the attendance snapshot job
advances ``attendance_history`` entries.
"""

from datetime import datetime

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from fairplay.models.timestamps import parse_timestamp


class UserProfile(SQLModel, table=True):
    """A user of the scheduler.

    Attributes:
        uid: User id, referenced by ``Participant.uid``.
        email: Address used for calendar invitations.
        display_name: Human-readable name.
        photo_url: Opaque avatar reference.
        attendance_history: Map of group id to the ISO-8601 UTC timestamp of
            the user's most recent confirmed attendance in that group.
    """
    uid: str = Field(primary_key=True)
    email: str | None = None
    display_name: str = ""
    photo_url: str = ""
    attendance_history: dict[str, str] | None = Field(
        default_factory=dict, sa_column=Column(JSON(none_as_null=True))
    )

    def last_attended(self, group_id: str) -> datetime | None:
        """Most recent confirmed attendance in ``group_id``, if any."""
        return parse_timestamp((self.attendance_history or {}).get(group_id))
