"""Event instance model: one concrete occurrence of a group event.

Event instances are created by the event-creation flow and filled with
participants by registration. The batch jobs only ever touch four fields:
the participant list (reordered once at reveal) and the three processing
flags that make every job safe to re-run.
"""

from datetime import datetime

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from fairplay.models.participant import Participant


class EventInstance(SQLModel, table=True):
    """A single occurrence of a (possibly recurring) group event.

    Attributes:
        id: Document id of the instance.
        event_id: Id of the event template this instance was generated from.
        group_id: Group owning the event. Attendance is tracked per group.
        title: Event title, used in calendar invitations.
        description: Free-text description.
        location: Free-text location.
        spots: Capacity; the first ``spots`` participants after the reveal
            are confirmed, the rest are on the waiting list.
        event_start_datetime: When the event starts.
        event_end_datetime: When the event ends, if known.
        registration_open_datetime: When sign-ups open.
        list_reveal_datetime: When the list is sorted and revealed.
        participants: Participant documents. Registration order until
            ``participants_list_processed`` is set, ranked order after.
        participants_list_processed: Set once by the reveal job.
        attendance_processed: Set once by the attendance snapshot job.
        calendar_invites_sent: Set once invitations were handed to the
            calendar.
    """
    id: str = Field(primary_key=True)
    event_id: str | None = Field(default=None, index=True)
    group_id: str | None = Field(default=None, index=True)
    title: str = ""
    description: str = ""
    location: str = ""
    spots: int | None = None
    event_start_datetime: datetime | None = Field(default=None, index=True)
    event_end_datetime: datetime | None = None
    registration_open_datetime: datetime | None = None
    list_reveal_datetime: datetime | None = Field(default=None, index=True)
    participants: list[dict] | None = Field(
        default_factory=list, sa_column=Column(JSON(none_as_null=True))
    )
    participants_list_processed: bool = Field(default=False)
    attendance_processed: bool = Field(default=False)
    calendar_invites_sent: bool = Field(default=False)

    def participant_list(self) -> list[Participant]:
        """Parse the stored participant documents.

        Raises pydantic's ``ValidationError`` for entries that are not valid
        participant documents.
        """
        return [Participant.from_document(doc) for doc in self.participants or []]
