"""Participant documents embedded in an event instance.

Participants are not a table of their own: the registration flow appends
them to ``EventInstance.participants`` as JSON documents and the reveal job
writes the reordered list back in one piece.
"""

from datetime import datetime

from sqlmodel import SQLModel


class Participant(SQLModel):
    """A registrant embedded in an event instance.

    Attributes:
        uid: Id of the user's profile; identity of the participant.
        display_name: Name shown on the sign-up list.
        photo_url: Opaque avatar reference.
        is_organizer: Organizers are always placed ahead of everyone else.
        registered_at: When the user signed up.
        is_late: Set by the reveal; True when the user registered after the
            list reveal time. Informational only.
        last_participation: Set by the reveal; the attendance timestamp that
            was used for ranking, or None for a first-timer.
    """
    uid: str
    display_name: str = ""
    photo_url: str = ""
    is_organizer: bool = False
    registered_at: datetime | None = None
    is_late: bool | None = None
    last_participation: datetime | None = None

    @classmethod
    def from_document(cls, document: dict) -> "Participant":
        return cls.model_validate(document)

    def to_document(self) -> dict:
        return self.model_dump(mode="json")
