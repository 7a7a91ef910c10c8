from fairplay.models.event_instance import EventInstance
from fairplay.models.participant import Participant
from fairplay.models.user import UserProfile

__all__ = ["EventInstance", "Participant", "UserProfile"]
