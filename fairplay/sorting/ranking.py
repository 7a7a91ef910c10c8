"""Participant ranking for list reveals.

Ordering rules, applied in a single sort:

1. Organizers come before everyone else.
2. Within each of those two bands, participants who attended the group
   least recently come first. A participant with no attendance record
   counts as timestamp 0, so first-timers lead the list.
3. Exact ties are broken at random. This is a fairness mechanism: two
   people with identical history get a coin flip, not registration order.

A random key is drawn for every participant before sorting, which yields a
consistent random total order for the run. Pass a seeded ``random.Random``
to reproduce an order; by default a fresh unseeded generator is used.
"""
import random
from collections.abc import Mapping, Sequence
from datetime import datetime

from fairplay.models import Participant
from fairplay.models.timestamps import as_utc, to_millis


def rank_participants(
    participants: Sequence[Participant],
    attendance_lookup: Mapping[str, datetime | None],
    list_reveal_time: datetime | None,
    rng: random.Random | None = None,
) -> list[Participant]:
    """Return a new, ranked list of participants.

    Args:
        participants: Registrants in registration order. Not modified.
        attendance_lookup: uid -> last attendance in the event's group.
            Missing uids are treated as never attended.
        list_reveal_time: Reveal time of the instance, only used to set the
            informational ``is_late`` flag.
        rng: Source of tie-break keys.

    Returns:
        Copies of the participants, annotated with ``is_late`` and
        ``last_participation``, in ranked order.
    """
    rng = rng or random.Random()
    reveal_time = as_utc(list_reveal_time)

    keyed = []
    for participant in participants:
        last = as_utc(attendance_lookup.get(participant.uid))
        registered = as_utc(participant.registered_at)
        is_late = bool(reveal_time and registered and registered > reveal_time)
        annotated = participant.model_copy(
            update={"is_late": is_late, "last_participation": last}
        )
        sort_key = (not participant.is_organizer, to_millis(last), rng.random())
        keyed.append((sort_key, annotated))

    keyed.sort(key=lambda pair: pair[0])
    return [participant for _, participant in keyed]


def split_confirmed(
    participants: Sequence[Participant], spots: int | None
) -> tuple[list[Participant], list[Participant]]:
    """Split an ordered list into (confirmed, waiting) by capacity."""
    capacity = max(spots or 0, 0)
    return list(participants[:capacity]), list(participants[capacity:])
