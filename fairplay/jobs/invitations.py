"""Invitation job: send calendar invites for freshly revealed lists.

Runs a few minutes after the reveal job. It only considers instances whose
list has been sorted (``participants_list_processed``) and whose invites
have not been sent yet, and invites the confirmed participants.
"""
import logging
from datetime import datetime, timedelta

from fairplay.models import EventInstance
from fairplay.models.timestamps import as_utc
from fairplay.sorting.ranking import split_confirmed
from fairplay.store.documents import DocumentStore

logger = logging.getLogger(__name__)

INVITE_LOOKBACK = timedelta(hours=2)


def dispatch_invites(
    store: DocumentStore,
    sink,
    now: datetime,
    lookback: timedelta = INVITE_LOOKBACK,
) -> dict:
    """
    Send invitations for revealed instances that have not had them yet.

    ``sink`` is any object with a ``send_invite(instance, emails)`` method.
    Each instance is flagged right after its invites went out, so a failure
    on one instance neither blocks nor re-sends the others.

    Returns dict with run statistics.
    """
    now = as_utc(now)
    stats = {"selected": 0, "sent": 0, "skipped": 0, "no_attendees": 0, "failed": 0}

    instances = store.query_instances("list_reveal_datetime", now - lookback, now)
    stats["selected"] = len(instances)

    if not instances:
        logger.info("No recent instances that might require calendar invitations")
        return stats

    for instance in instances:
        if not instance.participants_list_processed or instance.calendar_invites_sent:
            stats["skipped"] += 1
            continue

        try:
            # Another run may have sent the invites since the window query
            instance = store.get_instance(instance.id)
            if instance is None or instance.calendar_invites_sent:
                stats["skipped"] += 1
                continue

            emails = confirmed_emails(store, instance)
            if not emails:
                logger.info(
                    f"No valid emails for confirmed participants of instance {instance.id}"
                )
                stats["no_attendees"] += 1
                continue

            sink.send_invite(instance, emails)

            batch = store.batch()
            batch.mark_invites_sent(instance.id)
            batch.commit()
            stats["sent"] += 1
        except Exception as e:
            logger.error(f"Failed to send invites for instance {instance.id}: {e}")
            stats["failed"] += 1

    logger.info(f"Invitation run finished: {stats}")
    return stats


def confirmed_emails(store: DocumentStore, instance: EventInstance) -> list[str]:
    """Email addresses of the confirmed participants, in list order."""
    confirmed, _ = split_confirmed(instance.participant_list(), instance.spots)
    if not confirmed:
        return []

    users = store.get_users(p.uid for p in confirmed)
    emails = []
    for participant in confirmed:
        user = users.get(participant.uid)
        if user and user.email:
            emails.append(user.email)
    return emails
