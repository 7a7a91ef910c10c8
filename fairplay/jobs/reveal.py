"""Reveal job: sort the participant lists whose reveal time has passed.

Runs every 15 minutes. Each run looks back over a bounded window of reveal
times rather than filtering on the processed flag in the query, so it works
for instances that never had the flag written. The flag is checked in code
instead, which also makes a repeated or overlapping run a no-op.
"""
import logging
import random
from datetime import datetime, timedelta

from fairplay.models import EventInstance
from fairplay.models.timestamps import as_utc
from fairplay.sorting.ranking import rank_participants
from fairplay.store.attendance import AttendanceStore
from fairplay.store.documents import DocumentStore

logger = logging.getLogger(__name__)

REVEAL_LOOKBACK = timedelta(hours=2)


def process_reveals(
    store: DocumentStore,
    now: datetime,
    lookback: timedelta = REVEAL_LOOKBACK,
    rng: random.Random | None = None,
) -> dict:
    """
    Rank and persist participant lists for recently revealed instances.

    A failure while ranking one instance is logged and that instance is
    left for the next run. A failure of the final commit propagates and
    nothing is written.

    Returns dict with run statistics.
    """
    now = as_utc(now)
    stats = {"selected": 0, "skipped": 0, "processed": 0, "failed": 0}

    instances = store.query_instances("list_reveal_datetime", now - lookback, now)
    stats["selected"] = len(instances)

    if not instances:
        logger.info("No instances revealed in the lookback window")
        return stats

    attendance = AttendanceStore(store)
    batch = store.batch()

    for instance in instances:
        if instance.participants_list_processed:
            stats["skipped"] += 1
            continue

        try:
            ranked = _rank_instance(attendance, instance, rng)
        except Exception as e:
            logger.error(f"Failed to rank participants of instance {instance.id}: {e}")
            stats["failed"] += 1
            continue

        batch.save_ranking(instance.id, ranked)
        stats["processed"] += 1
        logger.info(
            f"Ranked {len(ranked)} participants for instance {instance.id} "
            f"({instance.spots} spots)"
        )

    operations = len(batch)
    if operations > 0:
        batch.commit()
        logger.info(f"Reveal committed {operations} operations: {stats}")
    else:
        logger.info(f"No reveals to commit: {stats}")

    return stats


def _rank_instance(
    attendance: AttendanceStore,
    instance: EventInstance,
    rng: random.Random | None,
) -> list:
    """Enrich one instance's participants with attendance data and rank them."""
    if not instance.group_id:
        raise ValueError(f"Instance {instance.id} has no group_id")

    participants = instance.participant_list()
    lookup = attendance.lookup((p.uid for p in participants), instance.group_id)
    return rank_participants(participants, lookup, instance.list_reveal_datetime, rng)
