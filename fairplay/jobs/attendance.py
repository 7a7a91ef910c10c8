"""Attendance snapshot job.

Runs every 15 minutes, offset from the reveal job, and takes an attendance
snapshot of instances that are about to start: every confirmed participant
gets the instance's start time recorded as their last attendance in the
group. The next reveal in that group uses these timestamps for ranking.

Stored timestamps only ever move forward. An instance starting earlier than
what a user already has on record (e.g. processed late, or out of order)
leaves that user's entry untouched.
"""
import logging
from datetime import datetime, timedelta

from pydantic import ValidationError

from fairplay.models import EventInstance, Participant
from fairplay.models.timestamps import as_utc
from fairplay.sorting.ranking import split_confirmed
from fairplay.store.attendance import AttendanceStore
from fairplay.store.documents import DocumentStore, WriteBatch, attendance_path

logger = logging.getLogger(__name__)

ATTENDANCE_LOOKAHEAD = timedelta(hours=2)


def process_attendance(
    store: DocumentStore,
    now: datetime,
    lookahead: timedelta = ATTENDANCE_LOOKAHEAD,
) -> dict:
    """
    Record attendance for confirmed participants of instances starting soon.

    Instances missing the data needed for a snapshot are marked processed
    anyway so they are not selected again on every run. All writes of the
    run are committed together, and no commit is issued when there is
    nothing to write.

    Returns dict with run statistics.
    """
    now = as_utc(now)
    stats = {
        "selected": 0,
        "skipped": 0,
        "processed": 0,
        "malformed": 0,
        "attendance_updates": 0,
    }

    try:
        instances = store.query_instances("event_start_datetime", now, now + lookahead)
        stats["selected"] = len(instances)

        if not instances:
            logger.info("No upcoming instances found in the lookahead window")
            return stats

        attendance = AttendanceStore(store)
        batch = store.batch()
        # (uid, group_id) -> timestamp staged earlier in this run
        staged: dict[tuple[str, str], datetime] = {}

        for instance in instances:
            if instance.attendance_processed:
                stats["skipped"] += 1
                continue

            participants = _valid_participants(instance)
            if participants is None:
                logger.warning(
                    f"Instance {instance.id} is missing required fields, "
                    f"marking attendance as processed to skip it"
                )
                batch.mark_attendance_processed(instance.id)
                stats["malformed"] += 1
                continue

            stats["attendance_updates"] += _snapshot_instance(
                attendance, batch, instance, participants, staged
            )
            batch.mark_attendance_processed(instance.id)
            stats["processed"] += 1

        operations = len(batch)
        if operations > 0:
            batch.commit()
            logger.info(f"Attendance snapshot committed {operations} operations: {stats}")
        else:
            logger.info("All instances in the lookahead window were already processed")

    except Exception as e:
        logger.error(f"Attendance snapshot failed: {e}")
        raise

    return stats


def _valid_participants(instance: EventInstance) -> list[Participant] | None:
    """Parsed participants, or None when the instance cannot be snapshotted."""
    if (
        instance.participants is None
        or not instance.group_id
        or instance.event_start_datetime is None
        or instance.spots is None
    ):
        return None

    try:
        attendance_path(instance.group_id)
    except ValueError as e:
        logger.warning(f"Instance {instance.id}: {e}")
        return None

    try:
        return instance.participant_list()
    except ValidationError as e:
        logger.warning(f"Instance {instance.id} has invalid participant entries: {e}")
        return None


def _snapshot_instance(
    attendance: AttendanceStore,
    batch: WriteBatch,
    instance: EventInstance,
    participants: list[Participant],
    staged: dict[tuple[str, str], datetime],
) -> int:
    """Stage attendance updates for one instance. Returns the number staged."""
    group_id = instance.group_id
    start = as_utc(instance.event_start_datetime)
    confirmed, _ = split_confirmed(participants, instance.spots)

    logger.info(
        f"Instance {instance.id} has {instance.spots} spots, recording attendance "
        f"for {len(confirmed)} of {len(participants)} participants"
    )
    if not confirmed:
        return 0

    current = attendance.lookup((p.uid for p in confirmed), group_id)
    updates = 0

    for participant in confirmed:
        if participant.uid not in current:
            logger.warning(
                f"No profile for participant {participant.uid} of instance "
                f"{instance.id}, skipping attendance update"
            )
            continue

        known = staged.get((participant.uid, group_id), current[participant.uid])
        if known is not None and known >= start:
            logger.debug(
                f"Keeping newer attendance {known.isoformat()} for user "
                f"{participant.uid} in group {group_id}"
            )
            continue

        attendance.record(batch, participant.uid, group_id, start)
        staged[(participant.uid, group_id)] = start
        updates += 1
        logger.info(
            f"Scheduled attendance update for user {participant.display_name!r} "
            f"in group {group_id}"
        )

    return updates
