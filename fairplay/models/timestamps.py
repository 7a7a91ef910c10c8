"""UTC timestamp helpers shared by the models and the batch jobs.

SQLite hands datetimes back without tzinfo, while participant documents and
attendance history entries are stored as ISO-8601 strings with an offset.
Everything is normalised to aware UTC before it is compared.
"""

from datetime import UTC, datetime


def as_utc(value: datetime | None) -> datetime | None:
    """Return ``value`` as an aware UTC datetime (naive values are assumed UTC)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def parse_timestamp(value) -> datetime | None:
    """Parse a stored timestamp (datetime or ISO string) into aware UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    return as_utc(datetime.fromisoformat(str(value).replace("Z", "+00:00")))


def format_timestamp(value: datetime) -> str:
    """Serialise a datetime for storage inside a JSON document."""
    return as_utc(value).isoformat()


def to_millis(value: datetime | None) -> int:
    """Epoch milliseconds, with a missing value counting as 0."""
    if value is None:
        return 0
    return int(as_utc(value).timestamp() * 1000)
