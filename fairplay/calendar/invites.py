"""Calendar invitation sink backed by Google Calendar.

For every revealed instance the invitation job hands over the confirmed
attendees' addresses. The sink creates one event on the organizer calendar
with those attendees and lets Google deliver the invitation emails.
"""
import logging
from datetime import timedelta

from fairplay.calendar.client import build_calendar_service
from fairplay.core.config import Settings, settings
from fairplay.models import EventInstance
from fairplay.models.timestamps import as_utc

logger = logging.getLogger(__name__)


def resignation_link(base_url: str, group_id: str | None) -> str:
    """Link to the group page where confirmed participants can resign."""
    return f"{base_url.rstrip('/')}/#/group/{group_id or ''}"


def build_invite_event(
    instance: EventInstance,
    emails: list[str],
    base_url: str,
    default_duration: timedelta = timedelta(hours=1),
) -> dict:
    """
    Build the Calendar API event resource for an instance.

    The end time defaults to start + ``default_duration`` when the instance
    has none. The description starts with the resignation link, followed by
    the instance's own description.
    """
    start = as_utc(instance.event_start_datetime)
    end = as_utc(instance.event_end_datetime) or start + default_duration
    link = resignation_link(base_url, instance.group_id)

    description = f"To resign if you can't make it, please visit: {link}"
    if instance.description:
        description = f"{description}\n\n---\n\n{instance.description}"

    return {
        "summary": instance.title,
        "description": description,
        "location": instance.location,
        "start": {"dateTime": start.isoformat(), "timeZone": "UTC"},
        "end": {"dateTime": end.isoformat(), "timeZone": "UTC"},
        "attendees": [{"email": email} for email in emails],
        "extendedProperties": {"private": {"eventInstanceId": instance.id}},
        "guestsCanSeeOtherGuests": True,
    }


class GoogleCalendarInviteSink:
    """Deliver invitations by inserting events into a Google Calendar."""

    def __init__(self, service=None, config: Settings = settings):
        self._service = service
        self.config = config

    @property
    def service(self):
        if self._service is None:
            self._service = build_calendar_service(self.config)
        return self._service

    def send_invite(self, instance: EventInstance, emails: list[str]) -> str:
        """
        Create the calendar event and have Google email the attendees.

        Raises ``googleapiclient.errors.HttpError`` if the API call fails.

        Returns:
            The id of the created calendar event.
        """
        body = build_invite_event(
            instance,
            emails,
            self.config.app_base_url,
            timedelta(minutes=self.config.default_event_duration_minutes),
        )
        created = (
            self.service.events()
            .insert(
                calendarId=self.config.google_calendar_id,
                body=body,
                sendUpdates="all",
            )
            .execute()
        )
        logger.info(
            f"Sent calendar invites for instance {instance.id} to {len(emails)} attendees"
        )
        return created.get("id", "")
