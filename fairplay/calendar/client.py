"""Google Calendar API access for the invitation sink.

The organizer account authorises the app once (``scripts/get_token.py``);
afterwards the stored refresh token is exchanged for access tokens as
needed. Google emails the invitations itself when an event is inserted
with ``sendUpdates="all"``, so no mail API is involved.
"""
import logging

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build

from fairplay.core.config import Settings, settings

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/calendar.events"]
TOKEN_URI = "https://oauth2.googleapis.com/token"


class CalendarAuthError(RuntimeError):
    """Raised when no usable Google credentials are available."""


def has_valid_credentials(config: Settings = settings) -> bool:
    """Check if a refresh token is configured."""
    return bool(config.google_refresh_token)


def load_credentials(config: Settings = settings) -> Credentials:
    """Exchange the configured refresh token for fresh credentials."""
    if not has_valid_credentials(config):
        raise CalendarAuthError(
            "No GOOGLE_REFRESH_TOKEN configured. "
            "Run 'python scripts/get_token.py' to set up authentication."
        )

    credentials = Credentials(
        token=None,
        refresh_token=config.google_refresh_token,
        token_uri=TOKEN_URI,
        client_id=config.google_client_id,
        client_secret=config.google_client_secret,
        scopes=SCOPES,
    )
    try:
        credentials.refresh(Request())
    except RefreshError as e:
        raise CalendarAuthError(f"Failed to refresh Google credentials: {e}") from e

    logger.info("Refreshed Google API credentials")
    return credentials


def build_calendar_service(config: Settings = settings):
    """Build an authenticated Calendar v3 service."""
    return build(
        "calendar", "v3", credentials=load_credentials(config), cache_discovery=False
    )
