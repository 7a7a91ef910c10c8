"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or .env file."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application
    app_name: str = "Fairplay Scheduler"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    allowed_origins: str = "*"  # Comma-separated origins, or "*" for all

    # Database
    database_url: str = "sqlite:///./fairplay.db"

    # Processing windows
    reveal_lookback_hours: int = 2
    attendance_lookahead_hours: int = 2
    invite_lookback_hours: int = 2

    # Scheduler (cron minute fields, offset so the jobs rarely overlap)
    scheduler_enabled: bool = True
    scheduler_timezone: str = "UTC"
    reveal_cron_minutes: str = "0,15,30,45"
    invites_cron_minutes: str = "5,20,35,50"
    attendance_cron_minutes: str = "10,25,40,55"

    # Google Calendar API (invitation sink)
    google_client_id: str = ""
    google_client_secret: str = ""
    google_refresh_token: str = ""  # Obtained via scripts/get_token.py
    google_calendar_id: str = "primary"

    # Invitations
    app_base_url: str = "https://localhost:8000"
    default_event_duration_minutes: int = 60


settings = Settings()
