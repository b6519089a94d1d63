"""Application configuration via environment variables."""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """App settings loaded from .env or environment."""

    AIRTABLE_API_KEY: str = ""
    AIRTABLE_BASE_ID: str = ""
    AIRTABLE_API_URL: str = "https://api.airtable.com/v0"
    AIRTABLE_EVENTS_TABLE_NAME: str = "Retreat Sessions"
    AIRTABLE_RSVP_TABLE_NAME: str = "Retreat Session RSVPs"
    AIRTABLE_PARTICIPATION_TABLE_NAME: str = "Retreat Participation"
    AIRTABLE_RETREATS_TABLE_NAME: str = "Retreats"
    AIRTABLE_PAGE_SIZE: int = 100
    AIRTABLE_TIMEOUT_SECONDS: float = 30.0
    DISPLAY_TIMEZONE: str = "Europe/Lisbon"
    SUPPORT_EMAIL: str = "imran34@gmail.com"
    CORS_ORIGINS: str = "http://localhost:5173"
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"


settings = Settings()
