"""RSVP response values, save states and the participant header."""
import enum
from typing import Optional

from pydantic import BaseModel


class RSVPResponse(str, enum.Enum):
    yes = "Yes"
    no = "No"


class SaveStatus(str, enum.Enum):
    unsaved = "unsaved"
    pending = "pending"
    confirmed = "confirmed"


class Participant(BaseModel):
    """Who is answering, and for which retreat. Read-only for a session."""

    participation_id: str
    name: str = "Guest"
    email: str = ""
    retreat_id: Optional[str] = None
    retreat_name: str = "Retreat"
    retreat_location: str = "Location TBA"


class Notification(BaseModel):
    """One-shot acknowledgement shown to the user after a save attempt."""

    title: str
    description: str
    variant: str = "default"


SAVED_NOTIFICATION = Notification(title="Saved", description="Your RSVP preferences were updated.")
ERROR_NOTIFICATION = Notification(
    title="Error",
    description="Failed to save. Changes may not have been persisted.",
    variant="destructive",
)
