"""Accepted Airtable field names per logical attribute.

Base editors rename columns, add trailing spaces and change capitalization;
each attribute therefore lists every spelling we accept, in priority order.
``first_present`` resolves a list against a record's ``fields`` dict.
"""
from typing import Any, Optional, Sequence

EVENT_NAME = ("Event Name",)
EVENT_NOTES = ("Event Notes",)
EVENT_DATE = ("Date",)
START_TIME = ("Start Time",)
END_TIME = ("End Time",)
EVENT_TYPE = ("Event Type",)
CAPACITY = ("Number of Slots Available", "Capacity")
REGISTERED = ("Count",)
LOCK = ("Lock RSVP", "Lock RSVP ", "Is Locked", "Is Locked ")
SELECTION_TYPE = (
    "Selection Type",
    "Selection Type ",
    "Selection",
    "Selection ",
    "SelectionType",
    "SelectionType ",
)
NUM_SPEAKERS = ("NumSpeakers", "Num Speakers", "Num Speakers ")
AMPM = ("AM/PM", "AM/PM ")
LOCATION = ("Location", "Event Location")
SPEAKER = ("Speaker Full Name", "Speaker")
EVENT_RETREAT_LINK = ("Retreat",)

RSVP_EVENT_LINK = ("Event",)
RSVP_PARTICIPATION_LINK = ("Retreat Participation", "Retreat Participation ")
RSVP_RESPONSE = ("RSVP Response",)

PARTICIPANT_NAME = ("Full Name",)
PARTICIPANT_EMAIL = ("Email",)
PARTICIPATION_RETREAT_LINK = ("Retreat",)

RETREAT_NAME = ("Name",)
RETREAT_LOCATION = ("Location",)


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def first_present(fields: dict[str, Any], keys: Sequence[str], default: Any = None) -> Any:
    """Return the value of the first key in ``keys`` holding a non-empty value."""
    for key in keys:
        value = fields.get(key)
        if not is_empty(value):
            return value
    return default


def as_text(value: Any, default: str = "") -> str:
    """Text attribute as a string; lists are joined, numbers stringified."""
    if is_empty(value):
        return default
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return str(value)


def norm_text(value: Any) -> str:
    """Airtable lookups come back as lists; join them and trim."""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value).strip()
    return ""


def first_link(fields: dict[str, Any], keys: Sequence[str]) -> Optional[str]:
    """First record id of a linked-record field, or ``None``."""
    links = first_present(fields, keys, [])
    if isinstance(links, list) and links:
        return links[0]
    return None


def link_ids(fields: dict[str, Any], keys: Sequence[str]) -> list[str]:
    links = first_present(fields, keys, [])
    return links if isinstance(links, list) else []
