"""View-model mapper: raw Airtable rows to the ordered RSVP event list.

Pure functions only: no I/O, no session state. The session loader fetches
the rows and hands them over; the result carries everything the response
store needs to initialize drafts.
"""
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from retreat_rsvp.models.event import RetreatEvent, SelectionMode
from retreat_rsvp.models.rsvp import Participant, RSVPResponse
from retreat_rsvp.services import field_aliases as fa

logger = logging.getLogger(__name__)

Record = dict[str, Any]

OPEN_SEATING = "open seating"
DEFAULT_EVENT_NAME = "Unnamed Event"
DEFAULT_EVENT_TYPE = "General Events"


@dataclass
class MappedView:
    participant: Participant
    events: list[RetreatEvent] = field(default_factory=list)
    rsvps: list[Record] = field(default_factory=list)
    initial: dict[str, RSVPResponse] = field(default_factory=dict)


def infer_selection_mode(raw: Any) -> SelectionMode:
    """'One Option', 'single choice', ... mean exclusive choice; anything else is Yes/No."""
    text = fa.norm_text(raw).lower()
    if "one" in text or "single" in text:
        return SelectionMode.one_option
    return SelectionMode.yes_no


def _to_number(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number):
        return None
    return int(number)


def map_participant(participation_id: str, participation: Record, retreat: Optional[Record]) -> Participant:
    p_fields = participation.get("fields") or {}
    r_fields = (retreat or {}).get("fields") or {}
    return Participant(
        participation_id=participation_id,
        name=fa.as_text(fa.first_present(p_fields, fa.PARTICIPANT_NAME), "Guest"),
        email=fa.as_text(fa.first_present(p_fields, fa.PARTICIPANT_EMAIL)),
        retreat_id=fa.first_link(p_fields, fa.PARTICIPATION_RETREAT_LINK),
        retreat_name=fa.as_text(fa.first_present(r_fields, fa.RETREAT_NAME), "Retreat"),
        retreat_location=fa.as_text(fa.first_present(r_fields, fa.RETREAT_LOCATION), "Location TBA"),
    )


def map_event(record: Record) -> RetreatEvent:
    """Shape one events-table row. Every attribute goes through its alias list."""
    f = record.get("fields") or {}

    start = fa.as_text(fa.first_present(f, fa.START_TIME))
    end = fa.as_text(fa.first_present(f, fa.END_TIME))
    time = f"{start}–{end}" if start and end else start

    event_type = fa.norm_text(fa.first_present(f, fa.EVENT_TYPE, "")) or DEFAULT_EVENT_TYPE

    return RetreatEvent(
        id=record["id"],
        name=fa.as_text(fa.first_present(f, fa.EVENT_NAME), DEFAULT_EVENT_NAME),
        description=fa.as_text(fa.first_present(f, fa.EVENT_NOTES)),
        date=fa.as_text(fa.first_present(f, fa.EVENT_DATE)),
        time=time,
        type=event_type,
        group=event_type,
        capacity=_to_number(fa.first_present(f, fa.CAPACITY)),
        registered=_to_number(fa.first_present(f, fa.REGISTERED)) or 0,
        locked=any(bool(f.get(key)) for key in fa.LOCK),
        selection_mode=infer_selection_mode(fa.first_present(f, fa.SELECTION_TYPE)),
        ampm=fa.norm_text(fa.first_present(f, fa.AMPM)),
        location=fa.norm_text(fa.first_present(f, fa.LOCATION)),
        speaker=fa.norm_text(fa.first_present(f, fa.SPEAKER)),
        num_speakers=_to_number(fa.first_present(f, fa.NUM_SPEAKERS)) or 0,
    )


def rsvp_matches(record: Record, event_id: str, participation_id: str) -> bool:
    """True when the RSVP row links this event and this participation.

    Either spelling of the participation link counts.
    """
    f = record.get("fields") or {}
    if fa.first_link(f, fa.RSVP_EVENT_LINK) != event_id:
        return False
    for key in fa.RSVP_PARTICIPATION_LINK:
        links = f.get(key) or []
        if isinstance(links, list) and links and links[0] == participation_id:
            return True
    return False


def find_rsvp(records: list[Record], event_id: str, participation_id: str) -> Optional[Record]:
    return next((r for r in records if rsvp_matches(r, event_id, participation_id)), None)


def events_for_retreat(records: list[Record], retreat_id: Optional[str]) -> list[Record]:
    if not retreat_id:
        return []
    return [r for r in records if retreat_id in fa.link_ids(r.get("fields") or {}, fa.EVENT_RETREAT_LINK)]


def rsvps_for_participation(records: list[Record], participation_id: str) -> list[Record]:
    return [
        r for r in records
        if participation_id in fa.link_ids(r.get("fields") or {}, fa.RSVP_PARTICIPATION_LINK)
    ]


def _date_key(value: str) -> tuple[int, float]:
    # empty sorts as the epoch; unparseable dates go after every parseable one
    if not value:
        return (0, 0.0)
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return (1, 0.0)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return (0, parsed.timestamp())


def is_open_seating(event: RetreatEvent) -> bool:
    return (event.name or "").strip().lower() == OPEN_SEATING


def sort_events(events: list[RetreatEvent]) -> list[RetreatEvent]:
    """Date, then start time; Open Seating always last."""
    ordered = sorted(events, key=lambda e: (_date_key(e.date), e.start_time))
    others = [e for e in ordered if not is_open_seating(e)]
    open_seating = [e for e in ordered if is_open_seating(e)]
    return others + open_seating


def map_view_model(
    participation_id: str,
    participation: Record,
    retreat: Optional[Record],
    events: list[Record],
    rsvps: list[Record],
) -> MappedView:
    """Merge raw participation/retreat/event/RSVP rows into the page model.

    ``events`` and ``rsvps`` are whole tables; filtering to this retreat and
    this participant happens here.
    """
    participant = map_participant(participation_id, participation, retreat)

    retreat_events = events_for_retreat(events, participant.retreat_id)
    my_rsvps = rsvps_for_participation(rsvps, participation_id)
    logger.info(
        "Participation %s: %d/%d events for retreat %s, %d RSVPs",
        participation_id, len(retreat_events), len(events), participant.retreat_id, len(my_rsvps),
    )

    shaped = [map_event(rec) for rec in retreat_events]
    ordered = sort_events(shaped)

    initial: dict[str, RSVPResponse] = {}
    for event in ordered:
        matched = find_rsvp(my_rsvps, event.id, participation_id)
        response = fa.first_present((matched or {}).get("fields") or {}, fa.RSVP_RESPONSE)
        if matched:
            logger.debug("Matched event %s with RSVP %s -> %s", event.id, matched.get("id"), response)
        initial[event.id] = RSVPResponse.yes if response == RSVPResponse.yes.value else RSVPResponse.no

    return MappedView(participant=participant, events=ordered, rsvps=my_rsvps, initial=initial)
