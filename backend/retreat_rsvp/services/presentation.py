"""Presentation layer: page view model and the control guards.

Builds the grouped cards the client renders, and decides whether a click on
a control is allowed at all. Locked events and full events never reach the
response store through these guards.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

import pytz

from retreat_rsvp.models.event import RetreatEvent
from retreat_rsvp.models.rsvp import Notification, RSVPResponse, SaveStatus
from retreat_rsvp.schemas.rsvp import BadgeOut, CardOut, GroupOut, HeaderOut, PageOut
from retreat_rsvp.services.response_store import ResponseStore

logger = logging.getLogger(__name__)

SINGLE_HINT = "Select one option from this category"
TOGGLE_HINT = "Toggle attendance for each event"


def friendly_date(value: str, tz_name: str) -> str:
    """'2025-05-01' -> 'Thu, May 1', read in the retreat's time zone. Raw value when unparseable."""
    if not value:
        return value
    try:
        parsed = datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return value
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    try:
        local = parsed.astimezone(pytz.timezone(tz_name))
    except pytz.UnknownTimeZoneError:
        logger.warning("Unknown display timezone %s, showing raw date", tz_name)
        return value
    return f"{local:%a}, {local:%b} {local.day}"


def spots_badge(event: RetreatEvent) -> Optional[BadgeOut]:
    spots = event.spots_left
    if spots is None:
        return None
    if event.is_full:
        return BadgeOut(label="Full", variant="destructive")
    label = f"{spots} spot{'' if spots == 1 else 's'} left"
    if spots <= 2:
        variant = "destructive"
    elif spots <= 5:
        variant = "warning"
    else:
        variant = "success"
    return BadgeOut(label=label, variant=variant)


def is_selected(store: ResponseStore, event: RetreatEvent) -> bool:
    return store.response_for(event.id) == RSVPResponse.yes


def can_toggle(event: RetreatEvent, response: RSVPResponse) -> bool:
    """Switches: nothing on locked events, no Yes on full ones."""
    return not (event.locked or (event.is_full and response == RSVPResponse.yes))


def can_select(store: ResponseStore, event: RetreatEvent) -> bool:
    """Radios: nothing on locked events; a full event can only be deselected."""
    return not (event.locked or (event.is_full and not is_selected(store, event)))


def group_events(events: list[RetreatEvent]) -> dict[str, list[RetreatEvent]]:
    groups: dict[str, list[RetreatEvent]] = {}
    for event in events:
        groups.setdefault(event.group or "Other", []).append(event)
    return groups


def _card(
    store: ResponseStore,
    event: RetreatEvent,
    selected_event_id: Optional[str],
    disable_controls: bool,
    tz_name: str,
    support_email: str,
) -> CardOut:
    single = event.is_single_choice
    selected = selected_event_id == event.id if single else is_selected(store, event)

    speaker_label = None
    if event.speaker:
        speaker_label = f"{'Speakers:' if event.num_speakers > 1 else 'Speaker:'} {event.speaker}"

    time_label = " ".join(part for part in (event.time, event.ampm) if part)
    lock_message = None
    if event.locked and not disable_controls:
        lock_message = (
            f"RSVP's for this session are now locked, please contact {support_email} "
            "for additional information."
        )

    if single:
        control, control_label = "radio", "Selected" if selected else "Select"
    else:
        control, control_label = "switch", "Attending" if selected else "Not attending"

    return CardOut(
        event_id=event.id,
        name=event.name,
        type=event.type,
        speaker_label=speaker_label,
        description=event.description,
        date_label=friendly_date(event.date, tz_name),
        time_label=time_label,
        location=event.location,
        capacity_label=f"{event.registered}/{event.capacity}" if event.capacity is not None else None,
        spots_badge=spots_badge(event),
        locked=event.locked,
        lock_message=lock_message,
        is_full=event.is_full,
        selected=selected,
        control=control,
        control_label=control_label,
        control_disabled=disable_controls or event.locked or (event.is_full and not selected),
        clickable=single and not event.locked and not event.is_full and not disable_controls,
        status=store.status.get(event.id, SaveStatus.confirmed),
    )


def build_page(
    store: ResponseStore,
    tz_name: str,
    support_email: str,
    loading: bool = False,
    is_saving: bool = False,
    notifications: Optional[list[Notification]] = None,
) -> PageOut:
    """Assemble the whole page: header, lock banner, groups of cards, save footer."""
    participant = store.participant
    all_locked = store.all_locked

    groups = []
    for title, events in group_events(store.events).items():
        single = events[0].is_single_choice
        selected_event_id = next(
            (e.id for e in events if e.is_single_choice and is_selected(store, e)), None,
        )
        groups.append(GroupOut(
            title=title,
            single_choice=single,
            hint=SINGLE_HINT if single else TOGGLE_HINT,
            selected_event_id=selected_event_id,
            cards=[
                _card(store, e, selected_event_id, all_locked, tz_name, support_email)
                for e in events
            ],
        ))

    unsaved = store.has_unsaved_changes
    return PageOut(
        participation_id=store.participation_id,
        loading=loading,
        is_saving=is_saving,
        header=HeaderOut(
            user_name=participant.name,
            email=participant.email or "no-email@unknown",
            retreat_name=participant.retreat_name,
            retreat_location=participant.retreat_location,
        ),
        all_sessions_locked=all_locked,
        locked_message=(
            f"RSVPs for all sessions are currently locked. Please contact {support_email} "
            "for additional information."
        ) if all_locked else None,
        has_unsaved_changes=unsaved,
        unsaved_label="You have unsaved changes" if unsaved else "No unsaved changes",
        groups=groups,
        notifications=notifications or [],
    )
