"""Single-choice group policy."""
from typing import Iterable

from retreat_rsvp.models.event import RetreatEvent
from retreat_rsvp.models.rsvp import RSVPResponse


def single_choice_members(events: Iterable[RetreatEvent], group: str) -> list[RetreatEvent]:
    """Exclusive-choice events carrying ``group``; Yes/No events sharing the label are not members."""
    return [e for e in events if e.group == group and e.is_single_choice]


def select_single(
    events: Iterable[RetreatEvent],
    draft: dict[str, RSVPResponse],
    group: str,
    event_id: str,
) -> dict[str, RSVPResponse]:
    """Return a new draft with ``event_id`` as the only Yes of its group.

    Selecting the event that already holds the Yes clears the group instead.
    """
    members = single_choice_members(events, group)
    if event_id not in {e.id for e in members}:
        raise ValueError(f"Event {event_id} is not a single-choice option of group '{group}'")

    currently_yes = next((e.id for e in members if draft.get(e.id) == RSVPResponse.yes), None)

    updated = dict(draft)
    for member in members:
        updated[member.id] = RSVPResponse.no
    if currently_yes != event_id:
        updated[event_id] = RSVPResponse.yes
    return updated
