"""Per-participant response state: last saved answers, drafts and RSVP rows.

The store never validates. Lock and capacity checks happen in the
presentation layer before any mutator here is called.
"""
import logging
from typing import Any, Optional

from retreat_rsvp.models.event import RetreatEvent
from retreat_rsvp.models.rsvp import Participant, RSVPResponse, SaveStatus
from retreat_rsvp.services import group_policy
from retreat_rsvp.services.view_mapper import MappedView, find_rsvp

logger = logging.getLogger(__name__)


class ResponseStore:
    def __init__(self, participation_id: str):
        self.participation_id = participation_id
        self.participant = Participant(participation_id=participation_id)
        self.events: list[RetreatEvent] = []
        self.records: list[dict[str, Any]] = []
        self.original: dict[str, RSVPResponse] = {}
        self.draft: dict[str, RSVPResponse] = {}
        self.status: dict[str, SaveStatus] = {}

    def reset(self, view: MappedView) -> None:
        """Adopt a freshly loaded view; drafts and originals both start from server state."""
        self.participant = view.participant
        self.events = list(view.events)
        self.records = list(view.rsvps)
        self.original = dict(view.initial)
        self.draft = dict(view.initial)
        self.status = {e.id: SaveStatus.confirmed for e in self.events}

    def get_event(self, event_id: str) -> Optional[RetreatEvent]:
        return next((e for e in self.events if e.id == event_id), None)

    def response_for(self, event_id: str) -> RSVPResponse:
        return self.draft.get(event_id, RSVPResponse.no)

    def _restatus(self, event_id: str) -> None:
        saved = self.original.get(event_id, RSVPResponse.no)
        self.status[event_id] = SaveStatus.confirmed if self.response_for(event_id) == saved else SaveStatus.unsaved

    def toggle(self, event_id: str, response: RSVPResponse) -> None:
        self.draft[event_id] = response
        self._restatus(event_id)

    def select_single(self, group: str, event_id: str) -> None:
        self.draft = group_policy.select_single(self.events, self.draft, group, event_id)
        for member in group_policy.single_choice_members(self.events, group):
            self._restatus(member.id)

    @property
    def has_unsaved_changes(self) -> bool:
        keys = set(self.draft) | set(self.original)
        return any(
            self.draft.get(k, RSVPResponse.no) != self.original.get(k, RSVPResponse.no) for k in keys
        )

    @property
    def all_locked(self) -> bool:
        return bool(self.events) and all(e.locked for e in self.events)

    def find_record(self, event_id: str) -> Optional[dict[str, Any]]:
        return find_rsvp(self.records, event_id, self.participation_id)

    def remember_record(self, record: dict[str, Any]) -> None:
        """Keep a row the API just created so the next save patches it."""
        self.records.append(record)

    def mark_pending(self) -> None:
        """Treat the current draft as saved while the writes are in flight."""
        self.original = dict(self.draft)
        for event in self.events:
            self.status[event.id] = SaveStatus.pending
        logger.debug("Marked %d events pending for %s", len(self.events), self.participation_id)

    def restore_original(self, original: dict[str, RSVPResponse]) -> None:
        """Undo ``mark_pending``: compare the draft against ``original`` again."""
        self.original = dict(original)
        for event in self.events:
            self._restatus(event.id)
