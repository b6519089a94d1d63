"""Tests for the response store and the single-choice group policy."""
import pytest

from retreat_rsvp.models.event import RetreatEvent, SelectionMode
from retreat_rsvp.models.rsvp import Participant, RSVPResponse, SaveStatus
from retreat_rsvp.services import group_policy
from retreat_rsvp.services.response_store import ResponseStore
from retreat_rsvp.services.view_mapper import MappedView

PID = "recPART1"
YES, NO = RSVPResponse.yes, RSVPResponse.no


def _event(event_id, group="Talks", single=False, locked=False):
    mode = SelectionMode.one_option if single else SelectionMode.yes_no
    return RetreatEvent(id=event_id, name=event_id, type=group, group=group, selection_mode=mode, locked=locked)


def _store(events, initial=None, rsvps=None) -> ResponseStore:
    store = ResponseStore(PID)
    store.reset(MappedView(
        participant=Participant(participation_id=PID),
        events=events,
        rsvps=rsvps or [],
        initial=initial or {e.id: NO for e in events},
    ))
    return store


class TestToggle:

    def test_sets_draft_and_flags_unsaved(self):
        store = _store([_event("A")])
        store.toggle("A", YES)
        assert store.draft["A"] == YES
        assert store.has_unsaved_changes
        assert store.status["A"] == SaveStatus.unsaved

    def test_toggling_back_clears_unsaved(self):
        store = _store([_event("A")])
        store.toggle("A", YES)
        store.toggle("A", NO)
        assert not store.has_unsaved_changes
        assert store.status["A"] == SaveStatus.confirmed

    def test_no_validation_in_store(self):
        store = _store([_event("A", locked=True)])
        store.toggle("A", YES)
        assert store.draft["A"] == YES

    def test_missing_keys_count_as_no(self):
        store = _store([_event("A")])
        store.draft.clear()
        store.original.clear()
        assert store.response_for("A") == NO
        store.toggle("A", NO)
        assert not store.has_unsaved_changes


class TestSelectSingle:

    def test_at_most_one_yes(self):
        events = [_event("A", single=True), _event("B", single=True), _event("C", single=True)]
        store = _store(events)
        store.select_single("Talks", "A")
        store.select_single("Talks", "C")
        assert store.draft == {"A": NO, "B": NO, "C": YES}

    def test_reselect_clears_group(self):
        store = _store([_event("A", single=True), _event("B", single=True)])
        store.select_single("Talks", "B")
        store.select_single("Talks", "B")
        assert [e.id for e in store.events if store.draft[e.id] == YES] == []

    def test_yes_no_events_sharing_label_are_untouched(self):
        # scenario: A is a Yes/No talk, B a single-choice talk, same label
        store = _store([_event("A"), _event("B", single=True)])
        assert store.draft == {"A": NO, "B": NO}

        store.toggle("A", YES)
        assert store.draft == {"A": YES, "B": NO}

        store.select_single("Talks", "B")
        assert store.draft == {"A": YES, "B": YES}

    def test_other_groups_untouched(self):
        events = [_event("A", single=True), _event("X", group="Meals", single=True)]
        store = _store(events, initial={"A": NO, "X": YES})
        store.select_single("Talks", "A")
        assert store.draft["X"] == YES

    def test_unknown_member_rejected(self):
        store = _store([_event("A", single=True), _event("M", group="Meals", single=True)])
        with pytest.raises(ValueError):
            store.select_single("Talks", "M")

    def test_policy_returns_new_draft(self):
        events = [_event("A", single=True), _event("B", single=True)]
        draft = {"A": YES, "B": NO}
        updated = group_policy.select_single(events, draft, "Talks", "B")
        assert updated == {"A": NO, "B": YES}
        assert draft == {"A": YES, "B": NO}


class TestRecordsAndPending:

    def test_find_record_for_this_participant(self):
        rsvps = [{"id": "r1", "fields": {"Event": ["A"], "Retreat Participation": [PID], "RSVP Response": "No"}}]
        store = _store([_event("A"), _event("B")], rsvps=rsvps)
        assert store.find_record("A")["id"] == "r1"
        assert store.find_record("B") is None

    def test_remembered_record_is_found(self):
        store = _store([_event("B")])
        store.remember_record({"id": "new", "fields": {"Event": ["B"], "Retreat Participation": [PID]}})
        assert store.find_record("B")["id"] == "new"

    def test_mark_pending_snapshots_draft(self):
        store = _store([_event("A"), _event("B")])
        store.toggle("A", YES)
        store.mark_pending()
        assert not store.has_unsaved_changes
        assert set(store.status.values()) == {SaveStatus.pending}

    def test_restore_original_undoes_pending(self):
        store = _store([_event("A"), _event("B")])
        last_saved = dict(store.original)
        store.toggle("A", YES)
        store.mark_pending()

        store.restore_original(last_saved)

        assert store.has_unsaved_changes
        assert store.status == {"A": SaveStatus.unsaved, "B": SaveStatus.confirmed}

    def test_all_locked(self):
        assert _store([_event("A", locked=True), _event("B", locked=True)]).all_locked
        assert not _store([_event("A", locked=True), _event("B")]).all_locked
        assert not _store([]).all_locked
