"""RSVP sessions: one per participation id, held in memory.

A session owns the response store for one participant, knows how to
(re)load it from Airtable and serializes saves with an ``is_saving`` guard.
All of this runs on the single asyncio loop serving requests, so the guard
is a plain flag.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import HTTPException, status

from retreat_rsvp.config import Settings, settings
from retreat_rsvp.models.rsvp import Notification
from retreat_rsvp.services import field_aliases as fa
from retreat_rsvp.services import save_reconciler
from retreat_rsvp.services.airtable_client import AirtableClient, AirtableConfig
from retreat_rsvp.services.response_store import ResponseStore
from retreat_rsvp.services.view_mapper import map_view_model

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableNames:
    events: str
    rsvps: str = "Retreat Session RSVPs"
    participation: str = "Retreat Participation"
    retreats: str = "Retreats"

    @classmethod
    def from_settings(cls, config: Settings) -> "TableNames":
        return cls(
            events=config.AIRTABLE_EVENTS_TABLE_NAME,
            rsvps=config.AIRTABLE_RSVP_TABLE_NAME,
            participation=config.AIRTABLE_PARTICIPATION_TABLE_NAME,
            retreats=config.AIRTABLE_RETREATS_TABLE_NAME,
        )


class RsvpSession:
    def __init__(self, participation_id: str, airtable: AirtableClient, tables: TableNames):
        self.participation_id = participation_id
        self.airtable = airtable
        self.tables = tables
        self.store = ResponseStore(participation_id)
        self.loading = False
        self.loaded = False
        self.is_saving = False
        self.notifications: list[Notification] = []

    async def load(self, silent: bool = False) -> None:
        """Fetch participation, retreat, events and RSVPs, then reset the store.

        A silent load (after a save) leaves the ``loading`` flag alone. Airtable
        errors propagate and abort the load; the store keeps its previous state.
        """
        if not silent:
            self.loading = True
        try:
            participation = await self.airtable.fetch_by_id(self.tables.participation, self.participation_id)
            if participation is None:
                logger.warning("No participation row found for %s", self.participation_id)
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No participation row found")

            retreat_id = fa.first_link(participation.get("fields") or {}, fa.PARTICIPATION_RETREAT_LINK)
            retreat = None
            if retreat_id:
                retreat = await self.airtable.fetch_by_id(self.tables.retreats, retreat_id)

            events = await self.airtable.fetch_all(self.tables.events)
            rsvps = await self.airtable.fetch_all(self.tables.rsvps)

            view = map_view_model(self.participation_id, participation, retreat, events, rsvps)
            self.store.reset(view)
            self.loaded = True
            logger.info(
                "Loaded %s (%s): %d events", self.participation_id, "silent" if silent else "full", len(view.events),
            )
        finally:
            if not silent:
                self.loading = False

    async def save(self) -> list[Notification]:
        """Push the draft; a second save while one is in flight is refused."""
        if self.is_saving:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="A save is already in progress")

        self.is_saving = True
        try:
            self.notifications = await save_reconciler.reconcile(
                self.store,
                self.airtable,
                self.tables.rsvps,
                reload=lambda: self.load(silent=True),
            )
        finally:
            self.is_saving = False
        return self.notifications


class SessionRegistry:
    """In-memory map of participation id to session."""

    def __init__(self, airtable: AirtableClient, tables: TableNames):
        self.airtable = airtable
        self.tables = tables
        self._sessions: dict[str, RsvpSession] = {}

    def get_or_create(self, participation_id: str) -> RsvpSession:
        session = self._sessions.get(participation_id)
        if session is None:
            session = RsvpSession(participation_id, self.airtable, self.tables)
            self._sessions[participation_id] = session
        return session

    async def ensure_loaded(self, participation_id: str, refresh: bool = False) -> RsvpSession:
        session = self.get_or_create(participation_id)
        if refresh or not session.loaded:
            await session.load()
        return session


_registry: Optional[SessionRegistry] = None


def get_registry() -> SessionRegistry:
    """FastAPI dependency: the process-wide registry, built from settings on first use."""
    global _registry
    if _registry is None:
        _registry = SessionRegistry(
            AirtableClient(AirtableConfig.from_settings(settings)),
            TableNames.from_settings(settings),
        )
    return _registry
