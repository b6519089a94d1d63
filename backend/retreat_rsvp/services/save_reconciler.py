"""Save reconciler: push drafts to the RSVP table, then reload.

Per event, in display order: patch the participant's existing RSVP row, or
create one when none exists. Writes go out one at a time. Whatever happens,
the session is reloaded afterwards so local state matches the server. If
that reload fails too, the draft is kept and shown as unsaved.
"""
import logging
from typing import Awaitable, Callable

import httpx

from retreat_rsvp.models.rsvp import ERROR_NOTIFICATION, SAVED_NOTIFICATION, Notification
from retreat_rsvp.services.airtable_client import AirtableClient, AirtableError
from retreat_rsvp.services.response_store import ResponseStore

logger = logging.getLogger(__name__)


async def push_responses(store: ResponseStore, airtable: AirtableClient, rsvp_table: str) -> tuple[int, int]:
    """Write every event's draft response; returns (updated, created) counts.

    Stops at the first failing request.
    """
    updated = created = 0
    for event in store.events:
        response = store.response_for(event.id).value
        existing = store.find_record(event.id)

        if existing:
            await airtable.update_record(rsvp_table, existing["id"], {"RSVP Response": response})
            updated += 1
        else:
            record = await airtable.create_record(
                rsvp_table,
                {
                    "Event": [event.id],
                    "Retreat Participation": [store.participation_id],
                    "RSVP Response": response,
                },
            )
            store.remember_record(record)
            created += 1
    return updated, created


async def reconcile(
    store: ResponseStore,
    airtable: AirtableClient,
    rsvp_table: str,
    reload: Callable[[], Awaitable[None]],
) -> list[Notification]:
    """Optimistically mark the draft saved, push it, reload. Returns the notifications to show."""
    notifications = [SAVED_NOTIFICATION]
    last_saved = dict(store.original)
    store.mark_pending()

    try:
        updated, created = await push_responses(store, airtable, rsvp_table)
        logger.info(
            "Saved RSVPs for %s: %d updated, %d created", store.participation_id, updated, created,
        )
        await reload()
    except (AirtableError, httpx.HTTPError):
        logger.exception("Save error for participation %s", store.participation_id)
        notifications.append(ERROR_NOTIFICATION)
        try:
            await reload()
        except (AirtableError, httpx.HTTPError):
            # server state unknown; keep the draft and show it as unsaved again
            logger.exception("Reload after failed save also failed for %s", store.participation_id)
            store.restore_original(last_saved)

    return notifications
