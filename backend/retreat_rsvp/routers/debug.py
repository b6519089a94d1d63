"""Debug routes: inspect how events link to retreats."""
import logging
from fastapi import APIRouter, Depends

from retreat_rsvp.schemas.rsvp import EventLinkOut
from retreat_rsvp.services import field_aliases as fa
from retreat_rsvp.services.rsvp_session import SessionRegistry, get_registry

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/event-links", response_model=list[EventLinkOut])
async def event_links(registry: SessionRegistry = Depends(get_registry)):
    """List every event with the retreat ids it links to; also written to the log."""
    records = await registry.airtable.fetch_all(registry.tables.events)
    rows = [
        EventLinkOut(
            event_id=rec["id"],
            retreat_ids=fa.link_ids(rec.get("fields") or {}, fa.EVENT_RETREAT_LINK),
            event_name=fa.as_text(fa.first_present(rec.get("fields") or {}, fa.EVENT_NAME), "Unnamed"),
        )
        for rec in records
    ]
    logger.info("=== Event retreat links (%d) ===", len(rows))
    for row in rows:
        logger.info("%s  %-40s  %s", row.event_id, row.event_name, ",".join(row.retreat_ids))
    return rows
