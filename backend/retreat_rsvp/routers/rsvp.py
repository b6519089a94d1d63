"""RSVP page API routes: load, toggle, single-select and save."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status

from retreat_rsvp.config import settings
from retreat_rsvp.models.event import RetreatEvent
from retreat_rsvp.schemas.rsvp import PageOut, SelectRequest, ToggleRequest
from retreat_rsvp.services import group_policy, presentation
from retreat_rsvp.services.rsvp_session import RsvpSession, SessionRegistry, get_registry

logger = logging.getLogger(__name__)
router = APIRouter()


def _page(session: RsvpSession, with_notifications: bool = False) -> PageOut:
    return presentation.build_page(
        session.store,
        tz_name=settings.DISPLAY_TIMEZONE,
        support_email=settings.SUPPORT_EMAIL,
        loading=session.loading,
        is_saving=session.is_saving,
        notifications=session.notifications if with_notifications else None,
    )


def _get_event(session: RsvpSession, event_id: str) -> RetreatEvent:
    event = session.store.get_event(event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


@router.get("/", response_model=PageOut)
async def get_page(
    participation_id: Optional[str] = Query(None, alias="retreatId"),
    refresh: bool = Query(False),
    registry: SessionRegistry = Depends(get_registry),
):
    """Load (or return the cached) RSVP page for one participation row."""
    if not participation_id:
        logger.warning("RSVP page requested without ?retreatId")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing ?retreatId=recXXXX in the URL.",
        )
    session = await registry.ensure_loaded(participation_id, refresh=refresh)
    return _page(session)


@router.post("/{participation_id}/toggle", response_model=PageOut)
async def toggle_event(
    participation_id: str,
    payload: ToggleRequest,
    registry: SessionRegistry = Depends(get_registry),
):
    """Set Yes/No on an independent event; single-choice options go through /select.

    Locked or full events ignore the click.
    """
    session = await registry.ensure_loaded(participation_id)
    event = _get_event(session, payload.event_id)
    if event.is_single_choice:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Event {event.id} is a single-choice option; use /select",
        )

    if presentation.can_toggle(event, payload.response):
        session.store.toggle(event.id, payload.response)
    else:
        logger.info("Ignored toggle of %s to %s (locked or full)", event.id, payload.response.value)
    return _page(session)


@router.post("/{participation_id}/select", response_model=PageOut)
async def select_event(
    participation_id: str,
    payload: SelectRequest,
    registry: SessionRegistry = Depends(get_registry),
):
    """Pick (or un-pick) the one option of a single-choice group."""
    session = await registry.ensure_loaded(participation_id)
    event = _get_event(session, payload.event_id)
    members = group_policy.single_choice_members(session.store.events, payload.group)
    if event.id not in {m.id for m in members}:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Event {event.id} is not a single-choice option of group '{payload.group}'",
        )

    if not presentation.can_select(session.store, event):
        logger.info("Ignored selection of %s in '%s' (locked or full)", event.id, payload.group)
        return _page(session)

    session.store.select_single(payload.group, event.id)
    return _page(session)


@router.post("/{participation_id}/save", response_model=PageOut)
async def save_responses(
    participation_id: str,
    registry: SessionRegistry = Depends(get_registry),
):
    """Write every draft response to Airtable, then reload from the server."""
    session = await registry.ensure_loaded(participation_id)
    await session.save()
    return _page(session, with_notifications=True)
