"""Pydantic schemas for the RSVP page."""
from __future__ import annotations
from typing import Optional
from pydantic import BaseModel

from retreat_rsvp.models.rsvp import Notification, RSVPResponse, SaveStatus


class ToggleRequest(BaseModel):
    event_id: str
    response: RSVPResponse


class SelectRequest(BaseModel):
    group: str
    event_id: str


class HeaderOut(BaseModel):
    user_name: str
    email: str
    retreat_name: str
    retreat_location: str


class BadgeOut(BaseModel):
    label: str
    variant: str  # destructive, warning, success


class CardOut(BaseModel):
    event_id: str
    name: str
    type: str
    speaker_label: Optional[str] = None
    description: str = ""
    date_label: str = ""
    time_label: str = ""
    location: str = ""
    capacity_label: Optional[str] = None
    spots_badge: Optional[BadgeOut] = None
    locked: bool = False
    lock_message: Optional[str] = None
    is_full: bool = False
    selected: bool = False
    control: str  # radio or switch
    control_label: str
    control_disabled: bool = False
    clickable: bool = False
    status: SaveStatus = SaveStatus.confirmed


class GroupOut(BaseModel):
    title: str
    single_choice: bool
    hint: str
    selected_event_id: Optional[str] = None
    cards: list[CardOut] = []


class PageOut(BaseModel):
    participation_id: str
    loading: bool = False
    is_saving: bool = False
    header: HeaderOut
    all_sessions_locked: bool = False
    locked_message: Optional[str] = None
    has_unsaved_changes: bool = False
    unsaved_label: str
    groups: list[GroupOut] = []
    notifications: list[Notification] = []


class EventLinkOut(BaseModel):
    event_id: str
    retreat_ids: list[str] = []
    event_name: str
