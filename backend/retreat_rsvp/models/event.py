"""Retreat event view model, rebuilt from Airtable records on every load."""
import enum
from typing import Optional

from pydantic import BaseModel


class SelectionMode(str, enum.Enum):
    yes_no = "Yes/No"
    one_option = "One Option"


class RetreatEvent(BaseModel):
    id: str
    name: str
    description: str = ""
    date: str = ""
    time: str = ""
    type: str
    group: str
    capacity: Optional[int] = None
    registered: int = 0
    locked: bool = False
    selection_mode: SelectionMode = SelectionMode.yes_no
    ampm: str = ""
    location: str = ""
    speaker: str = ""
    num_speakers: int = 0

    @property
    def is_single_choice(self) -> bool:
        return self.selection_mode == SelectionMode.one_option

    @property
    def start_time(self) -> str:
        return self.time.split("–")[0]

    @property
    def spots_left(self) -> Optional[int]:
        # a zero capacity means "not limited", same as an empty one
        if not self.capacity:
            return None
        return self.capacity - (self.registered or 0)

    @property
    def is_full(self) -> bool:
        spots = self.spots_left
        return spots is not None and spots <= 0
