"""Reconciliation schemas - Derived views of a master's day"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel

# Display labels, strongest first
LABEL_CONFIRMED = "confirmed"
LABEL_PENDING = "pending"
LABEL_BOOKED = "booked"
LABEL_AVAILABLE = "available"


class Offer(BaseModel):
    """A bookable window of one service, taken from a TimeSlot"""

    time_slot_id: int
    service_id: int
    start_time: datetime
    end_time: datetime
    available: bool
    status: str


class OfferList(BaseModel):
    service_id: int
    master_id: int
    day: date
    offers: list[Offer]


class GridCell(BaseModel):
    """One whole-hour bucket of the master's calendar"""

    start_time: datetime
    end_time: datetime
    status: str
    appointment_id: Optional[int] = None
    time_slot_id: Optional[int] = None
    service_id: Optional[int] = None
    user_id: Optional[int] = None


class DayGrid(BaseModel):
    master_id: int
    day: date
    cells: list[GridCell]
