"""Booking schemas - Pydantic models for booking and block requests"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import LocalDateTime
from ...utils.sanitization import MAX_NOTES_LENGTH, sanitize_string


class BookingCreate(BaseModel):
    """Client request to book an offered window"""

    service_id: int
    service_option_id: Optional[int] = None
    start_time: LocalDateTime
    notes: Optional[str] = Field(None, max_length=MAX_NOTES_LENGTH)

    @field_validator("notes")
    @classmethod
    def clean_notes(cls, v):
        return sanitize_string(v.strip()) if v else v


class OnBehalfBookingCreate(BookingCreate):
    """Master records a booking for a known client"""

    user_id: int


class BlockToggle(BaseModel):
    """Manually block (is_booked=true) or free an exact window"""

    service_id: int
    start_time: LocalDateTime
    end_time: LocalDateTime
    is_booked: bool
