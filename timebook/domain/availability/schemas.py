"""Availability schemas - Pydantic models for time slot requests and responses"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from ...shared.validators import LocalDateTime


class TimeSlotCreate(BaseModel):
    """Schema for declaring an open window"""

    service_id: int
    start_time: LocalDateTime
    end_time: LocalDateTime


class TimeSlotUpdate(BaseModel):
    """Schema for moving or resizing a slot; omitted bounds are kept"""

    start_time: Optional[LocalDateTime] = None
    end_time: Optional[LocalDateTime] = None


class TimeSlotResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    master_id: int
    service_id: int
    start_time: datetime
    end_time: datetime
    is_booked: bool
