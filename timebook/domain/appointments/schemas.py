"""Appointment schemas - Pydantic models for appointment responses"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class AppointmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    master_id: int
    service_id: int
    service_option_id: Optional[int] = None
    start_time: datetime
    end_time: datetime
    status: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
