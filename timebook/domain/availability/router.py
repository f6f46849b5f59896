"""Availability router - Master endpoints for managing time slots"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_master
from ...database import get_db
from ...models import MasterProfile
from ...shared.validators import LocalDateTime
from .schemas import TimeSlotCreate, TimeSlotResponse, TimeSlotUpdate
from .service import AvailabilityStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/timeslots", tags=["Time Slots"])


def get_availability_store(db: Session = Depends(get_db)) -> AvailabilityStore:
    """Dependency injection for AvailabilityStore"""
    return AvailabilityStore(db)


@router.get("", response_model=list[TimeSlotResponse])
def list_time_slots(
    start: Optional[LocalDateTime] = Query(None),
    end: Optional[LocalDateTime] = Query(None),
    service_id: Optional[int] = Query(None),
    is_booked: Optional[bool] = Query(None),
    master: MasterProfile = Depends(get_current_master),
    store: AvailabilityStore = Depends(get_availability_store),
):
    """List the current master's slots intersecting an optional window"""
    return store.list_for_range(master.id, start, end, service_id, is_booked)


@router.post("", response_model=TimeSlotResponse, status_code=201)
def create_time_slot(
    data: TimeSlotCreate,
    master: MasterProfile = Depends(get_current_master),
    store: AvailabilityStore = Depends(get_availability_store),
):
    """Declare an open window for one of the master's services"""
    return store.create(master.id, data.service_id, data.start_time, data.end_time)


@router.patch("/{slot_id}", response_model=TimeSlotResponse)
def update_time_slot(
    slot_id: int,
    data: TimeSlotUpdate,
    master: MasterProfile = Depends(get_current_master),
    store: AvailabilityStore = Depends(get_availability_store),
):
    """Move or resize a slot"""
    return store.update(slot_id, data.start_time, data.end_time, master_id=master.id)


@router.delete("/{slot_id}")
def delete_time_slot(
    slot_id: int,
    master: MasterProfile = Depends(get_current_master),
    store: AvailabilityStore = Depends(get_availability_store),
):
    """Delete an open slot"""
    store.delete(slot_id, master_id=master.id)
    return {"message": "Time slot deleted successfully"}
