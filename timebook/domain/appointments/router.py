"""Appointment router - Listing and status transitions"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import ROLE_ADMIN, Identity, get_current_identity, get_current_master, require_roles
from ...database import get_db
from ...models import STATUS_CANCELLED, STATUS_CONFIRMED, STATUS_REJECTED, MasterProfile
from ...shared.validators import LocalDateTime
from .schemas import AppointmentResponse
from .service import AppointmentStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["Appointments"])


def get_appointment_store(db: Session = Depends(get_db)) -> AppointmentStore:
    """Dependency injection for AppointmentStore"""
    return AppointmentStore(db)


@router.get(
    "",
    response_model=list[AppointmentResponse],
    dependencies=[Depends(require_roles(ROLE_ADMIN))],
)
def list_all_appointments(
    master_id: Optional[int] = Query(None),
    status: Optional[str] = Query(None),
    start: Optional[LocalDateTime] = Query(None),
    end: Optional[LocalDateTime] = Query(None),
    store: AppointmentStore = Depends(get_appointment_store),
):
    """Admin: appointments of all masters, filterable by master, status and window"""
    return store.list_all(master_id, start, end, status)


@router.get("/mine", response_model=list[AppointmentResponse])
def list_my_appointments(
    identity: Identity = Depends(get_current_identity),
    store: AppointmentStore = Depends(get_appointment_store),
):
    """Appointments the caller booked as a client"""
    return store.list_for_user(identity.user_id)


@router.get("/master", response_model=list[AppointmentResponse])
def list_master_appointments(
    start: Optional[LocalDateTime] = Query(None),
    end: Optional[LocalDateTime] = Query(None),
    status: Optional[str] = Query(None),
    master: MasterProfile = Depends(get_current_master),
    store: AppointmentStore = Depends(get_appointment_store),
):
    """Appointments on the calling master's calendar"""
    return store.list_for_master(master.id, start, end, status)


@router.post("/{appointment_id}/confirm", response_model=AppointmentResponse)
def confirm_appointment(
    appointment_id: int,
    identity: Identity = Depends(get_current_identity),
    store: AppointmentStore = Depends(get_appointment_store),
):
    return store.transition(appointment_id, identity, STATUS_CONFIRMED)


@router.post("/{appointment_id}/reject", response_model=AppointmentResponse)
def reject_appointment(
    appointment_id: int,
    identity: Identity = Depends(get_current_identity),
    store: AppointmentStore = Depends(get_appointment_store),
):
    return store.transition(appointment_id, identity, STATUS_REJECTED)


@router.post("/{appointment_id}/cancel", response_model=AppointmentResponse)
def cancel_appointment(
    appointment_id: int,
    identity: Identity = Depends(get_current_identity),
    store: AppointmentStore = Depends(get_appointment_store),
):
    """Client withdraws a pending request"""
    return store.transition(appointment_id, identity, STATUS_CANCELLED)
