"""Booking router - Write surface for bookings and manual blocks"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import ROLE_ADMIN, ROLE_MASTER, Identity, get_current_identity, require_roles
from ...database import get_db
from ...rate_limiter import booking_rate_limit
from ..appointments.schemas import AppointmentResponse
from ..availability.schemas import TimeSlotResponse
from .schemas import BlockToggle, BookingCreate, OnBehalfBookingCreate
from .service import BookingCoordinator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["Bookings"])


def get_coordinator(db: Session = Depends(get_db)) -> BookingCoordinator:
    """Dependency injection for BookingCoordinator"""
    return BookingCoordinator(db)


@router.post(
    "",
    response_model=AppointmentResponse,
    status_code=201,
    dependencies=[Depends(booking_rate_limit)],
)
def book(
    data: BookingCreate,
    identity: Identity = Depends(get_current_identity),
    coordinator: BookingCoordinator = Depends(get_coordinator),
):
    """
    Book an offered window. Responds 409 when the window was taken in the
    meantime; the client should re-fetch offers and choose again.
    """
    return coordinator.book(
        identity,
        data.service_id,
        data.start_time,
        service_option_id=data.service_option_id,
        notes=data.notes,
    )


@router.post("/on-behalf", response_model=AppointmentResponse, status_code=201)
def book_on_behalf(
    data: OnBehalfBookingCreate,
    identity: Identity = Depends(require_roles(ROLE_MASTER)),
    coordinator: BookingCoordinator = Depends(get_coordinator),
):
    """Master records a walk-in or phone booking for a client"""
    return coordinator.provider_book_on_behalf(
        identity,
        data.user_id,
        data.service_id,
        data.start_time,
        service_option_id=data.service_option_id,
        notes=data.notes,
    )


@router.put("/blocks", response_model=TimeSlotResponse)
def toggle_block(
    data: BlockToggle,
    identity: Identity = Depends(require_roles(ROLE_MASTER, ROLE_ADMIN)),
    coordinator: BookingCoordinator = Depends(get_coordinator),
):
    """Block or free an exact window on the master's calendar"""
    return coordinator.toggle_block(
        identity, data.service_id, data.start_time, data.end_time, data.is_booked
    )
