"""Booking coordinator - Atomic reserve-or-reject on a master's calendar"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import Identity
from ...errors import Conflict, Forbidden
from ...locking import master_transaction
from ...models import Appointment, Service, TimeSlot
from ...shared.time_range import TimeRange
from ..appointments.service import AppointmentStore
from ..availability.repository import TimeSlotRepository
from ..availability.service import AvailabilityStore
from ..catalog.repository import CatalogRepository
from ..catalog.service import CatalogAdapter

logger = logging.getLogger(__name__)


class BookingCoordinator:
    """
    The only writer that turns an offer into an appointment or toggles a block.

    Every write re-checks the master's calendar inside master_transaction(),
    so the check and the insert see the same state. A Conflict is returned to
    the caller as-is; picking another window is the caller's decision.
    """

    def __init__(self, db: Session):
        self.db = db
        self.catalog = CatalogAdapter(db)
        self.appointments = AppointmentStore(db)
        self.availability = AvailabilityStore(db)
        self.slots = TimeSlotRepository()

    def resolve_window(
        self, service_id: int, service_option_id: Optional[int], start: datetime
    ) -> tuple[Service, TimeRange]:
        """Service and [start, start + duration) for a booking request"""
        service = self.catalog.get_service(service_id)
        option = self.catalog.resolve_option(service, service_option_id)
        minutes = option.duration_minutes if option else service.duration_minutes
        return service, TimeRange.starting_at(start, minutes)

    def book(
        self,
        actor: Identity,
        service_id: int,
        start: datetime,
        service_option_id: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> Appointment:
        """Client books an offered window for themselves"""
        service, window = self.resolve_window(service_id, service_option_id, start)

        with master_transaction(self.db, service.master_id):
            offer = self.slots.find_open_covering(
                self.db, service.master_id, service.id, window.start, window.end
            )
            if offer is None:
                logger.warning(
                    f"⚠️ No open slot of service {service.id} covers {window.start}-{window.end}"
                )
                raise Conflict("No open slot offers this time; refresh availability")

            appointment = self.appointments.create(
                user_id=actor.user_id,
                master_id=service.master_id,
                service_id=service.id,
                service_option_id=service_option_id,
                start=window.start,
                end=window.end,
                notes=notes,
            )

        self.db.refresh(appointment)
        logger.info(f"✅ User {actor.user_id} booked appointment {appointment.id}")
        return appointment

    def provider_book_on_behalf(
        self,
        actor: Identity,
        user_id: int,
        service_id: int,
        start: datetime,
        service_option_id: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> Appointment:
        """Master records a walk-in or phone booking for a known client"""
        service, window = self.resolve_window(service_id, service_option_id, start)
        self._require_service_owner(actor, service, allow_admin=False)

        with master_transaction(self.db, service.master_id):
            appointment = self.appointments.create(
                user_id=user_id,
                master_id=service.master_id,
                service_id=service.id,
                service_option_id=service_option_id,
                start=window.start,
                end=window.end,
                notes=notes,
            )

        self.db.refresh(appointment)
        logger.info(
            f"✅ Master user {actor.user_id} booked appointment {appointment.id} for user {user_id}"
        )
        return appointment

    def toggle_block(
        self,
        actor: Identity,
        service_id: int,
        start: datetime,
        end: datetime,
        booked: bool,
    ) -> TimeSlot:
        """Manually block or free an exact window of the master's calendar"""
        window = TimeRange(start, end)
        service = self.catalog.get_service(service_id)
        self._require_service_owner(actor, service, allow_admin=True)

        with master_transaction(self.db, service.master_id):
            if booked:
                live, blocks = self.appointments.find_blockers(service.master_id, window)
                if live:
                    logger.warning(
                        f"⚠️ Cannot block {window.start}-{window.end}: "
                        f"live appointment(s) {[a.id for a in live]}"
                    )
                    raise Conflict(
                        "A live appointment overlaps this time; reject or cancel it first"
                    )
                others = [
                    b
                    for b in blocks
                    if not (
                        b.service_id == service.id
                        and b.start_time == window.start
                        and b.end_time == window.end
                    )
                ]
                if others:
                    raise Conflict("Another block already covers part of this time")

            slot = self.availability.set_booked(
                service.master_id, service.id, window.start, window.end, booked
            )

        self.db.refresh(slot)
        return slot

    def _require_service_owner(self, actor: Identity, service: Service, allow_admin: bool) -> None:
        if actor.is_admin and allow_admin:
            return
        if actor.is_master:
            master = CatalogRepository.get_master_by_user_id(self.db, actor.user_id)
            if master and master.id == service.master_id:
                return
        logger.warning(f"🚫 User {actor.user_id} ({actor.role}) is not master of service {service.id}")
        raise Forbidden("Only the service's master can do this")
