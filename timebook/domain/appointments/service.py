"""Appointment store - Appointment records and their status machine"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import ROLE_ADMIN, ROLE_MASTER, ROLE_USER, Identity
from ...errors import Conflict, Forbidden, InvalidTransition, NotFound, ValidationFailed
from ...locking import master_transaction
from ...models import (
    APPOINTMENT_STATUSES,
    STATUS_CANCELLED,
    STATUS_CONFIRMED,
    STATUS_PENDING,
    STATUS_REJECTED,
    Appointment,
)
from ...shared.time_range import TimeRange
from ..availability.repository import TimeSlotRepository
from ..catalog.repository import CatalogRepository
from .repository import AppointmentRepository

logger = logging.getLogger(__name__)

# Legal edges of the status machine: current status -> reachable statuses
TRANSITIONS = {
    STATUS_PENDING: {STATUS_CONFIRMED, STATUS_REJECTED, STATUS_CANCELLED},
    STATUS_CONFIRMED: set(),
    STATUS_REJECTED: set(),
    STATUS_CANCELLED: set(),
}

# Which statuses each role may move an appointment to
ROLE_TARGETS = {
    ROLE_USER: {STATUS_CANCELLED},
    ROLE_MASTER: {STATUS_CONFIRMED, STATUS_REJECTED},
    ROLE_ADMIN: {STATUS_CONFIRMED, STATUS_REJECTED},
}


class AppointmentStore:
    """Service layer owning Appointment records"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AppointmentRepository()
        self.slots = TimeSlotRepository()
        self.catalog = CatalogRepository()

    def get(self, appointment_id: int) -> Appointment:
        appointment = self.repo.get_by_id(self.db, appointment_id)
        if not appointment:
            raise NotFound("Appointment not found")
        return appointment

    def list_for_master(
        self,
        master_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        status: Optional[str] = None,
    ) -> list[Appointment]:
        self._check_status_filter(status)
        return self.repo.list_for_master(self.db, master_id, start, end, status)

    def list_all(
        self,
        master_id: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        status: Optional[str] = None,
    ) -> list[Appointment]:
        """Admin listing across every master's calendar"""
        self._check_status_filter(status)
        return self.repo.list_all(self.db, master_id, start, end, status)

    @staticmethod
    def _check_status_filter(status: Optional[str]) -> None:
        if status is not None and status not in APPOINTMENT_STATUSES:
            raise ValidationFailed(f"Unknown appointment status: {status}")

    def list_for_user(self, user_id: int) -> list[Appointment]:
        return self.repo.list_for_user(self.db, user_id)

    def find_blockers(self, master_id: int, window: TimeRange) -> tuple[list, list]:
        """Live appointments and manual blocks of a master intersecting a window"""
        appointments = self.repo.find_live_overlapping(self.db, master_id, window.start, window.end)
        blocks = self.slots.find_booked_overlapping(self.db, master_id, window.start, window.end)
        return appointments, blocks

    def create(
        self,
        user_id: int,
        master_id: int,
        service_id: int,
        service_option_id: Optional[int],
        start: datetime,
        end: datetime,
        notes: Optional[str] = None,
    ) -> Appointment:
        """
        Insert a pending appointment if the master's time is free.

        Only flushes; the overlap check is atomic only when the caller holds
        master_transaction() for this master.
        """
        window = TimeRange(start, end)
        appointments, blocks = self.find_blockers(master_id, window)
        if appointments or blocks:
            logger.warning(
                f"⚠️ Booking conflict for master {master_id} at {window.start}-{window.end}: "
                f"appointments={[a.id for a in appointments]}, blocks={[s.id for s in blocks]}"
            )
            raise Conflict()

        appointment = self.repo.create(
            self.db,
            user_id=user_id,
            master_id=master_id,
            service_id=service_id,
            service_option_id=service_option_id,
            start_time=window.start,
            end_time=window.end,
            status=STATUS_PENDING,
            notes=notes,
        )
        logger.info(
            f"📅 Appointment {appointment.id} created for user {user_id} with master {master_id} "
            f"at {window.start}-{window.end}"
        )
        return appointment

    def transition(self, appointment_id: int, actor: Identity, target_status: str) -> Appointment:
        """Move an appointment along the status machine on behalf of an actor"""
        if target_status not in APPOINTMENT_STATUSES:
            raise ValidationFailed(f"Unknown appointment status: {target_status}")
        if target_status == STATUS_PENDING:
            raise InvalidTransition("Appointments cannot return to pending")

        appointment = self.get(appointment_id)

        with master_transaction(self.db, appointment.master_id):
            self.db.refresh(appointment)
            self._authorize(appointment, actor, target_status)

            current = appointment.status
            if target_status not in TRANSITIONS.get(current, set()):
                logger.warning(
                    f"⚠️ Illegal transition {current} -> {target_status} for appointment "
                    f"{appointment.id} by user {actor.user_id}"
                )
                raise InvalidTransition(
                    f"Cannot change appointment from {current} to {target_status}"
                )

            appointment.status = target_status
            self.repo.save(self.db, appointment)

        self.db.refresh(appointment)
        logger.info(
            f"✅ Appointment {appointment.id}: {current} -> {target_status} by user {actor.user_id}"
        )
        return appointment

    def _authorize(self, appointment: Appointment, actor: Identity, target_status: str) -> None:
        if target_status not in ROLE_TARGETS.get(actor.role, set()):
            raise Forbidden(f"Role {actor.role} cannot set appointments to {target_status}")

        if actor.role == ROLE_USER:
            if appointment.user_id != actor.user_id:
                raise Forbidden("You can only cancel your own appointments")
        elif actor.role == ROLE_MASTER:
            master = self.catalog.get_master_by_user_id(self.db, actor.user_id)
            if not master or master.id != appointment.master_id:
                raise Forbidden("Appointment does not belong to your calendar")
