"""Availability store - Business rules for master-declared time slots"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...errors import Locked, NotFound, Overlap
from ...locking import master_transaction
from ...models import TimeSlot
from ...shared.time_range import TimeRange
from ..appointments.repository import AppointmentRepository
from ..catalog.service import CatalogAdapter
from .repository import TimeSlotRepository

logger = logging.getLogger(__name__)


class AvailabilityStore:
    """Service layer owning TimeSlot records.

    Open slots may overlap each other (several services can be offered in the
    same window). Blocked slots may not overlap another block.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = TimeSlotRepository()
        self.appointments = AppointmentRepository()
        self.catalog = CatalogAdapter(db)

    def get(self, slot_id: int, master_id: Optional[int] = None) -> TimeSlot:
        slot = self.repo.get_by_id(self.db, slot_id, master_id)
        if not slot:
            raise NotFound("Time slot not found")
        return slot

    def list_for_range(
        self,
        master_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        service_id: Optional[int] = None,
        is_booked: Optional[bool] = None,
    ) -> list[TimeSlot]:
        if service_id is not None:
            self.catalog.get_owned_service(master_id, service_id)
        return self.repo.list_for_range(self.db, master_id, start, end, service_id, is_booked)

    def create(self, master_id: int, service_id: int, start: datetime, end: datetime) -> TimeSlot:
        """Declare an open window for a service"""
        window = TimeRange(start, end)
        self.catalog.get_owned_service(master_id, service_id)

        with master_transaction(self.db, master_id):
            if self.repo.find_booked_overlapping(self.db, master_id, window.start, window.end):
                logger.warning(
                    f"⚠️ Slot {window.start}-{window.end} for master {master_id} overlaps a block"
                )
                raise Overlap()

            slot = self.repo.create(
                self.db,
                master_id=master_id,
                service_id=service_id,
                start_time=window.start,
                end_time=window.end,
                is_booked=False,
            )

        self.db.refresh(slot)
        logger.info(f"✅ Created time slot {slot.id} for master {master_id}, service {service_id}")
        return slot

    def update(
        self,
        slot_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        master_id: Optional[int] = None,
    ) -> TimeSlot:
        """Move or resize a slot that no live appointment is using"""
        slot = self.get(slot_id, master_id)

        with master_transaction(self.db, slot.master_id):
            self.db.refresh(slot)
            self._ensure_not_consumed(slot)

            window = TimeRange(start or slot.start_time, end or slot.end_time)

            if self.repo.find_booked_overlapping(
                self.db, slot.master_id, window.start, window.end, exclude_id=slot.id
            ):
                raise Overlap()
            if slot.is_booked and self.appointments.find_live_overlapping(
                self.db, slot.master_id, window.start, window.end
            ):
                raise Overlap("Blocked slot would cover a live appointment")

            slot.start_time = window.start
            slot.end_time = window.end
            self.repo.save(self.db, slot)

        self.db.refresh(slot)
        logger.info(f"✅ Updated time slot {slot.id} to {slot.start_time}-{slot.end_time}")
        return slot

    def delete(self, slot_id: int, master_id: Optional[int] = None) -> None:
        """Remove an open slot that no live appointment is using"""
        slot = self.get(slot_id, master_id)

        with master_transaction(self.db, slot.master_id):
            self.db.refresh(slot)
            if slot.is_booked:
                raise Locked("Cannot delete a blocked time slot; unblock it first")
            self._ensure_not_consumed(slot)
            self.repo.delete(self.db, slot)

        logger.info(f"🗑️ Deleted time slot {slot_id}")

    def set_booked(
        self, master_id: int, service_id: int, start: datetime, end: datetime, booked: bool
    ) -> TimeSlot:
        """
        Idempotent upsert of the block flag on the exact [start, end) slot.

        Creates the slot when none matches. Only flushes: callers run this
        inside their own master_transaction.
        """
        window = TimeRange(start, end)
        slot = self.repo.find_exact(self.db, master_id, service_id, window.start, window.end)

        if slot is None:
            slot = self.repo.create(
                self.db,
                master_id=master_id,
                service_id=service_id,
                start_time=window.start,
                end_time=window.end,
                is_booked=booked,
            )
            logger.info(f"📌 Created slot {slot.id} for master {master_id} with is_booked={booked}")
            return slot

        if slot.is_booked != booked:
            slot.is_booked = booked
            self.repo.save(self.db, slot)
            logger.info(f"📌 Slot {slot.id} for master {master_id} set to is_booked={booked}")
        return slot

    def _ensure_not_consumed(self, slot: TimeSlot) -> None:
        live = self.appointments.find_live_overlapping(
            self.db, slot.master_id, slot.start_time, slot.end_time
        )
        if live:
            logger.warning(
                f"🔒 Slot {slot.id} is held by appointment(s) {[a.id for a in live]}"
            )
            raise Locked()
