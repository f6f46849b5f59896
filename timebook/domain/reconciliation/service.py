"""
Reconciliation engine - Read-side projection of a master's day.

Merges TimeSlots (declared availability and manual blocks) with live
appointments into two views:

- offers_for_day: the client-facing list of a service's slots, each marked
  available or not (mode A)
- day_grid: the master's fixed whole-hour calendar with a status per hour
  (mode B)

Nothing here writes or locks; every call recomputes from current rows.
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...config import GRID_END_HOUR, GRID_START_HOUR
from ...models import STATUS_CONFIRMED, Appointment, TimeSlot
from ...shared.time_range import TimeRange
from ..appointments.repository import AppointmentRepository
from ..availability.repository import TimeSlotRepository
from ..catalog.service import CatalogAdapter
from .schemas import (
    LABEL_AVAILABLE,
    LABEL_BOOKED,
    DayGrid,
    GridCell,
    Offer,
    OfferList,
)

logger = logging.getLogger(__name__)


def _range_of(record) -> TimeRange:
    return TimeRange(record.start_time, record.end_time)


def pick_appointment(appointments: list[Appointment]) -> Optional[Appointment]:
    """Confirmed beats pending; among equals the earliest start wins"""
    if not appointments:
        return None
    return min(
        appointments,
        key=lambda a: (a.status != STATUS_CONFIRMED, a.start_time, a.id),
    )


def classify(appointment: Optional[Appointment], blocked: bool) -> str:
    """Status label: confirmed > pending > booked > available"""
    if appointment is not None:
        return appointment.status
    if blocked:
        return LABEL_BOOKED
    return LABEL_AVAILABLE


class ReconciliationEngine:
    def __init__(self, db: Session):
        self.db = db
        self.slots = TimeSlotRepository()
        self.appointments = AppointmentRepository()
        self.catalog = CatalogAdapter(db)

    def offers_for_day(self, service_id: int, day: date) -> OfferList:
        """Client-facing offers of one service on one day"""
        service = self.catalog.get_service(service_id)
        master_id = service.master_id
        window = TimeRange.for_day(day)

        slots = self.slots.list_for_range(
            self.db, master_id, window.start, window.end, service_id=service_id
        )
        # Appointments of any service block the master's whole calendar
        live = self.appointments.find_live_overlapping(self.db, master_id, window.start, window.end)

        offers = []
        for slot in slots:
            slot_range = _range_of(slot)
            blockers = [a for a in live if slot_range.overlaps(_range_of(a))]
            offers.append(
                Offer(
                    time_slot_id=slot.id,
                    service_id=slot.service_id,
                    start_time=slot.start_time,
                    end_time=slot.end_time,
                    available=not (slot.is_booked or blockers),
                    status=classify(pick_appointment(blockers), slot.is_booked),
                )
            )

        offers.sort(key=lambda o: (o.start_time, o.time_slot_id))
        logger.debug(
            f"Computed {len(offers)} offers for service {service_id} on {day.isoformat()}"
        )
        return OfferList(service_id=service_id, master_id=master_id, day=day, offers=offers)

    def day_grid(self, master_id: int, day: date) -> DayGrid:
        """Master's hour-by-hour calendar for one day"""
        self.catalog.get_master(master_id)
        window = TimeRange.for_day(day)

        slots = self.slots.list_for_range(self.db, master_id, window.start, window.end)
        live = self.appointments.find_live_overlapping(self.db, master_id, window.start, window.end)

        cells = []
        for hour in range(GRID_START_HOUR, GRID_END_HOUR + 1):
            bucket = TimeRange.hour_bucket(day, hour)
            appointment = pick_appointment([a for a in live if bucket.overlaps(_range_of(a))])
            hit_slots = [s for s in slots if bucket.overlaps(_range_of(s))]
            block = next((s for s in hit_slots if s.is_booked), None)
            slot: Optional[TimeSlot] = block or (hit_slots[0] if hit_slots else None)

            service_id = None
            if appointment is not None:
                service_id = appointment.service_id
            elif slot is not None:
                service_id = slot.service_id

            cells.append(
                GridCell(
                    start_time=bucket.start,
                    end_time=bucket.end,
                    status=classify(appointment, block is not None),
                    appointment_id=appointment.id if appointment else None,
                    time_slot_id=slot.id if slot else None,
                    service_id=service_id,
                    user_id=appointment.user_id if appointment else None,
                )
            )

        return DayGrid(master_id=master_id, day=day, cells=cells)
