"""Time slot repository - Database operations for master availability"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...models import TimeSlot


class TimeSlotRepository:
    """Repository for time slot database operations.

    Writes only flush; committing belongs to the caller's unit of work.
    """

    @staticmethod
    def get_by_id(
        db: Session, slot_id: int, master_id: Optional[int] = None
    ) -> Optional[TimeSlot]:
        query = db.query(TimeSlot).filter(TimeSlot.id == slot_id)
        if master_id is not None:
            query = query.filter(TimeSlot.master_id == master_id)
        return query.first()

    @staticmethod
    def find_exact(
        db: Session, master_id: int, service_id: int, start: datetime, end: datetime
    ) -> Optional[TimeSlot]:
        """Slot covering exactly [start, end) for a master and service"""
        return (
            db.query(TimeSlot)
            .filter(
                TimeSlot.master_id == master_id,
                TimeSlot.service_id == service_id,
                TimeSlot.start_time == start,
                TimeSlot.end_time == end,
            )
            .order_by(TimeSlot.id.asc())
            .first()
        )

    @staticmethod
    def find_booked_overlapping(
        db: Session,
        master_id: int,
        start: datetime,
        end: datetime,
        exclude_id: Optional[int] = None,
    ) -> list[TimeSlot]:
        """Manual blocks of a master intersecting [start, end)"""
        query = db.query(TimeSlot).filter(
            TimeSlot.master_id == master_id,
            TimeSlot.is_booked.is_(True),
            TimeSlot.start_time < end,
            TimeSlot.end_time > start,
        )
        if exclude_id is not None:
            query = query.filter(TimeSlot.id != exclude_id)
        return query.order_by(TimeSlot.start_time.asc()).all()

    @staticmethod
    def find_open_covering(
        db: Session, master_id: int, service_id: int, start: datetime, end: datetime
    ) -> Optional[TimeSlot]:
        """Open slot of a service that fully contains [start, end)"""
        return (
            db.query(TimeSlot)
            .filter(
                TimeSlot.master_id == master_id,
                TimeSlot.service_id == service_id,
                TimeSlot.is_booked.is_(False),
                TimeSlot.start_time <= start,
                TimeSlot.end_time >= end,
            )
            .order_by(TimeSlot.start_time.asc())
            .first()
        )

    @staticmethod
    def list_for_range(
        db: Session,
        master_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        service_id: Optional[int] = None,
        is_booked: Optional[bool] = None,
    ) -> list[TimeSlot]:
        """Slots of a master intersecting the window, ordered by start"""
        query = db.query(TimeSlot).filter(TimeSlot.master_id == master_id)

        if start:
            query = query.filter(TimeSlot.end_time > start)
        if end:
            query = query.filter(TimeSlot.start_time < end)
        if service_id is not None:
            query = query.filter(TimeSlot.service_id == service_id)
        if is_booked is not None:
            query = query.filter(TimeSlot.is_booked.is_(is_booked))

        return query.order_by(TimeSlot.start_time.asc(), TimeSlot.id.asc()).all()

    @staticmethod
    def create(db: Session, **slot_data) -> TimeSlot:
        slot = TimeSlot(**slot_data)
        db.add(slot)
        db.flush()
        return slot

    @staticmethod
    def save(db: Session, slot: TimeSlot) -> TimeSlot:
        db.add(slot)
        db.flush()
        return slot

    @staticmethod
    def delete(db: Session, slot: TimeSlot) -> None:
        db.delete(slot)
        db.flush()
