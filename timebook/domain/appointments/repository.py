"""Appointment repository - Database operations for appointments"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...models import LIVE_STATUSES, Appointment


class AppointmentRepository:
    """Repository for appointment database operations.

    Writes only flush; committing belongs to the caller's unit of work.
    """

    @staticmethod
    def get_by_id(db: Session, appointment_id: int) -> Optional[Appointment]:
        return db.query(Appointment).filter(Appointment.id == appointment_id).first()

    @staticmethod
    def create(db: Session, **appointment_data) -> Appointment:
        appointment = Appointment(**appointment_data)
        db.add(appointment)
        db.flush()
        return appointment

    @staticmethod
    def save(db: Session, appointment: Appointment) -> Appointment:
        db.add(appointment)
        db.flush()
        return appointment

    @staticmethod
    def find_live_overlapping(
        db: Session,
        master_id: int,
        start: datetime,
        end: datetime,
        exclude_id: Optional[int] = None,
    ) -> list[Appointment]:
        """Pending/confirmed appointments of a master intersecting [start, end)"""
        query = db.query(Appointment).filter(
            Appointment.master_id == master_id,
            Appointment.status.in_(LIVE_STATUSES),
            Appointment.start_time < end,
            Appointment.end_time > start,
        )
        if exclude_id is not None:
            query = query.filter(Appointment.id != exclude_id)
        return query.order_by(Appointment.start_time.asc()).all()

    @staticmethod
    def list_for_master(
        db: Session,
        master_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        status: Optional[str] = None,
    ) -> list[Appointment]:
        """Appointments of a master, optionally limited to a window and status"""
        return AppointmentRepository.list_all(db, master_id, start, end, status)

    @staticmethod
    def list_all(
        db: Session,
        master_id: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        status: Optional[str] = None,
    ) -> list[Appointment]:
        """Appointments across masters with optional filters"""
        query = db.query(Appointment)

        if master_id is not None:
            query = query.filter(Appointment.master_id == master_id)
        if start:
            query = query.filter(Appointment.end_time > start)
        if end:
            query = query.filter(Appointment.start_time < end)
        if status:
            query = query.filter(Appointment.status == status)

        return query.order_by(Appointment.start_time.asc()).all()

    @staticmethod
    def list_for_user(db: Session, user_id: int) -> list[Appointment]:
        return (
            db.query(Appointment)
            .filter(Appointment.user_id == user_id)
            .order_by(Appointment.start_time.desc())
            .all()
        )
