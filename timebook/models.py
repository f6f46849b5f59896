from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base

# Appointment statuses
STATUS_PENDING = "pending"
STATUS_CONFIRMED = "confirmed"
STATUS_REJECTED = "rejected"
STATUS_CANCELLED = "cancelled"

APPOINTMENT_STATUSES = (STATUS_PENDING, STATUS_CONFIRMED, STATUS_REJECTED, STATUS_CANCELLED)

# Statuses that hold master time; rejected and cancelled are sinks
LIVE_STATUSES = (STATUS_PENDING, STATUS_CONFIRMED)


class MasterProfile(Base):
    __tablename__ = "master_profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, unique=True, index=True, nullable=False)  # Identity-issued user id
    bio = Column(Text, nullable=True)
    specialty = Column(String(255), nullable=True)
    experience = Column(Integer, nullable=True)  # years of experience
    created_at = Column(DateTime, server_default=func.now())

    services = relationship("Service", back_populates="master", cascade="all, delete-orphan")


class Service(Base):
    __tablename__ = "services"

    id = Column(Integer, primary_key=True, index=True)
    master_id = Column(Integer, ForeignKey("master_profiles.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    # Zero for option-based services; options carry duration and price
    duration_minutes = Column(Integer, nullable=False, default=0)
    price = Column(Float, nullable=False, default=0)
    created_at = Column(DateTime, server_default=func.now())

    master = relationship("MasterProfile", back_populates="services")
    options = relationship(
        "ServiceOption",
        back_populates="service",
        cascade="all, delete-orphan",
        order_by="ServiceOption.id",
    )


class ServiceOption(Base):
    __tablename__ = "service_options"

    id = Column(Integer, primary_key=True, index=True)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    price = Column(Float, nullable=False)

    service = relationship("Service", back_populates="options")


class TimeSlot(Base):
    __tablename__ = "time_slots"
    __table_args__ = (Index("ix_time_slots_master_range", "master_id", "start_time", "end_time"),)

    id = Column(Integer, primary_key=True, index=True)
    master_id = Column(Integer, ForeignKey("master_profiles.id"), nullable=False)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False, index=True)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    is_booked = Column(Boolean, default=False, nullable=False)  # True = manual block
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        Index("ix_appointments_master_range", "master_id", "start_time", "end_time"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    master_id = Column(Integer, ForeignKey("master_profiles.id"), nullable=False)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False)
    service_option_id = Column(Integer, ForeignKey("service_options.id"), nullable=True)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    status = Column(String(20), default=STATUS_PENDING, nullable=False)  # see APPOINTMENT_STATUSES
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    service = relationship("Service")
    service_option = relationship("ServiceOption")
