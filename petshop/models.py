import enum
import uuid
from typing import Optional

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


def generate_id():
    """Generate an opaque unique identifier"""
    return str(uuid.uuid4())


class Role(str, enum.Enum):
    CLIENT = "CLIENT"
    EMPLOYEE = "EMPLOYEE"
    ADMIN = "ADMIN"

    @classmethod
    def parse(cls, value) -> Optional["Role"]:
        """Return the matching role, or None for anything unrecognized"""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            return None


class AppointmentStatus(str, enum.Enum):
    SCHEDULED = "SCHEDULED"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class NotificationType(str, enum.Enum):
    APPOINTMENT_CONFIRMATION = "APPOINTMENT_CONFIRMATION"
    APPOINTMENT_CANCELLATION = "APPOINTMENT_CANCELLATION"
    # Produced by the external notification scheduler, stored here for its rows
    APPOINTMENT_REMINDER = "APPOINTMENT_REMINDER"
    LOW_STOCK = "LOW_STOCK"


# Statuses that hold a timeslot
ACTIVE_STATUSES = (AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED)


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    role = Column(
        Enum(Role, name="user_role", native_enum=False, length=20),
        default=Role.CLIENT,
        nullable=False,
    )
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    pets = relationship("Pet", back_populates="owner")
    appointments = relationship("Appointment", back_populates="user")
    notifications = relationship("Notification", back_populates="user")


class Pet(Base):
    __tablename__ = "pets"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(120), nullable=False)
    species = Column(String(60), nullable=False)
    breed = Column(String(120), nullable=True)
    owner_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, server_default=func.now())

    owner = relationship("User", back_populates="pets")
    appointments = relationship("Appointment", back_populates="pet")


class Service(Base):
    __tablename__ = "services"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(120), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=False)
    duration = Column(Integer, nullable=False)  # minutes
    created_at = Column(DateTime, server_default=func.now())

    appointments = relationship("Appointment", back_populates="service")


class Product(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(120), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=False)
    stock = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        # One active appointment per instant, shop-wide
        Index(
            "uq_appointments_active_slot",
            "date",
            unique=True,
            sqlite_where=text("status IN ('SCHEDULED', 'CONFIRMED')"),
            postgresql_where=text("status IN ('SCHEDULED', 'CONFIRMED')"),
        ),
        Index("ix_appointments_user_id", "user_id"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    pet_id = Column(String(36), ForeignKey("pets.id", ondelete="CASCADE"), nullable=False)
    service_id = Column(String(36), ForeignKey("services.id"), nullable=False)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    date = Column(DateTime, nullable=False, index=True)  # naive UTC
    status = Column(
        Enum(AppointmentStatus, name="appointment_status", native_enum=False, length=20),
        default=AppointmentStatus.SCHEDULED,
        nullable=False,
    )
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    pet = relationship("Pet", back_populates="appointments")
    service = relationship("Service", back_populates="appointments")
    user = relationship("User", back_populates="appointments")


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(
        Enum(NotificationType, name="notification_type", native_enum=False, length=40),
        nullable=False,
    )
    read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    user = relationship("User", back_populates="notifications")
