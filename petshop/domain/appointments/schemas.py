"""Appointment domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from ...models import AppointmentStatus
from ...shared.validators import from_utc_naive, validate_uuid


class AppointmentCreate(BaseModel):
    """Schema for booking an appointment"""

    petId: str
    serviceId: str
    date: datetime

    @field_validator("petId", "serviceId")
    @classmethod
    def validate_ids(cls, v):
        if not validate_uuid(v):
            raise ValueError("Must be a valid UUID")
        return v


class AppointmentStatusUpdate(BaseModel):
    """Schema for changing an appointment's status"""

    status: AppointmentStatus


class PetSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    species: str
    breed: Optional[str] = None


class ServiceSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    price: float
    duration: int


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str


class AppointmentResponse(BaseModel):
    """Schema for appointment responses; related records are attached per operation"""

    id: str
    petId: str
    serviceId: str
    userId: str
    date: datetime
    status: AppointmentStatus
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None
    pet: Optional[PetSummary] = None
    service: Optional[ServiceSummary] = None
    user: Optional[UserSummary] = None

    @field_validator("date", "createdAt", "updatedAt")
    @classmethod
    def mark_utc(cls, v):
        return from_utc_naive(v)
