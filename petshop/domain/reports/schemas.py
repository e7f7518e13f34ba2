"""Report domain schemas - Pydantic models for report requests and results"""

import enum
from datetime import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ...shared.validators import from_utc_naive, to_utc_naive, validate_uuid
from ..appointments.schemas import AppointmentResponse


class ReportType(str, enum.Enum):
    APPOINTMENTS = "appointments"
    PRODUCTS = "products"
    REVENUE = "revenue"


class ReportRequest(BaseModel):
    """Schema for generating a report over an inclusive date range"""

    type: ReportType
    startDate: datetime
    endDate: datetime
    serviceId: Optional[str] = None
    lowStock: Optional[bool] = None

    @field_validator("serviceId")
    @classmethod
    def validate_service_id(cls, v):
        if v is not None and not validate_uuid(v):
            raise ValueError("Must be a valid UUID")
        return v

    @model_validator(mode="after")
    def validate_range(self):
        if to_utc_naive(self.endDate) < to_utc_naive(self.startDate):
            raise ValueError("endDate must not be before startDate")
        return self


class ReportPeriod(BaseModel):
    startDate: datetime
    endDate: datetime

    @field_validator("startDate", "endDate")
    @classmethod
    def mark_utc(cls, v):
        return from_utc_naive(v)


class StatusBreakdown(BaseModel):
    scheduled: int = 0
    confirmed: int = 0
    completed: int = 0
    cancelled: int = 0


class AppointmentsSummary(BaseModel):
    total: int
    byStatus: StatusBreakdown


class ProductsSummary(BaseModel):
    total: int
    lowStock: int
    outOfStock: int
    totalValue: float


class RevenueSummary(BaseModel):
    totalRevenue: float
    totalAppointments: int
    averageTicket: float


class ServiceRevenue(BaseModel):
    count: int = 0
    revenue: float = 0.0


class ProductDetail(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    price: float
    stock: int


class AppointmentsReport(BaseModel):
    type: Literal[ReportType.APPOINTMENTS]
    period: ReportPeriod
    summary: AppointmentsSummary
    details: list[AppointmentResponse]


class ProductsReport(BaseModel):
    type: Literal[ReportType.PRODUCTS]
    period: ReportPeriod
    summary: ProductsSummary
    details: list[ProductDetail]


class RevenueReport(BaseModel):
    type: Literal[ReportType.REVENUE]
    period: ReportPeriod
    summary: RevenueSummary
    revenueByService: dict[str, ServiceRevenue]
    details: list[AppointmentResponse]


ReportResult = Annotated[
    Union[AppointmentsReport, ProductsReport, RevenueReport],
    Field(discriminator="type"),
]
