"""Report service - Builds operational summaries on demand"""

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from ...config import LOW_STOCK_THRESHOLD
from ...models import AppointmentStatus
from ...shared.validators import to_utc_naive
from ..appointments.projections import project_appointment, staff_view
from .aggregator import (
    revenue_by_service,
    summarize_appointments,
    summarize_products,
    summarize_revenue,
)
from .repository import ReportRepository
from .schemas import (
    AppointmentsReport,
    ProductDetail,
    ProductsReport,
    ReportPeriod,
    ReportRequest,
    ReportType,
    RevenueReport,
)

logger = logging.getLogger(__name__)


class ReportService:
    """Service layer for report generation. Reports are never stored."""

    def __init__(self, db: Session, low_stock_threshold: int = LOW_STOCK_THRESHOLD):
        self.db = db
        self.repo = ReportRepository()
        self.low_stock_threshold = low_stock_threshold

    def generate(self, request: ReportRequest):
        """Generate the report named by `request.type`"""
        start = to_utc_naive(request.startDate)
        end = to_utc_naive(request.endDate)
        period = ReportPeriod(startDate=start, endDate=end)

        logger.info(
            f"📊 Generating {request.type.value} report for {start.isoformat()} - {end.isoformat()}"
        )

        if request.type is ReportType.APPOINTMENTS:
            return self.appointments_report(start, end, period, request.serviceId)
        if request.type is ReportType.PRODUCTS:
            return self.products_report(period, bool(request.lowStock))
        if request.type is ReportType.REVENUE:
            return self.revenue_report(start, end, period, request.serviceId)
        raise ValueError(f"Unsupported report type: {request.type}")

    def appointments_report(
        self, start: datetime, end: datetime, period: ReportPeriod, service_id: str | None = None
    ) -> AppointmentsReport:
        appointments = self.repo.find_appointments_in_range(self.db, start, end, service_id)
        return AppointmentsReport(
            type=ReportType.APPOINTMENTS,
            period=period,
            summary=summarize_appointments(appointments),
            details=[staff_view(a) for a in appointments],
        )

    def products_report(self, period: ReportPeriod, low_stock_only: bool = False) -> ProductsReport:
        # The low-stock filter narrows the set before any count is taken
        max_stock = self.low_stock_threshold if low_stock_only else None
        products = self.repo.find_products(self.db, max_stock)
        return ProductsReport(
            type=ReportType.PRODUCTS,
            period=period,
            summary=summarize_products(products, self.low_stock_threshold),
            details=[ProductDetail.model_validate(p) for p in products],
        )

    def revenue_report(
        self, start: datetime, end: datetime, period: ReportPeriod, service_id: str | None = None
    ) -> RevenueReport:
        appointments = self.repo.find_appointments_in_range(
            self.db, start, end, service_id, status=AppointmentStatus.COMPLETED
        )
        grouped = revenue_by_service(appointments)
        return RevenueReport(
            type=ReportType.REVENUE,
            period=period,
            summary=summarize_revenue(grouped),
            revenueByService=grouped,
            details=[project_appointment(a, with_service=True) for a in appointments],
        )
