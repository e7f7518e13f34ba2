"""Report aggregation.

Pure functions over already-loaded records. Given the same records in the
same order they return the same summaries.
"""

from collections import Counter
from typing import Iterable, Sequence

from ...models import Appointment, AppointmentStatus, Product
from .schemas import (
    AppointmentsSummary,
    ProductsSummary,
    RevenueSummary,
    ServiceRevenue,
    StatusBreakdown,
)


def summarize_appointments(appointments: Sequence[Appointment]) -> AppointmentsSummary:
    """Total plus a partition of the appointments by status"""
    counts = Counter(a.status for a in appointments)
    return AppointmentsSummary(
        total=len(appointments),
        byStatus=StatusBreakdown(
            scheduled=counts[AppointmentStatus.SCHEDULED],
            confirmed=counts[AppointmentStatus.CONFIRMED],
            completed=counts[AppointmentStatus.COMPLETED],
            cancelled=counts[AppointmentStatus.CANCELLED],
        ),
    )


def summarize_products(products: Sequence[Product], low_stock_threshold: int) -> ProductsSummary:
    return ProductsSummary(
        total=len(products),
        lowStock=sum(1 for p in products if p.stock <= low_stock_threshold),
        outOfStock=sum(1 for p in products if p.stock == 0),
        totalValue=sum(p.price * p.stock for p in products),
    )


def revenue_by_service(appointments: Iterable[Appointment]) -> dict[str, ServiceRevenue]:
    """
    Group appointments by service name.

    Each appointment contributes the service's current price; there is no
    price history.
    """
    grouped: dict[str, ServiceRevenue] = {}
    for appointment in appointments:
        entry = grouped.setdefault(appointment.service.name, ServiceRevenue())
        entry.count += 1
        entry.revenue += appointment.service.price
    return grouped


def summarize_revenue(grouped: dict[str, ServiceRevenue]) -> RevenueSummary:
    # Derived from the groups so the total always equals the sum of its parts
    total_revenue = sum(entry.revenue for entry in grouped.values())
    total_appointments = sum(entry.count for entry in grouped.values())
    return RevenueSummary(
        totalRevenue=total_revenue,
        totalAppointments=total_appointments,
        averageTicket=total_revenue / max(total_appointments, 1),
    )
