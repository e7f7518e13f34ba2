"""Report repository - Read-only queries backing the reports"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Appointment, AppointmentStatus, Product


class ReportRepository:
    """Repository for report database queries"""

    @staticmethod
    def find_appointments_in_range(
        db: Session,
        start: datetime,
        end: datetime,
        service_id: Optional[str] = None,
        status: Optional[AppointmentStatus] = None,
    ) -> list[Appointment]:
        """Get appointments with start <= date <= end, oldest slot first"""
        query = (
            db.query(Appointment)
            .options(
                joinedload(Appointment.pet),
                joinedload(Appointment.service),
                joinedload(Appointment.user),
            )
            .filter(Appointment.date >= start, Appointment.date <= end)
        )

        if service_id:
            query = query.filter(Appointment.service_id == service_id)

        if status is not None:
            query = query.filter(Appointment.status == status)

        return query.order_by(Appointment.date.asc(), Appointment.id.asc()).all()

    @staticmethod
    def find_products(db: Session, max_stock: Optional[int] = None) -> list[Product]:
        """Get products ordered by stock then name, optionally only stock <= max_stock"""
        query = db.query(Product)

        if max_stock is not None:
            query = query.filter(Product.stock <= max_stock)

        return query.order_by(Product.stock.asc(), Product.name.asc()).all()
