"""Report router - FastAPI endpoints for report generation"""

from fastapi import Depends
from sqlalchemy.orm import Session

from ...database import get_db
from ...models import Role
from ...routing import Route, build_router
from .schemas import ReportRequest, ReportResult
from .service import ReportService


def get_report_service(db: Session = Depends(get_db)) -> ReportService:
    """Dependency injection for ReportService"""
    return ReportService(db)


async def generate_report(
    data: ReportRequest,
    service: ReportService = Depends(get_report_service),
):
    """Generate an appointments, products or revenue report"""
    return service.generate(data)


ROUTES = [
    Route("POST", "/generate", frozenset({Role.EMPLOYEE, Role.ADMIN}), generate_report,
          response_model=ReportResult, summary="generateReport"),
]

router = build_router("/reports", ["Reports"], ROUTES)

__all__ = ["router", "ROUTES", "generate_report"]
