"""Timeslot conflict detection.

The shop has a single appointment capacity at any instant: an active
appointment blocks the exact same `date` for every service and pet.
"""

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from ...shared.exceptions import SlotTakenError
from .repository import AppointmentRepository

logger = logging.getLogger(__name__)


class ConflictDetector:
    def __init__(self, db: Session, repo: AppointmentRepository | None = None):
        self.db = db
        self.repo = repo or AppointmentRepository()

    def can_book(self, candidate_date: datetime) -> bool:
        """True when no active appointment holds `candidate_date`"""
        return self.repo.find_conflicting(self.db, candidate_date) is None

    def ensure_bookable(self, candidate_date: datetime) -> None:
        if not self.can_book(candidate_date):
            logger.warning(f"⚠️ Booking rejected, slot {candidate_date.isoformat()} is taken")
            raise SlotTakenError()
