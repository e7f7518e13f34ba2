"""
Notification intents
Builds the messages the appointment lifecycle announces and hands them to a
publisher. Delivery and read-state tracking belong to whoever consumes the
stored or logged intents.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from ..config import NOTIFICATION_BACKEND
from ..models import Appointment, Notification, NotificationType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationIntent:
    """An event the notification collaborator should deliver to a user"""

    user_id: str
    type: NotificationType
    title: str
    message: str
    appointment_id: str | None = None


def _format_slot(date: datetime) -> str:
    return date.strftime("%Y-%m-%d %H:%M UTC")


def appointment_confirmation(appointment: Appointment) -> NotificationIntent:
    service_name = appointment.service.name if appointment.service else "service"
    pet_name = appointment.pet.name if appointment.pet else "your pet"
    return NotificationIntent(
        user_id=appointment.user_id,
        type=NotificationType.APPOINTMENT_CONFIRMATION,
        title="Appointment confirmed",
        message=(
            f"Your {service_name} appointment for {pet_name} is confirmed "
            f"for {_format_slot(appointment.date)}."
        ),
        appointment_id=appointment.id,
    )


def appointment_cancellation(appointment: Appointment) -> NotificationIntent:
    service_name = appointment.service.name if appointment.service else "service"
    pet_name = appointment.pet.name if appointment.pet else "your pet"
    return NotificationIntent(
        user_id=appointment.user_id,
        type=NotificationType.APPOINTMENT_CANCELLATION,
        title="Appointment cancelled",
        message=f"Your {service_name} appointment for {pet_name} was cancelled.",
        appointment_id=appointment.id,
    )


class NotificationPublisher:
    """Sink for notification intents"""

    def publish(self, intent: NotificationIntent) -> None:
        raise NotImplementedError


class LoggingNotificationPublisher(NotificationPublisher):
    def publish(self, intent: NotificationIntent) -> None:
        logger.info(
            f"📣 {intent.type.value} for user {intent.user_id} "
            f"(appointment {intent.appointment_id}): {intent.title}"
        )


class DatabaseNotificationPublisher(NotificationPublisher):
    """Stores each intent as an unread Notification row"""

    def __init__(self, db: Session):
        self.db = db

    def publish(self, intent: NotificationIntent) -> None:
        notification = Notification(
            user_id=intent.user_id,
            title=intent.title,
            message=intent.message,
            type=intent.type,
        )
        self.db.add(notification)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info(f"✅ Stored {intent.type.value} notification for user {intent.user_id}")


def get_publisher(db: Session) -> NotificationPublisher:
    """Publisher selected by NOTIFICATION_BACKEND"""
    if NOTIFICATION_BACKEND == "log":
        return LoggingNotificationPublisher()
    return DatabaseNotificationPublisher(db)
