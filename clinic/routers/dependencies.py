from fastapi import Depends
from sqlmodel import Session

from ..database import get_session
from ..core.config import settings
from ..application.services.availability_service import AvailabilityService
from ..application.services.booking_service import BookingService
from ..application.services.notification_dispatcher import NotificationDispatcher
from ..application.services.reschedule_service import RescheduleService
from ..application.services.schedule_service import ScheduleService
from ..infrastructure.audit.std_logger import StdAuditLogger
from ..infrastructure.notifications.db_notifier import DbNotifier
from ..infrastructure.persistence.sqlalchemy.repositories.appointments_repository_sql import SqlAppointmentsRepository
from ..infrastructure.persistence.sqlalchemy.repositories.directory_repository_sql import SqlDirectory
from ..infrastructure.persistence.sqlalchemy.repositories.schedule_repository_sql import SqlScheduleRepository


def get_availability_service(session: Session = Depends(get_session)) -> AvailabilityService:
    return AvailabilityService(
        schedules=SqlScheduleRepository(session),
        appointments=SqlAppointmentsRepository(session),
        directory=SqlDirectory(session),
        settings=settings,
    )


def get_schedule_service(session: Session = Depends(get_session)) -> ScheduleService:
    return ScheduleService(repo=SqlScheduleRepository(session), directory=SqlDirectory(session), settings=settings)


def get_dispatcher(session: Session = Depends(get_session)) -> NotificationDispatcher:
    # Notifications are written through a separate session on the same engine.
    return NotificationDispatcher(
        notifier=DbNotifier(session.get_bind()),
        directory=SqlDirectory(session),
        staff_limit=settings.NOTIFY_STAFF_LIMIT,
    )


def get_booking_service(
    session: Session = Depends(get_session),
    availability: AvailabilityService = Depends(get_availability_service),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> BookingService:
    return BookingService(
        repo=SqlAppointmentsRepository(session),
        availability=availability,
        directory=SqlDirectory(session),
        dispatcher=dispatcher,
        audit=StdAuditLogger(),
        settings=settings,
    )


def get_reschedule_service(
    session: Session = Depends(get_session),
    availability: AvailabilityService = Depends(get_availability_service),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> RescheduleService:
    return RescheduleService(
        repo=SqlAppointmentsRepository(session),
        availability=availability,
        dispatcher=dispatcher,
        audit=StdAuditLogger(),
        settings=settings,
    )
