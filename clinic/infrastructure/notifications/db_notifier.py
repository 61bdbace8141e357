from typing import Optional
import logging

from sqlalchemy.engine import Engine
from sqlmodel import Session

from ...db.models import Notification
from ...application.ports.notifier import Notifier

logger = logging.getLogger(__name__)


class DbNotifier(Notifier):
    """Stores notifications in the notifications table.

    Uses its own session so a failed insert cannot touch the caller's
    booking transaction.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def notify(self, user_id: str, title: str, message: str, type: str, priority: str,
               related_appointment_id: Optional[int] = None) -> None:
        with Session(self.engine) as session:
            session.add(Notification(
                user_id=user_id,
                title=title,
                message=message,
                type=type,
                priority=priority,
                related_appointment_id=related_appointment_id,
            ))
            session.commit()
        logger.debug(f"Notification '{title}' stored for user {user_id}")
