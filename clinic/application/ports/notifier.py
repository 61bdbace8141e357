from typing import Optional, Protocol


class Notifier(Protocol):
    def notify(self, user_id: str, title: str, message: str, type: str, priority: str,
               related_appointment_id: Optional[int] = None) -> None:
        ...
