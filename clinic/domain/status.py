import enum
from typing import Dict, FrozenSet, Tuple

from ..exceptions import InvalidTransition


class AppointmentStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no-show"
    PENDING_RESCHEDULE_CONFIRMATION = "pending_reschedule_confirmation"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @property
    def is_active(self) -> bool:
        return self in ACTIVE_STATUSES


class AppointmentEvent(str, enum.Enum):
    CONFIRM = "confirm"
    CANCEL = "cancel"
    REQUEST_RESCHEDULE = "request_reschedule"
    CONFIRM_RESCHEDULE = "confirm_reschedule"
    REJECT_RESCHEDULE = "reject_reschedule"
    START = "start"
    COMPLETE = "complete"
    MARK_NO_SHOW = "mark_no_show"


class Actor(str, enum.Enum):
    PATIENT = "patient"
    DOCTOR = "doctor"
    STAFF = "staff"
    SYSTEM = "system"


class ConsultationType(str, enum.Enum):
    IN_PERSON = "in-person"
    VIDEO_CALL = "video-call"
    PHONE = "phone"


TERMINAL_STATUSES: FrozenSet[AppointmentStatus] = frozenset({
    AppointmentStatus.COMPLETED,
    AppointmentStatus.CANCELLED,
    AppointmentStatus.NO_SHOW,
})

# Statuses that hold their doctor-slot for uniqueness purposes.
ACTIVE_STATUSES: FrozenSet[AppointmentStatus] = frozenset({
    AppointmentStatus.PENDING,
    AppointmentStatus.CONFIRMED,
    AppointmentStatus.IN_PROGRESS,
    AppointmentStatus.PENDING_RESCHEDULE_CONFIRMATION,
})

S = AppointmentStatus
E = AppointmentEvent

TRANSITIONS: Dict[Tuple[AppointmentStatus, AppointmentEvent], AppointmentStatus] = {
    (S.PENDING, E.CONFIRM): S.CONFIRMED,
    (S.PENDING, E.CANCEL): S.CANCELLED,
    (S.CONFIRMED, E.CANCEL): S.CANCELLED,
    (S.CONFIRMED, E.REQUEST_RESCHEDULE): S.PENDING_RESCHEDULE_CONFIRMATION,
    (S.PENDING_RESCHEDULE_CONFIRMATION, E.CONFIRM_RESCHEDULE): S.CONFIRMED,
    (S.PENDING_RESCHEDULE_CONFIRMATION, E.REJECT_RESCHEDULE): S.CONFIRMED,
    (S.CONFIRMED, E.START): S.IN_PROGRESS,
    (S.CONFIRMED, E.COMPLETE): S.COMPLETED,
    (S.IN_PROGRESS, E.COMPLETE): S.COMPLETED,
    (S.CONFIRMED, E.MARK_NO_SHOW): S.NO_SHOW,
}

_DOCTOR_SIDE = frozenset({Actor.DOCTOR, Actor.STAFF})

# Who may fire an event, keyed on the same pairs as TRANSITIONS.
ALLOWED_ACTORS: Dict[Tuple[AppointmentStatus, AppointmentEvent], FrozenSet[Actor]] = {
    (S.PENDING, E.CONFIRM): _DOCTOR_SIDE,
    (S.PENDING, E.CANCEL): _DOCTOR_SIDE,
    (S.CONFIRMED, E.CANCEL): frozenset({Actor.PATIENT, Actor.DOCTOR, Actor.STAFF}),
    (S.CONFIRMED, E.REQUEST_RESCHEDULE): frozenset({Actor.PATIENT, Actor.DOCTOR, Actor.STAFF}),
    (S.PENDING_RESCHEDULE_CONFIRMATION, E.CONFIRM_RESCHEDULE): _DOCTOR_SIDE,
    (S.PENDING_RESCHEDULE_CONFIRMATION, E.REJECT_RESCHEDULE): _DOCTOR_SIDE,
    (S.CONFIRMED, E.START): _DOCTOR_SIDE,
    (S.CONFIRMED, E.COMPLETE): _DOCTOR_SIDE,
    (S.IN_PROGRESS, E.COMPLETE): _DOCTOR_SIDE,
    (S.CONFIRMED, E.MARK_NO_SHOW): frozenset({Actor.STAFF}),
}


def next_status(current: AppointmentStatus, event: AppointmentEvent, actor: Actor = Actor.SYSTEM) -> AppointmentStatus:
    """Return the status reached by applying ``event`` to ``current``.

    Raises InvalidTransition when the pair is not in the table (which covers
    every event on a terminal status) or when ``actor`` may not fire it.
    ``Actor.SYSTEM`` bypasses the actor guard.
    """
    current = AppointmentStatus(current)
    key = (current, event)
    if key not in TRANSITIONS:
        if current.is_terminal:
            raise InvalidTransition(f"Appointment is {current.value}; no further changes are allowed")
        raise InvalidTransition(f"Cannot {event.value.replace('_', ' ')} an appointment that is {current.value}")
    if actor is not Actor.SYSTEM and actor not in ALLOWED_ACTORS[key]:
        raise InvalidTransition(f"A {actor.value} cannot {event.value.replace('_', ' ')} an appointment that is {current.value}")
    return TRANSITIONS[key]
