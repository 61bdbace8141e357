# Models package (re-export feature modules for stable imports)
from .health.doctor import Doctor
from .health.schedule import DoctorSchedule
from .health.appointment import Appointment
from .health.slot_reservation import SlotReservation
from .health.notification import Notification
from .users.patient import Patient
from .users.staff import StaffMember

__all__ = [
    "Doctor",
    "DoctorSchedule",
    "Appointment",
    "SlotReservation",
    "Notification",
    "Patient",
    "StaffMember",
]
