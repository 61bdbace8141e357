# Routers package
from . import appointments_router
from . import doctors_router
from . import schedules_router

__all__ = [
    "appointments_router",
    "doctors_router",
    "schedules_router",
]
