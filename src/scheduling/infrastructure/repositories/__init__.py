from .appointment_repository_impl import AppointmentRepositoryImpl
from .availability_repository_impl import AvailabilityRepositoryImpl

__all__ = ["AppointmentRepositoryImpl", "AvailabilityRepositoryImpl"]
