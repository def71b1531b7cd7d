from .appointment_repository import AppointmentCriteria, AppointmentRepository
from .availability_repository import AvailabilityRepository

__all__ = ["AppointmentCriteria", "AppointmentRepository", "AvailabilityRepository"]
