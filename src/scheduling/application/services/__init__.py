from .availability_service import AvailabilityService
from .scheduling_service import SchedulingService
from .slot_locks import SlotLockRegistry

__all__ = ["AvailabilityService", "SchedulingService", "SlotLockRegistry"]
