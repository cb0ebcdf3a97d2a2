"""All models imported here for metadata discovery (create_all, migrations)."""

from turfbook.models.base import Base
from turfbook.models.booking import Booking, BookingPlan, BookingStatus, BookingType
from turfbook.models.turf import Turf

__all__ = [
    "Base",
    "Turf",
    "Booking",
    "BookingPlan",
    "BookingStatus",
    "BookingType",
]
