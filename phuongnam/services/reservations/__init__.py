"""
Reservation workflow: validation, duplicate-booking detection and the
resource controller that ties them to persistence.
"""

from phuongnam.services.reservations.conflicts import ConflictDetector
from phuongnam.services.reservations.service import ReservationService, check_transition
from phuongnam.services.reservations.validator import (
    DEFAULT_RULES,
    BookingRules,
    ReservationData,
    validate_reservation,
)

__all__ = [
    "BookingRules",
    "ConflictDetector",
    "DEFAULT_RULES",
    "ReservationData",
    "ReservationService",
    "check_transition",
    "validate_reservation",
]
