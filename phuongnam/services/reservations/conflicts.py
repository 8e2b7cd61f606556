"""
Reservation Conflict Detector

Decides whether a (phone, date, time) slot is already held by an active
(non-cancelled) reservation.

Failure policy:
    The lookup can fail (connection lost, pool timeout, ...). With
    fail_open=False (the default) the error is raised as DatabaseError and
    the booking is not written. With fail_open=True the error is logged and
    the slot is reported free, trading duplicate prevention for
    availability.

The check is not atomic with the insert that follows it. Two concurrent
requests for the same slot can both pass before either commits.
"""

import logging
from datetime import date, time
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from phuongnam.core.exceptions import DatabaseError
from phuongnam.models import Reservation, ReservationStatus

logger = logging.getLogger(__name__)


class ConflictDetector:
    """Duplicate-booking check used by reservation create/update."""

    def __init__(self, fail_open: bool = False):
        self.fail_open = fail_open

    async def count_active(
        self,
        db: AsyncSession,
        phone: str,
        booking_date: date,
        booking_time: time,
        exclude_id: Optional[int] = None,
    ) -> int:
        """Count non-cancelled reservations on the slot, ignoring ``exclude_id``."""
        query = select(func.count(Reservation.id_datban)).where(
            Reservation.sdt == phone,
            Reservation.ngay == booking_date,
            Reservation.gio == booking_time,
            Reservation.trang_thai != ReservationStatus.CANCELLED,
        )
        if exclude_id is not None:
            query = query.where(Reservation.id_datban != exclude_id)

        result = await db.execute(query)
        return result.scalar() or 0

    async def has_conflict(
        self,
        db: AsyncSession,
        phone: str,
        booking_date: date,
        booking_time: time,
        exclude_id: Optional[int] = None,
    ) -> bool:
        """
        Check whether the slot collides with an existing active reservation.

        Args:
            db: Active session
            phone: Normalized phone number
            booking_date: Requested date
            booking_time: Requested time
            exclude_id: Reservation being updated, so it does not collide
                with itself

        Returns:
            bool: True if another active reservation holds the slot

        Raises:
            DatabaseError: If the lookup fails and fail_open is False
        """
        try:
            count = await self.count_active(db, phone, booking_date, booking_time, exclude_id)
        except SQLAlchemyError as e:
            if self.fail_open:
                logger.error(f"Duplicate-booking check failed, treating slot as free: {e}")
                # The failed statement aborts the transaction on PostgreSQL
                await db.rollback()
                return False
            logger.error(f"Duplicate-booking check failed, rejecting write: {e}")
            raise DatabaseError("Could not verify reservation availability", details=str(e)) from e

        if count > 0:
            logger.info(f"Booking conflict for {phone} on {booking_date} {booking_time:%H:%M}")
        return count > 0
