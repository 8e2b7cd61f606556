"""
Reservation Service

Implements the table-booking workflow behind /api/datban:

    decode -> validate -> conflict check -> persist -> re-read

Validation and conflict errors are raised before anything is written.
Every mutation re-reads the row after commit so the response carries the
database-generated timestamps.
"""

import logging
from datetime import date, datetime, time
from typing import Any, Iterable, Mapping, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from phuongnam.core.config import Settings
from phuongnam.core.exceptions import (
    ConflictError,
    NotFoundError,
    ReservationConflictError,
    ValidationError,
)
from phuongnam.models import STATUS_TRANSITIONS, Reservation, ReservationStatus
from phuongnam.services.pagination import PageParams, Pagination
from phuongnam.services.query import RESERVATION_SORT, QueryFilters, build_reservation_filters
from phuongnam.services.reservations.conflicts import ConflictDetector
from phuongnam.services.reservations.validator import (
    BookingRules,
    ReservationData,
    parse_date,
    parse_party_size,
    parse_time,
    validate_reservation,
)

logger = logging.getLogger(__name__)

# Offered when the requested slot has no tables left
RECOMMENDED_TIMES = ["18:00", "18:30", "19:30", "20:00", "20:30"]

EDITABLE_FIELDS = ("ten_khach", "sdt", "email", "ngay", "gio", "so_luong_khach", "ghi_chu")


def reservation_to_payload(reservation: Reservation) -> dict[str, Any]:
    """Stored row in request-payload form, used as the base of a partial merge."""
    return {
        "ten_khach": reservation.ten_khach,
        "sdt": reservation.sdt,
        "email": reservation.email,
        "ngay": reservation.ngay.isoformat(),
        "gio": reservation.gio.strftime("%H:%M"),
        "so_luong_khach": reservation.so_luong_khach,
        "ghi_chu": reservation.ghi_chu,
    }


def _to_id(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        number = int(str(value).strip())
    except ValueError:
        return None
    return number if number > 0 else None


def check_transition(current: ReservationStatus, target: ReservationStatus) -> bool:
    """True if the status may move from ``current`` to ``target``; same status is a no-op."""
    return current == target or target in STATUS_TRANSITIONS[current]


class ReservationService:
    """Resource controller for reservations."""

    def __init__(self, settings: Settings, detector: Optional[ConflictDetector] = None):
        self.settings = settings
        self.rules = BookingRules.from_settings(settings)
        self.detector = detector or ConflictDetector(fail_open=settings.conflict_check_fail_open)

    # =========================================================================
    # VALIDATION
    # =========================================================================

    async def _validated(
        self,
        db: AsyncSession,
        payload: Mapping[str, Any],
        exclude_id: Optional[int] = None,
        check_conflict: bool = True,
        now: Optional[datetime] = None,
    ) -> ReservationData:
        errors = validate_reservation(payload, now=now, rules=self.rules)
        if errors:
            logger.info(f"Reservation rejected: {errors}")
            raise ValidationError("Invalid reservation data", errors=errors)

        data = ReservationData.from_payload(payload)
        if check_conflict and await self.detector.has_conflict(
            db, data.sdt, data.ngay, data.gio, exclude_id=exclude_id
        ):
            raise ReservationConflictError(
                errors=["You already have a reservation at this date and time"]
            )
        return data

    async def _get_or_404(self, db: AsyncSession, reservation_id: int) -> Reservation:
        reservation = await db.get(Reservation, reservation_id)
        if reservation is None:
            raise NotFoundError(f"Reservation #{reservation_id} not found")
        return reservation

    async def _commit_and_reload(self, db: AsyncSession, reservation: Reservation) -> Reservation:
        await db.commit()
        await db.refresh(reservation)
        return reservation

    # =========================================================================
    # CRUD
    # =========================================================================

    async def create(
        self,
        db: AsyncSession,
        payload: Mapping[str, Any],
        now: Optional[datetime] = None,
    ) -> Reservation:
        """Validate, check for a duplicate booking and insert as pending."""
        data = await self._validated(db, payload, now=now)

        reservation = Reservation(
            ten_khach=data.ten_khach,
            sdt=data.sdt,
            email=data.email,
            ngay=data.ngay,
            gio=data.gio,
            so_luong_khach=data.so_luong_khach,
            ghi_chu=data.ghi_chu,
            trang_thai=ReservationStatus.PENDING,
        )
        db.add(reservation)
        reservation = await self._commit_and_reload(db, reservation)

        logger.info(
            f"Reservation #{reservation.id_datban} created for {reservation.ten_khach} "
            f"on {reservation.ngay} {reservation.gio:%H:%M} ({reservation.so_luong_khach} guests)"
        )
        return reservation

    async def get(self, db: AsyncSession, reservation_id: int) -> Reservation:
        return await self._get_or_404(db, reservation_id)

    async def list_page(
        self,
        db: AsyncSession,
        params: Mapping[str, Any],
        window: PageParams,
    ) -> tuple[list[Reservation], Pagination, QueryFilters]:
        """Filtered, sorted page of reservations plus its pagination descriptor."""
        filters = build_reservation_filters(params)

        total = await self.count(db, filters)
        query = (
            filters.apply(select(Reservation))
            .order_by(*RESERVATION_SORT.order_by(params))
            .limit(window.limit)
            .offset(window.offset)
        )
        result = await db.execute(query)
        rows = list(result.scalars().all())

        return rows, Pagination.for_window(total, window), filters

    async def count(self, db: AsyncSession, filters: QueryFilters) -> int:
        query = filters.apply(select(func.count(Reservation.id_datban)))
        result = await db.execute(query)
        return result.scalar() or 0

    async def _apply_update(
        self,
        db: AsyncSession,
        reservation: Reservation,
        payload: Mapping[str, Any],
        status: Optional[ReservationStatus],
        now: Optional[datetime],
    ) -> Reservation:
        if status is not None and not check_transition(reservation.trang_thai, status):
            raise ConflictError(
                f"Cannot change status from {reservation.trang_thai.value} to {status.value}",
            )

        target_status = status or reservation.trang_thai
        data = await self._validated(
            db,
            payload,
            exclude_id=reservation.id_datban,
            check_conflict=target_status != ReservationStatus.CANCELLED,
            now=now,
        )

        for field in EDITABLE_FIELDS:
            setattr(reservation, field, getattr(data, field))
        reservation.trang_thai = target_status
        return await self._commit_and_reload(db, reservation)

    async def replace(
        self,
        db: AsyncSession,
        reservation_id: int,
        payload: Mapping[str, Any],
        status: Optional[ReservationStatus] = None,
        now: Optional[datetime] = None,
    ) -> Reservation:
        """
        Full update (PUT): the payload must be a complete, valid reservation.

        The conflict check ignores the reservation itself, so re-saving an
        unchanged slot is not a conflict.
        """
        reservation = await self._get_or_404(db, reservation_id)
        reservation = await self._apply_update(db, reservation, payload, status, now)
        logger.info(f"Reservation #{reservation_id} updated")
        return reservation

    async def patch(
        self,
        db: AsyncSession,
        reservation_id: int,
        changes: Mapping[str, Any],
        now: Optional[datetime] = None,
    ) -> Reservation:
        """
        Partial update (PATCH): merge ``changes`` over the stored row, then
        run the same validation and conflict check as a full update.

        Raises:
            ValidationError: If ``changes`` is empty or the merged row is invalid
        """
        changes = dict(changes)
        status = changes.pop("trang_thai", None)
        if not changes and status is None:
            raise ValidationError("No fields to update")

        reservation = await self._get_or_404(db, reservation_id)
        merged = reservation_to_payload(reservation)
        merged.update(changes)

        reservation = await self._apply_update(
            db,
            reservation,
            merged,
            ReservationStatus(status) if status is not None else None,
            now,
        )
        logger.info(f"Reservation #{reservation_id} patched: {sorted(changes)}")
        return reservation

    async def set_status(
        self,
        db: AsyncSession,
        reservation_id: int,
        status: ReservationStatus,
    ) -> Reservation:
        """
        Move a reservation through its workflow.

        Raises:
            NotFoundError: Unknown reservation
            ConflictError: The transition is not allowed (e.g. out of cancelled)
        """
        reservation = await self._get_or_404(db, reservation_id)
        current = reservation.trang_thai

        if current == status:
            return reservation
        if not check_transition(current, status):
            raise ConflictError(
                f"Cannot change status from {current.value} to {status.value}",
            )

        reservation.trang_thai = status
        reservation = await self._commit_and_reload(db, reservation)
        logger.info(f"Reservation #{reservation_id}: {current.value} -> {status.value}")
        return reservation

    async def delete(self, db: AsyncSession, reservation_id: int) -> Reservation:
        reservation = await self._get_or_404(db, reservation_id)
        await db.delete(reservation)
        await db.commit()
        logger.info(f"Reservation #{reservation_id} deleted")
        return reservation

    async def bulk_delete(self, db: AsyncSession, ids: Iterable[Any]) -> dict[str, Any]:
        """
        Hard-delete every existing reservation among ``ids``.

        Non-numeric ids are dropped; duplicates count once.

        Raises:
            ValidationError: No numeric id was given
            NotFoundError: None of the ids exist
        """
        valid_ids: list[int] = []
        for raw in ids:
            value = _to_id(raw)
            if value is not None and value not in valid_ids:
                valid_ids.append(value)

        if not valid_ids:
            raise ValidationError("No valid reservation ids", errors=["ids must contain numeric ids"])

        result = await db.execute(
            select(Reservation.id_datban)
            .where(Reservation.id_datban.in_(valid_ids))
            .order_by(Reservation.id_datban)
        )
        existing = list(result.scalars().all())
        if not existing:
            raise NotFoundError("No matching reservations found")

        await db.execute(delete(Reservation).where(Reservation.id_datban.in_(existing)))
        await db.commit()

        logger.info(f"Bulk deleted {len(existing)}/{len(valid_ids)} reservations: {existing}")
        return {
            "deletedIds": existing,
            "deletedCount": len(existing),
            "requestedCount": len(valid_ids),
        }

    # =========================================================================
    # AVAILABILITY
    # =========================================================================

    async def availability(
        self,
        db: AsyncSession,
        raw_date: Optional[str],
        raw_time: Optional[str],
        raw_guests: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Estimate free tables for a slot.

        Each active reservation at the slot is assumed to occupy one table
        out of TOTAL_TABLES; this is a heuristic, not a seating plan.
        """
        errors = []
        if not raw_date:
            errors.append("date is required")
        if not raw_time:
            errors.append("time is required")
        if errors:
            raise ValidationError("Date and time are required", errors=errors)

        slot_date: Optional[date] = parse_date(raw_date)
        slot_time: Optional[time] = parse_time(raw_time)
        if slot_date is None:
            errors.append("date must be formatted as YYYY-MM-DD")
        if slot_time is None:
            errors.append("time must be formatted as HH:MM")
        guests = parse_party_size(raw_guests) if raw_guests else None
        if raw_guests and guests is None:
            errors.append("guests must be a whole number")
        if errors:
            raise ValidationError("Invalid availability query", errors=errors)

        slot_time = slot_time.replace(second=0)
        result = await db.execute(
            select(func.count(Reservation.id_datban)).where(
                Reservation.ngay == slot_date,
                Reservation.gio == slot_time,
                Reservation.trang_thai != ReservationStatus.CANCELLED,
            )
        )
        booked = result.scalar() or 0
        total = self.settings.total_tables
        available = max(0, total - booked)
        requested = slot_time.strftime("%H:%M")

        return {
            "date": slot_date.isoformat(),
            "time": requested,
            "requestedGuests": guests,
            "totalTables": total,
            "bookedTables": booked,
            "availableTables": available,
            "isAvailable": available > 0,
            "recommendedTimes": (
                [t for t in RECOMMENDED_TIMES if t != requested] if available == 0 else None
            ),
        }
