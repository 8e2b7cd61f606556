from datetime import date, time, timedelta

import pytest
from sqlalchemy.exc import OperationalError

from phuongnam.core.exceptions import DatabaseError
from phuongnam.models import Reservation, ReservationStatus
from phuongnam.services.reservations import ConflictDetector

PHONE = "0912345678"
DAY = date.today() + timedelta(days=3)
SLOT = time(19, 0)


async def add_reservation(db, status=ReservationStatus.PENDING, phone=PHONE) -> Reservation:
    reservation = Reservation(
        ten_khach="Nguyen Van A",
        sdt=phone,
        ngay=DAY,
        gio=SLOT,
        so_luong_khach=2,
        trang_thai=status,
    )
    db.add(reservation)
    await db.commit()
    return reservation


class BrokenSession:
    rolled_back = False

    async def execute(self, *args, **kwargs):
        raise OperationalError("SELECT count(*) FROM dat_ban", {}, Exception("connection lost"))

    async def rollback(self):
        self.rolled_back = True


async def test_active_reservation_conflicts(db):
    await add_reservation(db)
    detector = ConflictDetector()

    assert await detector.has_conflict(db, PHONE, DAY, SLOT) is True
    assert await detector.has_conflict(db, "0987654321", DAY, SLOT) is False
    assert await detector.has_conflict(db, PHONE, DAY, time(19, 30)) is False
    assert await detector.has_conflict(db, PHONE, DAY + timedelta(days=1), SLOT) is False


async def test_excluded_id_does_not_conflict_with_itself(db):
    reservation = await add_reservation(db)
    detector = ConflictDetector()

    assert await detector.has_conflict(db, PHONE, DAY, SLOT, exclude_id=reservation.id_datban) is False
    assert await detector.has_conflict(db, PHONE, DAY, SLOT, exclude_id=reservation.id_datban + 1) is True


async def test_cancelled_reservation_frees_the_slot(db):
    reservation = await add_reservation(db)
    detector = ConflictDetector()
    assert await detector.has_conflict(db, PHONE, DAY, SLOT) is True

    reservation.trang_thai = ReservationStatus.CANCELLED
    await db.commit()
    assert await detector.has_conflict(db, PHONE, DAY, SLOT) is False


async def test_confirmed_reservation_still_conflicts(db):
    await add_reservation(db, status=ReservationStatus.CONFIRMED)
    assert await ConflictDetector().has_conflict(db, PHONE, DAY, SLOT) is True


async def test_lookup_failure_fails_closed_by_default():
    with pytest.raises(DatabaseError):
        await ConflictDetector().has_conflict(BrokenSession(), PHONE, DAY, SLOT)


async def test_lookup_failure_can_fail_open():
    session = BrokenSession()
    assert await ConflictDetector(fail_open=True).has_conflict(session, PHONE, DAY, SLOT) is False
    assert session.rolled_back is True
