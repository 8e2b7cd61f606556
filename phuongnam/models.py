"""
SQLAlchemy Database Models

Tables keep the restaurant's original Vietnamese column names, which are
also the JSON field names of the API:

- loai_mon   (Category)
- mon_an     (Food)
- khach_hang (Customer)
- dat_ban    (Reservation)
"""

import enum

from sqlalchemy import Column, Date, DateTime, Enum, Float, ForeignKey, Index, Integer, String, Text, Time
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from phuongnam.database import Base


class ReservationStatus(str, enum.Enum):
    """
    Reservation status workflow.

    pending is the initial state; confirmed and cancelled are reached via
    an explicit status update. Nothing leaves cancelled.
    """
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


# Allowed (from -> to) moves; setting the current status again is a no-op
STATUS_TRANSITIONS: dict[ReservationStatus, set[ReservationStatus]] = {
    ReservationStatus.PENDING: {ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED},
    ReservationStatus.CONFIRMED: {ReservationStatus.CANCELLED},
    ReservationStatus.CANCELLED: set(),
}


class Category(Base):
    """Menu category (loai mon)."""
    __tablename__ = "loai_mon"

    id_loai = Column(Integer, primary_key=True, index=True, autoincrement=True)
    ten_loai = Column(String(100), nullable=False, unique=True)
    mo_ta = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    foods = relationship("Food", back_populates="category")

    def __repr__(self):
        return f"<Category #{self.id_loai} - {self.ten_loai}>"


class Food(Base):
    """Menu item (mon an)."""
    __tablename__ = "mon_an"

    id_mon = Column(Integer, primary_key=True, index=True, autoincrement=True)
    id_loai = Column(Integer, ForeignKey("loai_mon.id_loai"), nullable=False, index=True)
    ten_mon = Column(String(255), nullable=False, unique=True)
    mo_ta = Column(Text, nullable=True)
    gia = Column(Float, nullable=False)
    hinh_anh = Column(String(255), nullable=True)  # image filename
    so_luong = Column(Integer, nullable=False, default=0)  # stock
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    category = relationship("Category", back_populates="foods", lazy="joined")

    def __repr__(self):
        return f"<Food #{self.id_mon} - {self.ten_mon}>"


class Customer(Base):
    """Registered customer account (khach hang)."""
    __tablename__ = "khach_hang"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    phone = Column(String(20), nullable=False)
    password = Column(String(255), nullable=False)  # password hash
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Customer #{self.id} - {self.email}>"


class Reservation(Base):
    """
    Table booking (dat ban).

    At most one non-cancelled reservation per (sdt, ngay, gio) is allowed.
    This is checked by the conflict detector at write time, not by a
    database constraint.
    """
    __tablename__ = "dat_ban"

    id_datban = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Guest
    ten_khach = Column(String(100), nullable=False)
    sdt = Column(String(20), nullable=False, index=True)
    email = Column(String(100), nullable=True)
    so_luong_khach = Column(Integer, nullable=False)

    # Slot
    ngay = Column(Date, nullable=False, index=True)
    gio = Column(Time, nullable=False)

    ghi_chu = Column(Text, nullable=True)

    trang_thai = Column(
        Enum(
            ReservationStatus,
            name="reservation_status",
            values_callable=lambda e: [m.value for m in e],
        ),
        default=ReservationStatus.PENDING,
        nullable=False,
        index=True,
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("ix_dat_ban_slot", "sdt", "ngay", "gio"),
    )

    def __repr__(self):
        return f"<Reservation #{self.id_datban} - {self.ten_khach} - {self.ngay} {self.gio} - {self.trang_thai.value}>"
