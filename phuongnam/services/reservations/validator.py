"""
Reservation Validator

Field-level and temporal business rules for a booking request. The check
is a pure function: no I/O, and "now" can be injected so callers (and
tests) control the clock.

Every rule is evaluated independently and all violations are returned, in
field order: name, phone, email, date, time, party size, note. An empty
list means the payload is valid.
"""

import re
import unicodedata
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any, Mapping, Optional

from phuongnam.core.config import Settings

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
EMAIL_MAX_LENGTH = 100
NOTE_MAX_LENGTH = 500

# Unicode letters and whitespace only (no digits, no punctuation)
NAME_PATTERN = re.compile(r"^(?:[^\W\d_]|\s)+$")
PHONE_PATTERN = re.compile(r"^[0-9]{10,11}$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")
WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class BookingRules:
    """Opening hours and limits a reservation must respect."""
    opening_time: time = time(10, 0)
    last_booking_time: time = time(21, 30)
    window_days: int = 30
    max_party_size: int = 20

    @classmethod
    def from_settings(cls, settings: Settings) -> "BookingRules":
        return cls(
            opening_time=settings.opening_time,
            last_booking_time=settings.last_booking_time,
            window_days=settings.booking_window_days,
            max_party_size=settings.max_party_size,
        )


DEFAULT_RULES = BookingRules()


# =============================================================================
# PARSING HELPERS
# =============================================================================

def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def normalize_name(value: Any) -> str:
    """Trim and compose to NFC so decomposed diacritics count as letters."""
    return unicodedata.normalize("NFC", _text(value)).strip()


def normalize_phone(value: Any) -> str:
    """Remove all whitespace from a phone number."""
    return WHITESPACE.sub("", _text(value))


def parse_date(value: Any) -> Optional[date]:
    """Parse an ISO ``YYYY-MM-DD`` date; None if it is not one."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(_text(value).strip())
    except ValueError:
        return None


def parse_time(value: Any) -> Optional[time]:
    """Parse ``HH:MM`` or ``HH:MM:SS``; None if it is not a clock time."""
    if isinstance(value, time):
        return value.replace(microsecond=0)
    match = TIME_PATTERN.match(_text(value).strip())
    if not match:
        return None
    hours, minutes, seconds = int(match.group(1)), int(match.group(2)), int(match.group(3) or 0)
    if hours > 23 or minutes > 59 or seconds > 59:
        return None
    return time(hours, minutes, seconds)


def parse_party_size(value: Any) -> Optional[int]:
    """Coerce the guest count to an int; None when it is not a whole number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        return int(_text(value).strip())
    except ValueError:
        return None


def _is_blank(value: Any) -> bool:
    return value is None or _text(value).strip() == ""


def _hhmm(value: time) -> str:
    return value.strftime("%H:%M")


# =============================================================================
# VALIDATION
# =============================================================================

def validate_reservation(
    payload: Mapping[str, Any],
    now: Optional[datetime] = None,
    rules: BookingRules = DEFAULT_RULES,
) -> list[str]:
    """
    Check a raw reservation payload against all booking rules.

    Args:
        payload: Mapping with ten_khach, sdt, email, ngay, gio,
            so_luong_khach, ghi_chu (any may be missing)
        now: Moment of validation, local restaurant time (default: now)
        rules: Opening hours and limits

    Returns:
        Human-readable error messages; empty when the payload is valid
    """
    now = now or datetime.now()
    today = now.date()
    errors: list[str] = []

    # Guest name
    name = normalize_name(payload.get("ten_khach"))
    if len(name) < NAME_MIN_LENGTH:
        errors.append(f"Guest name is required and must be at least {NAME_MIN_LENGTH} characters")
    if len(name) > NAME_MAX_LENGTH:
        errors.append(f"Guest name must not exceed {NAME_MAX_LENGTH} characters")
    if name and not NAME_PATTERN.match(name):
        errors.append("Guest name may only contain letters and spaces")

    # Phone
    phone = normalize_phone(payload.get("sdt"))
    if not phone:
        errors.append("Phone number is required")
    elif not PHONE_PATTERN.match(phone):
        errors.append("Phone number must contain 10-11 digits")

    # Email (optional)
    email = _text(payload.get("email")).strip()
    if email:
        if not EMAIL_PATTERN.match(email):
            errors.append("Email address is not valid")
        if len(email) > EMAIL_MAX_LENGTH:
            errors.append(f"Email must not exceed {EMAIL_MAX_LENGTH} characters")

    # Date
    booking_date: Optional[date] = None
    if _is_blank(payload.get("ngay")):
        errors.append("Reservation date is required")
    else:
        booking_date = parse_date(payload.get("ngay"))
        if booking_date is None:
            errors.append("Reservation date must be formatted as YYYY-MM-DD")
        else:
            if booking_date < today:
                errors.append("Cannot book a table for a past date")
            if booking_date > today + timedelta(days=rules.window_days):
                errors.append(f"Reservations can only be made up to {rules.window_days} days in advance")

    # Time
    if _is_blank(payload.get("gio")):
        errors.append("Reservation time is required")
    else:
        booking_time = parse_time(payload.get("gio"))
        if booking_time is None:
            errors.append("Reservation time must be formatted as HH:MM")
        else:
            slot = booking_time.replace(second=0)
            if slot < rules.opening_time or slot > rules.last_booking_time:
                errors.append(
                    f"Reservation time must be between {_hhmm(rules.opening_time)} "
                    f"and {_hhmm(rules.last_booking_time)}"
                )
            if booking_date == today and datetime.combine(booking_date, booking_time) <= now:
                errors.append("Cannot book a time slot that has already passed")

    # Party size
    raw_guests = payload.get("so_luong_khach")
    if _is_blank(raw_guests):
        errors.append("Number of guests is required")
    guests = parse_party_size(raw_guests)
    if guests is None or guests < 1 or guests > rules.max_party_size:
        errors.append(f"Number of guests must be between 1 and {rules.max_party_size}")

    # Note (optional)
    note = _text(payload.get("ghi_chu"))
    if len(note) > NOTE_MAX_LENGTH:
        errors.append(f"Note must not exceed {NOTE_MAX_LENGTH} characters")

    return errors


@dataclass(frozen=True)
class ReservationData:
    """A validated reservation payload, trimmed and converted to column types."""
    ten_khach: str
    sdt: str
    email: Optional[str]
    ngay: date
    gio: time
    so_luong_khach: int
    ghi_chu: Optional[str]

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ReservationData":
        """
        Convert a payload that already passed validate_reservation().

        Raises:
            ValueError: If the payload was not validated first
        """
        ngay = parse_date(payload.get("ngay"))
        gio = parse_time(payload.get("gio"))
        guests = parse_party_size(payload.get("so_luong_khach"))
        if ngay is None or gio is None or guests is None:
            raise ValueError("Reservation payload must be validated before conversion")

        email = _text(payload.get("email")).strip() or None
        note = _text(payload.get("ghi_chu")).strip() or None
        return cls(
            ten_khach=normalize_name(payload.get("ten_khach")),
            sdt=normalize_phone(payload.get("sdt")),
            email=email,
            ngay=ngay,
            gio=gio.replace(second=0),
            so_luong_khach=guests,
            ghi_chu=note,
        )
