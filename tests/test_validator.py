import unicodedata
from datetime import date, datetime, time, timedelta

import pytest

from phuongnam.services.reservations.validator import (
    BookingRules,
    ReservationData,
    normalize_phone,
    parse_time,
    validate_reservation,
)

NOW = datetime(2025, 1, 15, 14, 30)
TODAY = NOW.date()


def payload(**overrides):
    data = {
        "ten_khach": "Nguyễn Văn A",
        "sdt": "0912345678",
        "email": "a@example.com",
        "ngay": (TODAY + timedelta(days=1)).isoformat(),
        "gio": "19:00",
        "so_luong_khach": 4,
        "ghi_chu": None,
    }
    data.update(overrides)
    return data


def test_valid_payload_has_no_errors():
    assert validate_reservation(payload(), now=NOW) == []


@pytest.mark.parametrize("days", [0, 1, 15, 30])
@pytest.mark.parametrize("slot", ["10:00", "15:45", "21:30"])
def test_whole_booking_window_is_accepted(days, slot):
    booking_date = TODAY + timedelta(days=days)
    errors = validate_reservation(payload(ngay=booking_date.isoformat(), gio=slot), now=datetime(2025, 1, 15, 9, 0))
    assert errors == []


def test_past_date_always_flagged():
    errors = validate_reservation(
        payload(ngay=(TODAY - timedelta(days=1)).isoformat(), sdt="12", ten_khach=""),
        now=NOW,
    )
    assert "Cannot book a table for a past date" in errors


def test_date_beyond_window():
    errors = validate_reservation(payload(ngay=(TODAY + timedelta(days=31)).isoformat()), now=NOW)
    assert errors == ["Reservations can only be made up to 30 days in advance"]


@pytest.mark.parametrize("phone", ["091234567", "091234567890", "09123abc78", "+84912345678", "   "])
def test_bad_phone_flagged(phone):
    errors = validate_reservation(payload(sdt=phone), now=NOW)
    assert any("Phone number" in e for e in errors)


def test_phone_whitespace_is_ignored():
    assert validate_reservation(payload(sdt="091 234 5678"), now=NOW) == []
    assert normalize_phone(" 091 234\t5678 ") == "0912345678"


@pytest.mark.parametrize("slot", ["09:59", "21:31", "22:00", "00:00"])
def test_time_outside_opening_hours(slot):
    errors = validate_reservation(payload(gio=slot), now=NOW)
    assert "Reservation time must be between 10:00 and 21:30" in errors


def test_today_slot_must_be_in_the_future():
    errors = validate_reservation(payload(ngay=TODAY.isoformat(), gio="14:00"), now=NOW)
    assert "Cannot book a time slot that has already passed" in errors

    assert validate_reservation(payload(ngay=TODAY.isoformat(), gio="15:00"), now=NOW) == []


def test_malformed_date_and_time():
    errors = validate_reservation(payload(ngay="15/01/2025", gio="7pm"), now=NOW)
    assert "Reservation date must be formatted as YYYY-MM-DD" in errors
    assert "Reservation time must be formatted as HH:MM" in errors


def test_missing_fields_reported_in_field_order():
    errors = validate_reservation({}, now=NOW)
    assert errors[0].startswith("Guest name is required")
    assert errors[1] == "Phone number is required"
    assert "Reservation date is required" in errors
    assert "Reservation time is required" in errors
    assert "Number of guests is required" in errors


@pytest.mark.parametrize("guests", [0, 21, "abc", 2.5, -1])
def test_party_size_range(guests):
    errors = validate_reservation(payload(so_luong_khach=guests), now=NOW)
    assert "Number of guests must be between 1 and 20" in errors


def test_party_size_string_is_coerced():
    assert validate_reservation(payload(so_luong_khach="6"), now=NOW) == []


def test_name_rules():
    assert "Guest name may only contain letters and spaces" in validate_reservation(
        payload(ten_khach="Nguyen 123"), now=NOW
    )
    assert any("at least 2" in e for e in validate_reservation(payload(ten_khach=" A "), now=NOW))
    assert "Guest name must not exceed 100 characters" in validate_reservation(
        payload(ten_khach="A" * 101), now=NOW
    )


def test_decomposed_vietnamese_name_is_accepted():
    decomposed = unicodedata.normalize("NFD", "Nguyễn Văn An")
    assert decomposed != "Nguyễn Văn An"
    assert validate_reservation(payload(ten_khach=decomposed), now=NOW) == []
    assert ReservationData.from_payload(payload(ten_khach=decomposed)).ten_khach == "Nguyễn Văn An"


def test_optional_email_and_note_limits():
    assert "Email address is not valid" in validate_reservation(payload(email="not-an-email"), now=NOW)
    assert validate_reservation(payload(email=""), now=NOW) == []
    assert "Note must not exceed 500 characters" in validate_reservation(payload(ghi_chu="x" * 501), now=NOW)


def test_custom_rules():
    rules = BookingRules(opening_time=time(17, 0), last_booking_time=time(20, 0), window_days=7, max_party_size=8)
    errors = validate_reservation(payload(gio="16:30", so_luong_khach=9), now=NOW, rules=rules)
    assert "Reservation time must be between 17:00 and 20:00" in errors
    assert "Number of guests must be between 1 and 8" in errors


def test_parse_time_accepts_seconds():
    assert parse_time("19:00:30") == time(19, 0, 30)
    assert parse_time("24:00") is None


def test_reservation_data_normalizes_values():
    data = ReservationData.from_payload(payload(sdt="0912 345 678", gio="19:00:45", email="  ", ghi_chu=" hi "))
    assert data.sdt == "0912345678"
    assert data.gio == time(19, 0)
    assert data.ngay == date(2025, 1, 16)
    assert data.email is None
    assert data.ghi_chu == "hi"
