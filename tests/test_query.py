import pytest
from sqlalchemy import func, select

from phuongnam.core.exceptions import ValidationError
from phuongnam.models import Food, Reservation
from phuongnam.services.query import (
    FOOD_SORT,
    RESERVATION_SORT,
    build_food_filters,
    build_reservation_filters,
    contains_pattern,
    escape_like,
)


def compiled_params(filters, model):
    return filters.apply(select(model)).compile().params


def test_like_wildcards_are_escaped():
    assert escape_like("50%") == "50\\%"
    assert escape_like("a_b") == "a\\_b"
    assert escape_like("c:\\temp") == "c:\\\\temp"
    assert contains_pattern("50%") == "%50\\%%"


def test_search_value_is_bound_not_inlined():
    filters = build_food_filters({"search": "50%' OR 1=1 --"})
    statement = filters.apply(select(Food))
    assert "OR 1=1" not in str(statement)
    assert "%50\\%' OR 1=1 --%" in statement.compile().params.values()


def test_unknown_keys_are_ignored():
    filters = build_food_filters({"drop": "table", "limit": "5", "sort": "gia"})
    assert filters.conditions == []
    assert filters.applied == {}


def test_price_bounds():
    filters = build_food_filters({"minPrice": "50000", "maxPrice": "150000"})
    assert filters.applied == {"minPrice": 50000.0, "maxPrice": 150000.0}

    ignored = build_food_filters({"minPrice": "0", "maxPrice": "999999999"})
    assert ignored.applied == {}

    garbage = build_food_filters({"minPrice": "cheap", "maxPrice": "nan"})
    assert garbage.applied == {}


@pytest.mark.parametrize("raw, expected", [("true", True), ("false", False), ("1", True), ("0", False)])
def test_available_flag(raw, expected):
    assert build_food_filters({"available": raw}).applied == {"available": expected}


def test_available_other_values_mean_no_constraint():
    assert build_food_filters({"available": "maybe"}).applied == {}


def test_reservation_filters():
    filters = build_reservation_filters({"status": "confirmed", "date": "2025-01-16", "phone": "0912"})
    assert filters.applied == {"status": "confirmed", "date": "2025-01-16", "phone": "0912"}
    assert len(filters.conditions) == 3


@pytest.mark.parametrize("status", ["all", "cho_xac_nhan", ""])
def test_unknown_status_is_no_constraint(status):
    assert build_reservation_filters({"status": status}).applied == {}


def test_invalid_date_filter_rejected():
    with pytest.raises(ValidationError):
        build_reservation_filters({"date": "16/01/2025"})


def test_same_filters_serve_count_and_data_queries():
    filters = build_reservation_filters({"status": "pending", "phone": "0912"})
    data_params = compiled_params(filters, Reservation)
    count_params = filters.apply(select(func.count(Reservation.id_datban))).compile().params
    assert data_params == count_params


def test_sort_whitelist():
    (clause, tiebreak) = FOOD_SORT.order_by({"sort": "gia", "order": "desc"})
    assert "gia DESC" in str(clause)

    (default, _) = FOOD_SORT.order_by({"sort": "password", "order": "sideways"})
    assert "ten_mon ASC" in str(default)

    (newest, _) = RESERVATION_SORT.order_by({})
    assert "created_at DESC" in str(newest)
