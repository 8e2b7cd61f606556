"""
Query / Filter Builder

Translates the recognized list-filter query parameters of each resource
into SQLAlchemy predicates. The same QueryFilters object is applied to the
COUNT query and to the paged data query, so the two never drift apart.

Rules:
    - Only whitelisted keys are read; anything else in the query string
      is ignored.
    - Values are always bound parameters, never spliced into SQL text.
    - Free-text search escapes LIKE wildcards (%, _) and the escape
      character itself, so user input only ever matches literally.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Mapping, Optional

from sqlalchemy import Select, or_
from sqlalchemy.sql.elements import ColumnElement

from phuongnam.core.exceptions import ValidationError
from phuongnam.models import Category, Customer, Food, Reservation, ReservationStatus

LIKE_ESCAPE = "\\"

# Upper sentinel for maxPrice; anything at or above it means "no bound"
PRICE_CEILING = 999_999_999


def escape_like(value: str) -> str:
    """Neutralize LIKE metacharacters so the value matches literally."""
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def contains_pattern(value: str) -> str:
    return f"%{escape_like(value)}%"


def text_search(term: str, *columns: Any) -> ColumnElement[bool]:
    """Case-insensitive substring match of ``term`` against any of ``columns``."""
    pattern = contains_pattern(term)
    return or_(*(column.ilike(pattern, escape=LIKE_ESCAPE) for column in columns))


def _clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _to_int(value: Any) -> Optional[int]:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def _to_float(value: Any) -> Optional[float]:
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        return None
    # nan/inf are not prices
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return number


def _to_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    text = _clean_text(value)
    if text is None:
        return None
    lowered = text.lower()
    if lowered in ("true", "1", "yes"):
        return True
    if lowered in ("false", "0", "no"):
        return False
    return None


@dataclass
class QueryFilters:
    """
    Predicates built from request filters.

    Attributes:
        conditions: SQLAlchemy boolean expressions, ANDed together
        applied: The recognized filters and their parsed values, echoed
            back to clients that want to show the active filters
    """
    conditions: list[ColumnElement[bool]] = field(default_factory=list)
    applied: dict[str, Any] = field(default_factory=dict)

    def add(self, key: str, value: Any, condition: ColumnElement[bool]) -> None:
        self.applied[key] = value
        self.conditions.append(condition)

    def apply(self, statement: Select) -> Select:
        """Attach the predicates to a data or count statement."""
        if not self.conditions:
            return statement
        return statement.where(*self.conditions)


@dataclass(frozen=True)
class SortSpec:
    """Whitelisted ``sort``/``order`` query parameters for one resource."""
    fields: Mapping[str, Any]
    default: str
    default_order: str = "desc"
    tiebreak: Any = None

    def order_by(self, params: Mapping[str, Any]) -> list[Any]:
        key = params.get("sort")
        if key not in self.fields:
            key = self.default

        order = str(params.get("order") or "").lower()
        if order not in ("asc", "desc"):
            order = self.default_order

        column = self.fields[key]
        clauses = [column.asc() if order == "asc" else column.desc()]
        if self.tiebreak is not None:
            clauses.append(self.tiebreak.asc())
        return clauses


# =============================================================================
# FOODS
# =============================================================================

FOOD_SORT = SortSpec(
    fields={
        "ten_mon": Food.ten_mon,
        "gia": Food.gia,
        "so_luong": Food.so_luong,
        "created_at": Food.created_at,
        "updated_at": Food.updated_at,
    },
    default="ten_mon",
    default_order="asc",
    tiebreak=Food.id_mon,
)


def build_food_filters(params: Mapping[str, Any]) -> QueryFilters:
    """
    Recognized keys: search, category, minPrice, maxPrice, available.

    ``search`` also matches the category name, so the statement it is
    applied to must outer-join Category.
    """
    filters = QueryFilters()

    search = _clean_text(params.get("search"))
    if search:
        filters.add("search", search, text_search(search, Food.ten_mon, Food.mo_ta, Category.ten_loai))

    category = _to_int(params.get("category"))
    if category is not None:
        filters.add("category", category, Food.id_loai == category)

    min_price = _to_float(params.get("minPrice"))
    if min_price is not None and min_price > 0:
        filters.add("minPrice", min_price, Food.gia >= min_price)

    max_price = _to_float(params.get("maxPrice"))
    if max_price is not None and 0 < max_price < PRICE_CEILING:
        filters.add("maxPrice", max_price, Food.gia <= max_price)

    available = _to_bool(params.get("available"))
    if available is True:
        filters.add("available", True, Food.so_luong > 0)
    elif available is False:
        filters.add("available", False, Food.so_luong == 0)

    return filters


# =============================================================================
# CATEGORIES
# =============================================================================

CATEGORY_SORT = SortSpec(
    fields={"ten_loai": Category.ten_loai, "created_at": Category.created_at},
    default="ten_loai",
    default_order="asc",
    tiebreak=Category.id_loai,
)


def build_category_filters(params: Mapping[str, Any]) -> QueryFilters:
    """Recognized keys: search."""
    filters = QueryFilters()
    search = _clean_text(params.get("search"))
    if search:
        filters.add("search", search, text_search(search, Category.ten_loai, Category.mo_ta))
    return filters


# =============================================================================
# RESERVATIONS
# =============================================================================

RESERVATION_SORT = SortSpec(
    fields={
        "created_at": Reservation.created_at,
        "ngay": Reservation.ngay,
        "gio": Reservation.gio,
        "ten_khach": Reservation.ten_khach,
    },
    default="created_at",
    tiebreak=Reservation.id_datban,
)


def build_reservation_filters(params: Mapping[str, Any]) -> QueryFilters:
    """
    Recognized keys: status, date, phone.

    ``status=all`` or an unknown status means no status constraint.
    ``phone`` is a substring search over guest name, phone and email.

    Raises:
        ValidationError: If ``date`` is present but not an ISO date
    """
    filters = QueryFilters()

    status = _clean_text(params.get("status"))
    if status and status in {s.value for s in ReservationStatus}:
        filters.add("status", status, Reservation.trang_thai == ReservationStatus(status))

    raw_date = _clean_text(params.get("date"))
    if raw_date:
        try:
            day = date.fromisoformat(raw_date)
        except ValueError:
            raise ValidationError("Invalid date filter", errors=["date must be formatted as YYYY-MM-DD"])
        filters.add("date", day.isoformat(), Reservation.ngay == day)

    phone = _clean_text(params.get("phone"))
    if phone:
        filters.add(
            "phone",
            phone,
            text_search(phone, Reservation.ten_khach, Reservation.sdt, Reservation.email),
        )

    return filters


# =============================================================================
# CUSTOMERS
# =============================================================================

CUSTOMER_SORT = SortSpec(
    fields={
        "full_name": Customer.full_name,
        "email": Customer.email,
        "created_at": Customer.created_at,
    },
    default="created_at",
    tiebreak=Customer.id,
)


def build_customer_filters(params: Mapping[str, Any]) -> QueryFilters:
    """Recognized keys: search."""
    filters = QueryFilters()
    search = _clean_text(params.get("search"))
    if search:
        filters.add("search", search, text_search(search, Customer.full_name, Customer.email, Customer.phone))
    return filters
