"""
Pydantic Schemas for Request/Response Validation

Request models are the typed boundary: a body that does not decode into
one of them is rejected with a 400 error envelope before it reaches any
service. Reservation bodies are deliberately loose (strings) because the
booking rules, and their error messages, live in the reservation validator.
"""

import re
from datetime import date, datetime, time
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from phuongnam.models import ReservationStatus


FOOD_NAME_PATTERN = re.compile(r"^(?:[^\W_]|[\s\-()])+$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MAX_PRICE = 10_000_000


# =============================================================================
# RESERVATION REQUESTS
# =============================================================================

class ReservationCreate(BaseModel):
    """Body of POST /api/datban."""
    model_config = ConfigDict(extra="forbid")

    ten_khach: Optional[str] = Field(None, examples=["Nguyen Van A"])
    sdt: Optional[str] = Field(None, examples=["0912345678"])
    email: Optional[str] = Field(None, examples=["nguyenvana@example.com"])
    ngay: Optional[str] = Field(None, examples=["2025-01-15"])
    gio: Optional[str] = Field(None, examples=["19:00"])
    so_luong_khach: Optional[Union[int, str]] = Field(None, examples=[4])
    ghi_chu: Optional[str] = Field(None, examples=["Window seat please"])


class ReservationUpdate(ReservationCreate):
    """Body of PUT/PATCH /api/datban/{id}; PATCH merges only the given fields."""
    trang_thai: Optional[ReservationStatus] = Field(None, examples=["confirmed"])


class ReservationStatusUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    trang_thai: ReservationStatus = Field(..., examples=["confirmed"])


class BulkDeleteRequest(BaseModel):
    ids: List[Union[int, str]] = Field(..., min_length=1, examples=[[1, 2, 3]])


# =============================================================================
# FOOD / CATEGORY REQUESTS
# =============================================================================

def _check_food_name(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not 2 <= len(v) <= 255:
        raise ValueError("Food name must be 2-255 characters")
    if not FOOD_NAME_PATTERN.match(v):
        raise ValueError("Food name may only contain letters, digits, spaces, hyphens and parentheses")
    return v


def _strip_optional(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    return v.strip() or None


class FoodCreate(BaseModel):
    """Request schema for creating a menu item."""
    model_config = ConfigDict(extra="forbid")

    id_loai: int = Field(..., ge=1, examples=[1])
    ten_mon: str = Field(..., examples=["Banh Xeo Mien Tay"])
    mo_ta: Optional[str] = Field(None, max_length=1000)
    gia: float = Field(..., ge=0, le=MAX_PRICE, examples=[95000])
    so_luong: int = Field(default=0, ge=0, examples=[30])
    hinh_anh: Optional[str] = Field(None, max_length=255, examples=["banh-xeo.jpg"])

    _name = field_validator("ten_mon")(_check_food_name)
    _strip = field_validator("mo_ta", "hinh_anh")(_strip_optional)


class FoodUpdate(BaseModel):
    """Partial update; only the fields sent are changed."""
    model_config = ConfigDict(extra="forbid")

    id_loai: Optional[int] = Field(None, ge=1)
    ten_mon: Optional[str] = None
    mo_ta: Optional[str] = Field(None, max_length=1000)
    gia: Optional[float] = Field(None, ge=0, le=MAX_PRICE)
    so_luong: Optional[int] = Field(None, ge=0)
    hinh_anh: Optional[str] = Field(None, max_length=255)

    _name = field_validator("ten_mon")(_check_food_name)
    _strip = field_validator("mo_ta", "hinh_anh")(_strip_optional)


class StockUpdate(BaseModel):
    so_luong: int = Field(..., ge=0, examples=[25])


class CategoryCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    ten_loai: str = Field(..., examples=["Mon Chinh"])
    mo_ta: Optional[str] = Field(None, max_length=500)

    @field_validator("ten_loai")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not 2 <= len(v) <= 100:
            raise ValueError("Category name must be 2-100 characters")
        return v

    _strip = field_validator("mo_ta")(_strip_optional)


class CategoryUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    ten_loai: Optional[str] = None
    mo_ta: Optional[str] = Field(None, max_length=500)

    @field_validator("ten_loai")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not 2 <= len(v) <= 100:
            raise ValueError("Category name must be 2-100 characters")
        return v

    _strip = field_validator("mo_ta")(_strip_optional)


# =============================================================================
# CUSTOMER / AUTH REQUESTS
# =============================================================================

def _check_email(v: str) -> str:
    v = v.strip().lower()
    if not EMAIL_PATTERN.match(v):
        raise ValueError("Invalid email format")
    return v


def _check_phone(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    cleaned = re.sub(r"[^\d]", "", v)
    if not 10 <= len(cleaned) <= 11:
        raise ValueError("Phone number must contain 10-11 digits")
    return cleaned


class RegisterRequest(BaseModel):
    full_name: str = Field(..., min_length=2, max_length=255, examples=["Tran Thi B"])
    email: str = Field(..., max_length=255, examples=["tranthib@example.com"])
    phone: str = Field(..., examples=["0987654321"])
    password: str = Field(..., min_length=6, max_length=128)

    _email = field_validator("email")(_check_email)
    _phone = field_validator("phone")(_check_phone)


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class RefreshRequest(BaseModel):
    refreshToken: str


class ProfileUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    full_name: Optional[str] = Field(None, min_length=2, max_length=255)
    phone: Optional[str] = None

    _phone = field_validator("phone")(_check_phone)


# =============================================================================
# CHAT REQUESTS
# =============================================================================

class ChatMessage(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str = Field(..., min_length=1, max_length=4000)


class ChatOptions(BaseModel):
    useGroq: bool = False
    temperature: float = Field(default=0.7, ge=0, le=2)
    maxTokens: int = Field(default=1000, ge=1, le=4096)


class ChatRequest(BaseModel):
    messages: List[ChatMessage] = Field(..., min_length=1)
    options: ChatOptions = Field(default_factory=ChatOptions)


class FoodDescriptionRequest(BaseModel):
    foodName: str = Field(..., min_length=1, max_length=255)
    ingredients: Optional[str] = Field(None, max_length=1000)
    category: Optional[str] = Field(None, max_length=100)


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class ReservationOut(BaseModel):
    """A reservation row as returned by the API."""
    model_config = ConfigDict(from_attributes=True)

    id_datban: int
    ten_khach: str
    sdt: str
    email: Optional[str]
    ngay: date
    gio: time
    so_luong_khach: int
    ghi_chu: Optional[str]
    trang_thai: ReservationStatus
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    @field_serializer("gio")
    def serialize_time(self, value: time) -> str:
        return value.strftime("%H:%M")


class CategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id_loai: int
    ten_loai: str
    mo_ta: Optional[str]
    created_at: Optional[datetime]
    so_luong_mon: int = 0
    so_luong_con_hang: int = 0


class FoodOut(BaseModel):
    """A menu item with display fields derived from price and stock."""
    id_mon: int
    id_loai: int
    ten_loai: Optional[str]
    ten_mon: str
    mo_ta: Optional[str]
    gia: float
    gia_formatted: str
    hinh_anh: Optional[str]
    hinh_anh_url: Optional[str]
    so_luong: int
    tinh_trang: str
    is_available: bool
    created_at: Optional[datetime]
    updated_at: Optional[datetime]


class CustomerOut(BaseModel):
    """Customer profile; the password hash is never part of it."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    full_name: str
    email: str
    phone: str
    created_at: Optional[datetime]
