"""
Reservation Endpoints (/api/datban)

Public table-booking API. Literal sub-paths (/availability, /bulk) are
declared before /{reservation_id} so they are never parsed as ids.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Path, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from phuongnam.api.deps import get_service, page_params, query_params
from phuongnam.core.responses import success_response
from phuongnam.database import get_db
from phuongnam.models import Reservation
from phuongnam.schemas import (
    BulkDeleteRequest,
    ReservationCreate,
    ReservationOut,
    ReservationStatusUpdate,
    ReservationUpdate,
)
from phuongnam.services.pagination import PageParams
from phuongnam.services.query import build_reservation_filters
from phuongnam.services.reservations import ReservationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/datban", tags=["Reservations"])

reservation_service = get_service("reservations")


def serialize(reservation: Reservation) -> dict[str, Any]:
    return ReservationOut.model_validate(reservation).model_dump(mode="json")


@router.post("", status_code=201, summary="Create Reservation")
async def create_reservation(
    body: ReservationCreate,
    db: AsyncSession = Depends(get_db),
    service: ReservationService = Depends(reservation_service),
) -> dict[str, Any]:
    """
    Book a table.

    The booking starts as ``pending``. A second active booking for the same
    phone number, date and time is rejected with RESERVATION_CONFLICT.
    """
    reservation = await service.create(db, body.model_dump())
    return success_response(data=serialize(reservation), message="Reservation created successfully")


@router.head("", summary="Count Reservations")
async def count_reservations(
    params: dict[str, str] = Depends(query_params),
    db: AsyncSession = Depends(get_db),
    service: ReservationService = Depends(reservation_service),
) -> Response:
    total = await service.count(db, build_reservation_filters(params))
    return Response(headers={"X-Total-Count": str(total)})


@router.get("", summary="List Reservations")
async def list_reservations(
    params: dict[str, str] = Depends(query_params),
    window: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    service: ReservationService = Depends(reservation_service),
) -> dict[str, Any]:
    """Filter by ``status``, ``date`` and ``phone``; sort with ``sort``/``order``."""
    rows, pagination, filters = await service.list_page(db, params, window)
    return success_response(
        data=[serialize(r) for r in rows],
        message=f"Found {pagination.total} reservations",
        pagination=pagination.to_dict(),
        filters=filters.applied,
    )


@router.get("/availability", summary="Check Table Availability")
async def check_availability(
    date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    time: Optional[str] = Query(None, description="HH:MM"),
    guests: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    service: ReservationService = Depends(reservation_service),
) -> dict[str, Any]:
    data = await service.availability(db, date, time, guests)
    return success_response(data=data, message="Availability checked")


@router.delete("/bulk", summary="Delete Multiple Reservations")
async def bulk_delete_reservations(
    body: BulkDeleteRequest,
    db: AsyncSession = Depends(get_db),
    service: ReservationService = Depends(reservation_service),
) -> dict[str, Any]:
    result = await service.bulk_delete(db, body.ids)
    return success_response(data=result, message=f"Deleted {result['deletedCount']} reservations")


@router.get("/{reservation_id}", summary="Get Reservation")
async def get_reservation(
    reservation_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    service: ReservationService = Depends(reservation_service),
) -> dict[str, Any]:
    reservation = await service.get(db, reservation_id)
    return success_response(data=serialize(reservation))


@router.put("/{reservation_id}", summary="Replace Reservation")
async def replace_reservation(
    body: ReservationUpdate,
    reservation_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    service: ReservationService = Depends(reservation_service),
) -> dict[str, Any]:
    """Full update; every booking field is validated again."""
    payload = body.model_dump(exclude={"trang_thai"})
    reservation = await service.replace(db, reservation_id, payload, status=body.trang_thai)
    return success_response(data=serialize(reservation), message="Reservation updated successfully")


@router.patch("/{reservation_id}/status", summary="Update Reservation Status")
async def update_reservation_status(
    body: ReservationStatusUpdate,
    reservation_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    service: ReservationService = Depends(reservation_service),
) -> dict[str, Any]:
    """pending -> confirmed | cancelled, confirmed -> cancelled. Anything else is 409."""
    reservation = await service.set_status(db, reservation_id, body.trang_thai)
    return success_response(
        data=serialize(reservation),
        message=f"Reservation status set to {reservation.trang_thai.value}",
    )


@router.patch("/{reservation_id}", summary="Partially Update Reservation")
async def patch_reservation(
    body: ReservationUpdate,
    reservation_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    service: ReservationService = Depends(reservation_service),
) -> dict[str, Any]:
    """Only the fields sent change; the merged booking must still be valid."""
    reservation = await service.patch(db, reservation_id, body.model_dump(exclude_unset=True))
    return success_response(data=serialize(reservation), message="Reservation updated successfully")


@router.delete("/{reservation_id}", summary="Delete Reservation")
async def delete_reservation(
    reservation_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    service: ReservationService = Depends(reservation_service),
) -> dict[str, Any]:
    reservation = await service.delete(db, reservation_id)
    return success_response(data=serialize(reservation), message="Reservation deleted successfully")
