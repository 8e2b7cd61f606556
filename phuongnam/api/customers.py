"""
Customer & Authentication Endpoints (/api/customers)

register/login/refresh are public; everything else needs
``Authorization: Bearer <access token>``.
"""

from typing import Any

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from phuongnam.api.deps import current_customer, get_service, page_params, query_params
from phuongnam.core.responses import success_response
from phuongnam.database import get_db
from phuongnam.models import Customer
from phuongnam.schemas import LoginRequest, ProfileUpdate, RefreshRequest, RegisterRequest
from phuongnam.services.customers import CustomerService, customer_to_dict
from phuongnam.services.pagination import PageParams

router = APIRouter(prefix="/api/customers", tags=["Customers"])

customer_service = get_service("customers")


@router.post("/register", status_code=201, summary="Register")
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    service: CustomerService = Depends(customer_service),
) -> dict[str, Any]:
    session = await service.register(db, body.model_dump())
    return success_response(data=session, message="Registration successful")


@router.post("/login", summary="Login")
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
    service: CustomerService = Depends(customer_service),
) -> dict[str, Any]:
    session = await service.login(db, body.email, body.password)
    return success_response(data=session, message="Login successful")


@router.post("/refresh", summary="Refresh Access Token")
async def refresh(
    body: RefreshRequest,
    db: AsyncSession = Depends(get_db),
    service: CustomerService = Depends(customer_service),
) -> dict[str, Any]:
    tokens = await service.refresh(db, body.refreshToken)
    return success_response(data=tokens, message="Token refreshed")


@router.get("/profile", summary="Get Own Profile")
async def get_profile(customer: Customer = Depends(current_customer)) -> dict[str, Any]:
    return success_response(data=customer_to_dict(customer))


@router.put("/profile", summary="Update Own Profile")
async def update_profile(
    body: ProfileUpdate,
    customer: Customer = Depends(current_customer),
    db: AsyncSession = Depends(get_db),
    service: CustomerService = Depends(customer_service),
) -> dict[str, Any]:
    profile = await service.update_profile(db, customer, body.model_dump(exclude_unset=True))
    return success_response(data=profile, message="Profile updated")


@router.delete("/profile", summary="Delete Own Account")
async def delete_profile(
    customer: Customer = Depends(current_customer),
    db: AsyncSession = Depends(get_db),
    service: CustomerService = Depends(customer_service),
) -> dict[str, Any]:
    deleted = await service.delete(db, customer.id)
    return success_response(data=deleted, message="Account deleted")


@router.get("", summary="List Customers")
async def list_customers(
    params: dict[str, str] = Depends(query_params),
    window: PageParams = Depends(page_params),
    _: Customer = Depends(current_customer),
    db: AsyncSession = Depends(get_db),
    service: CustomerService = Depends(customer_service),
) -> dict[str, Any]:
    items, pagination = await service.list_page(db, params, window)
    return success_response(
        data=items,
        message=f"Found {pagination.total} customers",
        pagination=pagination.to_dict(),
    )


@router.get("/{customer_id}", summary="Get Customer")
async def get_customer(
    customer_id: int = Path(..., ge=1),
    _: Customer = Depends(current_customer),
    db: AsyncSession = Depends(get_db),
    service: CustomerService = Depends(customer_service),
) -> dict[str, Any]:
    return success_response(data=await service.get(db, customer_id))


@router.delete("/{customer_id}", summary="Delete Customer")
async def delete_customer(
    customer_id: int = Path(..., ge=1),
    _: Customer = Depends(current_customer),
    db: AsyncSession = Depends(get_db),
    service: CustomerService = Depends(customer_service),
) -> dict[str, Any]:
    deleted = await service.delete(db, customer_id)
    return success_response(data=deleted, message="Customer deleted")
