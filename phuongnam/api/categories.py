"""
Category Endpoints (/api/categories)
"""

from typing import Any

from fastapi import APIRouter, Depends, Path, Response
from sqlalchemy.ext.asyncio import AsyncSession

from phuongnam.api.deps import get_service, page_params, query_params
from phuongnam.core.responses import success_response
from phuongnam.database import get_db
from phuongnam.schemas import CategoryCreate, CategoryUpdate
from phuongnam.services.categories import CategoryService
from phuongnam.services.pagination import PageParams

router = APIRouter(prefix="/api/categories", tags=["Categories"])

category_service = get_service("categories")


@router.head("", summary="Count Categories")
async def count_categories(
    params: dict[str, str] = Depends(query_params),
    db: AsyncSession = Depends(get_db),
    service: CategoryService = Depends(category_service),
) -> Response:
    total = await service.count(db, params)
    return Response(headers={"X-Total-Count": str(total)})


@router.get("", summary="List Categories")
async def list_categories(
    params: dict[str, str] = Depends(query_params),
    window: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    service: CategoryService = Depends(category_service),
) -> dict[str, Any]:
    """Each category carries ``so_luong_mon`` (items) and ``so_luong_con_hang`` (in stock)."""
    items, pagination = await service.list_page(db, params, window)
    return success_response(
        data=items,
        message=f"Found {pagination.total} categories",
        pagination=pagination.to_dict(),
    )


@router.get("/{category_id}", summary="Get Category")
async def get_category(
    category_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    service: CategoryService = Depends(category_service),
) -> dict[str, Any]:
    return success_response(data=await service.get(db, category_id))


@router.get("/{category_id}/foods", summary="List Foods in Category")
async def list_category_foods(
    category_id: int = Path(..., ge=1),
    params: dict[str, str] = Depends(query_params),
    window: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    service: CategoryService = Depends(category_service),
) -> dict[str, Any]:
    category, foods, pagination = await service.foods(db, category_id, params, window)
    return success_response(
        data=foods,
        message=f"Found {pagination.total} dishes in '{category['ten_loai']}'",
        pagination=pagination.to_dict(),
        category=category,
    )


@router.post("", status_code=201, summary="Create Category")
async def create_category(
    body: CategoryCreate,
    db: AsyncSession = Depends(get_db),
    service: CategoryService = Depends(category_service),
) -> dict[str, Any]:
    category = await service.create(db, body.model_dump())
    return success_response(data=category, message=f"Category '{category['ten_loai']}' created")


@router.put("/{category_id}", summary="Update Category")
async def update_category(
    body: CategoryUpdate,
    category_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    service: CategoryService = Depends(category_service),
) -> dict[str, Any]:
    category = await service.update(db, category_id, body.model_dump(exclude_unset=True))
    return success_response(data=category, message=f"Category '{category['ten_loai']}' updated")


@router.delete("/{category_id}", summary="Delete Category")
async def delete_category(
    category_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    service: CategoryService = Depends(category_service),
) -> dict[str, Any]:
    """Rejected with REFERENCED_ROW while any dish still belongs to the category."""
    deleted = await service.delete(db, category_id)
    return success_response(data=deleted, message=f"Category '{deleted['ten_loai']}' deleted")
