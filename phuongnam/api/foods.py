"""
Menu Item Endpoints (/api/foods)
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Path, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from phuongnam.api.deps import get_service, page_params, query_params
from phuongnam.core.responses import success_response
from phuongnam.database import get_db
from phuongnam.schemas import FoodCreate, FoodUpdate, StockUpdate
from phuongnam.services.foods import FoodService
from phuongnam.services.pagination import PageParams

router = APIRouter(prefix="/api/foods", tags=["Foods"])

food_service = get_service("foods")


@router.head("", summary="Count Foods")
async def count_foods(
    params: dict[str, str] = Depends(query_params),
    db: AsyncSession = Depends(get_db),
    service: FoodService = Depends(food_service),
) -> Response:
    total = await service.count(db, params)
    return Response(headers={"X-Total-Count": str(total)})


@router.get("", summary="List Foods")
async def list_foods(
    params: dict[str, str] = Depends(query_params),
    window: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    service: FoodService = Depends(food_service),
) -> dict[str, Any]:
    """
    Filters: ``search``, ``category``, ``minPrice``, ``maxPrice``,
    ``available`` (true/false). Sort with ``sort`` and ``order``.
    """
    items, pagination, filters = await service.list_page(db, params, window)
    return success_response(
        data=items,
        message=f"Found {pagination.total} dishes",
        pagination=pagination.to_dict(),
        filters=filters,
    )


@router.get("/search", summary="Search Foods")
async def search_foods(
    q: Optional[str] = Query(None, description="At least 2 characters"),
    params: dict[str, str] = Depends(query_params),
    window: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    service: FoodService = Depends(food_service),
) -> dict[str, Any]:
    items, pagination, filters = await service.search(db, q, params, window)
    return success_response(
        data=items,
        message=f"Found {pagination.total} dishes matching '{q.strip()}'",
        pagination=pagination.to_dict(),
        filters=filters,
    )


@router.get("/popular", summary="Popular Foods")
async def popular_foods(
    limit: int = Query(10, ge=1),
    db: AsyncSession = Depends(get_db),
    service: FoodService = Depends(food_service),
) -> dict[str, Any]:
    items = await service.popular(db, limit)
    return success_response(data=items, message=f"Top {len(items)} popular dishes")


@router.get("/stats", summary="Menu Statistics")
async def food_stats(
    db: AsyncSession = Depends(get_db),
    service: FoodService = Depends(food_service),
) -> dict[str, Any]:
    return success_response(data=await service.stats(db))


@router.get("/{food_id}", summary="Get Food")
async def get_food(
    food_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    service: FoodService = Depends(food_service),
) -> dict[str, Any]:
    return success_response(data=await service.get(db, food_id))


@router.post("", status_code=201, summary="Create Food")
async def create_food(
    body: FoodCreate,
    db: AsyncSession = Depends(get_db),
    service: FoodService = Depends(food_service),
) -> dict[str, Any]:
    item = await service.create(db, body.model_dump())
    return success_response(data=item, message=f"Dish '{item['ten_mon']}' created")


@router.put("/{food_id}", summary="Replace Food")
async def replace_food(
    body: FoodCreate,
    food_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    service: FoodService = Depends(food_service),
) -> dict[str, Any]:
    item = await service.update(db, food_id, body.model_dump())
    return success_response(data=item, message=f"Dish '{item['ten_mon']}' updated")


@router.patch("/{food_id}/stock", summary="Update Stock")
async def update_stock(
    body: StockUpdate,
    food_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    service: FoodService = Depends(food_service),
) -> dict[str, Any]:
    result = await service.update_stock(db, food_id, body.so_luong)
    return success_response(
        data=result,
        message=f"Stock updated from {result['old_stock']} to {result['new_stock']}",
    )


@router.patch("/{food_id}", summary="Partially Update Food")
async def patch_food(
    body: FoodUpdate,
    food_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    service: FoodService = Depends(food_service),
) -> dict[str, Any]:
    item = await service.update(db, food_id, body.model_dump(exclude_unset=True))
    return success_response(data=item, message=f"Dish '{item['ten_mon']}' updated")


@router.delete("/{food_id}", summary="Delete Food")
async def delete_food(
    food_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    service: FoodService = Depends(food_service),
) -> dict[str, Any]:
    deleted = await service.delete(db, food_id)
    return success_response(data=deleted, message=f"Dish '{deleted['ten_mon']}' deleted")
