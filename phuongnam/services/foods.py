"""
Food (menu item) Service

CRUD, search and reporting over mon_an. Every item leaves this module as
a display dict: the stored columns plus the category name, a formatted
price, an absolute image URL and a stock status.
"""

import logging
from typing import Any, Mapping, Optional

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import contains_eager

from phuongnam.core.config import Settings
from phuongnam.core.exceptions import ConflictError, NotFoundError, ValidationError
from phuongnam.models import Category, Food
from phuongnam.schemas import FoodOut
from phuongnam.services.pagination import PageParams, Pagination
from phuongnam.services.query import FOOD_SORT, build_food_filters

logger = logging.getLogger(__name__)

IN_STOCK = "Còn hàng"
OUT_OF_STOCK = "Hết hàng"

SEARCH_MIN_LENGTH = 2
POPULAR_MAX = 50

REQUIRED_FIELDS = ("id_loai", "ten_mon", "gia", "so_luong")


# =============================================================================
# FORMATTING
# =============================================================================

def format_price(price: Optional[float]) -> str:
    """Vietnamese currency display: 95000 -> '95.000đ'."""
    if price is None or price != price:
        return "0đ"
    rounded = round(float(price), 3)
    if rounded.is_integer():
        text = f"{int(rounded):,}".replace(",", ".")
    else:
        whole, _, fraction = f"{rounded:,.3f}".rstrip("0").partition(".")
        text = whole.replace(",", ".") + "," + fraction
    return f"{text}đ"


def build_image_url(base_url: str, filename: Optional[str]) -> Optional[str]:
    if not filename:
        return None
    return f"{base_url.rstrip('/')}/{filename.lstrip('/')}"


def food_to_dict(food: Food, image_base_url: str) -> dict[str, Any]:
    in_stock = (food.so_luong or 0) > 0
    out = FoodOut(
        id_mon=food.id_mon,
        id_loai=food.id_loai,
        ten_loai=food.category.ten_loai if food.category else None,
        ten_mon=food.ten_mon,
        mo_ta=food.mo_ta,
        gia=food.gia,
        gia_formatted=format_price(food.gia),
        hinh_anh=food.hinh_anh,
        hinh_anh_url=build_image_url(image_base_url, food.hinh_anh),
        so_luong=food.so_luong or 0,
        tinh_trang=IN_STOCK if in_stock else OUT_OF_STOCK,
        is_available=in_stock,
        created_at=food.created_at,
        updated_at=food.updated_at,
    )
    return out.model_dump(mode="json")


# =============================================================================
# SERVICE
# =============================================================================

class FoodService:
    """Resource controller for menu items."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def to_dict(self, food: Food) -> dict[str, Any]:
        return food_to_dict(food, self.settings.image_base_url)

    async def _load(self, db: AsyncSession, food_id: int) -> Optional[Food]:
        result = await db.execute(
            select(Food)
            .where(Food.id_mon == food_id)
            .execution_options(populate_existing=True)
        )
        return result.unique().scalar_one_or_none()

    async def _get_or_404(self, db: AsyncSession, food_id: int) -> Food:
        food = await self._load(db, food_id)
        if food is None:
            raise NotFoundError(f"Food #{food_id} not found")
        return food

    async def _check_category(self, db: AsyncSession, category_id: int) -> None:
        if await db.get(Category, category_id) is None:
            raise ValidationError(
                "Category does not exist",
                errors=[f"Category #{category_id} does not exist"],
            )

    async def _check_unique_name(
        self, db: AsyncSession, name: str, exclude_id: Optional[int] = None
    ) -> None:
        query = select(Food.id_mon).where(func.lower(Food.ten_mon) == name.lower())
        if exclude_id is not None:
            query = query.where(Food.id_mon != exclude_id)
        result = await db.execute(query.limit(1))
        if result.scalar() is not None:
            raise ConflictError(f"A food named '{name}' already exists", code="DUPLICATE_ENTRY")

    # =========================================================================
    # READ
    # =========================================================================

    async def list_page(
        self,
        db: AsyncSession,
        params: Mapping[str, Any],
        window: PageParams,
    ) -> tuple[list[dict[str, Any]], Pagination, dict[str, Any]]:
        """
        Filtered page of menu items.

        Returns:
            (items, pagination, applied filters)
        """
        filters = build_food_filters(params)
        total = await self.count(db, params)

        query = (
            filters.apply(
                select(Food)
                .outerjoin(Food.category)
                .options(contains_eager(Food.category))
            )
            .order_by(*FOOD_SORT.order_by(params))
            .limit(window.limit)
            .offset(window.offset)
        )
        result = await db.execute(query)
        foods = result.unique().scalars().all()

        return [self.to_dict(f) for f in foods], Pagination.for_window(total, window), filters.applied

    async def count(self, db: AsyncSession, params: Mapping[str, Any]) -> int:
        filters = build_food_filters(params)
        query = filters.apply(
            select(func.count(Food.id_mon)).select_from(Food).outerjoin(Food.category)
        )
        result = await db.execute(query)
        return result.scalar() or 0

    async def search(
        self,
        db: AsyncSession,
        term: Optional[str],
        params: Mapping[str, Any],
        window: PageParams,
    ) -> tuple[list[dict[str, Any]], Pagination, dict[str, Any]]:
        term = (term or "").strip()
        if len(term) < SEARCH_MIN_LENGTH:
            raise ValidationError(
                "Search query too short",
                errors=[f"q must be at least {SEARCH_MIN_LENGTH} characters"],
            )
        return await self.list_page(db, {**params, "search": term}, window)

    async def popular(self, db: AsyncSession, limit: int = 10) -> list[dict[str, Any]]:
        """
        In-stock items, most expensive first.

        There is no order history to rank by, so price stands in for
        popularity.
        """
        limit = max(1, min(limit, POPULAR_MAX))
        result = await db.execute(
            select(Food)
            .where(Food.so_luong > 0)
            .order_by(Food.gia.desc(), Food.id_mon.asc())
            .limit(limit)
        )
        return [self.to_dict(f) for f in result.unique().scalars().all()]

    async def stats(self, db: AsyncSession) -> dict[str, Any]:
        """Menu overview, price range and per-category breakdown."""
        totals = (
            await db.execute(
                select(
                    func.count(Food.id_mon),
                    func.coalesce(func.sum(case((Food.so_luong > 0, 1), else_=0)), 0),
                    func.coalesce(func.sum(case((Food.so_luong == 0, 1), else_=0)), 0),
                    func.coalesce(func.sum(Food.so_luong), 0),
                    func.avg(Food.gia),
                    func.max(Food.gia),
                    func.min(case((Food.gia > 0, Food.gia))),
                )
            )
        ).one()
        total, available, out_of_stock, total_stock, avg_price, max_price, min_price = totals
        avg_price = round(avg_price or 0)
        max_price = max_price or 0
        min_price = min_price or 0

        food_count = func.count(Food.id_mon).label("so_luong_mon")
        breakdown = await db.execute(
            select(
                Category.id_loai,
                Category.ten_loai,
                food_count,
                func.avg(Food.gia),
                func.coalesce(func.sum(Food.so_luong), 0),
            )
            .outerjoin(Food, Food.id_loai == Category.id_loai)
            .group_by(Category.id_loai, Category.ten_loai)
            .order_by(food_count.desc(), Category.ten_loai.asc())
        )

        categories = []
        for id_loai, ten_loai, count, avg, stock in breakdown.all():
            avg = round(avg or 0)
            categories.append({
                "id_loai": id_loai,
                "ten_loai": ten_loai,
                "so_luong_mon": count,
                "gia_trung_binh": avg,
                "gia_trung_binh_formatted": format_price(avg),
                "tong_so_luong": int(stock),
            })

        return {
            "overview": {
                "total_items": total,
                "available_items": int(available),
                "out_of_stock_items": int(out_of_stock),
                "total_stock": int(total_stock),
            },
            "pricing": {
                "average_price": avg_price,
                "max_price": max_price,
                "min_price": min_price,
                "avg_price_formatted": format_price(avg_price),
                "max_price_formatted": format_price(max_price),
                "min_price_formatted": format_price(min_price),
            },
            "categories": categories,
        }

    async def get(self, db: AsyncSession, food_id: int) -> dict[str, Any]:
        return self.to_dict(await self._get_or_404(db, food_id))

    # =========================================================================
    # WRITE
    # =========================================================================

    async def create(self, db: AsyncSession, data: Mapping[str, Any]) -> dict[str, Any]:
        await self._check_category(db, data["id_loai"])
        await self._check_unique_name(db, data["ten_mon"])

        food = Food(**data)
        db.add(food)
        await db.commit()

        logger.info(f"Food #{food.id_mon} '{food.ten_mon}' created")
        return self.to_dict(await self._get_or_404(db, food.id_mon))

    async def update(
        self, db: AsyncSession, food_id: int, changes: Mapping[str, Any]
    ) -> dict[str, Any]:
        """Apply only the given fields (used by both PUT and PATCH)."""
        if not changes:
            raise ValidationError("No fields to update")
        nulled = sorted(f for f in REQUIRED_FIELDS if f in changes and changes[f] is None)
        if nulled:
            raise ValidationError("Invalid food data", errors=[f"{f} cannot be null" for f in nulled])

        food = await self._get_or_404(db, food_id)
        if "id_loai" in changes:
            await self._check_category(db, changes["id_loai"])
        if "ten_mon" in changes:
            await self._check_unique_name(db, changes["ten_mon"], exclude_id=food_id)

        for field, value in changes.items():
            setattr(food, field, value)
        await db.commit()

        logger.info(f"Food #{food_id} updated: {sorted(changes)}")
        return self.to_dict(await self._get_or_404(db, food_id))

    async def update_stock(self, db: AsyncSession, food_id: int, quantity: int) -> dict[str, Any]:
        food = await self._get_or_404(db, food_id)
        old_stock = food.so_luong or 0

        food.so_luong = quantity
        await db.commit()

        logger.info(f"Stock of food #{food_id} changed {old_stock} -> {quantity}")
        return {
            "id_mon": food_id,
            "item_name": food.ten_mon,
            "old_stock": old_stock,
            "new_stock": quantity,
            "change": quantity - old_stock,
        }

    async def delete(self, db: AsyncSession, food_id: int) -> dict[str, Any]:
        food = await self._get_or_404(db, food_id)
        deleted = {"id_mon": food.id_mon, "ten_mon": food.ten_mon}

        await db.delete(food)
        await db.commit()

        logger.info(f"Food #{food_id} '{deleted['ten_mon']}' deleted")
        return deleted
