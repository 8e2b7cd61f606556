"""
Category Service

Menu categories with their item counts. A category that still has items
cannot be deleted; the items must be moved or removed first.
"""

import logging
from typing import Any, Mapping, Optional

from sqlalchemy import case, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from phuongnam.core.config import Settings
from phuongnam.core.exceptions import ConflictError, NotFoundError, ValidationError
from phuongnam.models import Category, Food
from phuongnam.schemas import CategoryOut
from phuongnam.services.foods import food_to_dict
from phuongnam.services.pagination import PageParams, Pagination
from phuongnam.services.query import CATEGORY_SORT, FOOD_SORT, build_category_filters

logger = logging.getLogger(__name__)


def _counted_query():
    """Categories with total and in-stock item counts."""
    return (
        select(
            Category,
            func.count(Food.id_mon).label("so_luong_mon"),
            func.coalesce(func.sum(case((Food.so_luong > 0, 1), else_=0)), 0).label("so_luong_con_hang"),
        )
        .outerjoin(Food, Food.id_loai == Category.id_loai)
        .group_by(Category.id_loai)
    )


def _to_dict(category: Category, food_count: int = 0, in_stock: int = 0) -> dict[str, Any]:
    out = CategoryOut.model_validate(category)
    out.so_luong_mon = food_count
    out.so_luong_con_hang = int(in_stock)
    return out.model_dump(mode="json")


class CategoryService:
    """Resource controller for categories."""

    def __init__(self, settings: Settings):
        self.settings = settings

    async def _get_or_404(self, db: AsyncSession, category_id: int) -> Category:
        category = await db.get(Category, category_id)
        if category is None:
            raise NotFoundError(f"Category #{category_id} not found")
        return category

    async def _check_unique_name(
        self, db: AsyncSession, name: str, exclude_id: Optional[int] = None
    ) -> None:
        query = select(Category.id_loai).where(func.lower(Category.ten_loai) == name.lower())
        if exclude_id is not None:
            query = query.where(Category.id_loai != exclude_id)
        result = await db.execute(query.limit(1))
        if result.scalar() is not None:
            raise ConflictError(f"Category '{name}' already exists", code="DUPLICATE_ENTRY")

    async def list_page(
        self,
        db: AsyncSession,
        params: Mapping[str, Any],
        window: PageParams,
    ) -> tuple[list[dict[str, Any]], Pagination]:
        filters = build_category_filters(params)
        total = await self.count(db, params)

        query = (
            filters.apply(_counted_query())
            .order_by(*CATEGORY_SORT.order_by(params))
            .limit(window.limit)
            .offset(window.offset)
        )
        result = await db.execute(query)
        items = [_to_dict(c, count, in_stock) for c, count, in_stock in result.all()]
        return items, Pagination.for_window(total, window)

    async def count(self, db: AsyncSession, params: Mapping[str, Any]) -> int:
        filters = build_category_filters(params)
        result = await db.execute(filters.apply(select(func.count(Category.id_loai))))
        return result.scalar() or 0

    async def get(self, db: AsyncSession, category_id: int) -> dict[str, Any]:
        result = await db.execute(_counted_query().where(Category.id_loai == category_id))
        row = result.first()
        if row is None:
            raise NotFoundError(f"Category #{category_id} not found")
        category, count, in_stock = row
        return _to_dict(category, count, in_stock)

    async def foods(
        self,
        db: AsyncSession,
        category_id: int,
        params: Mapping[str, Any],
        window: PageParams,
    ) -> tuple[dict[str, Any], list[dict[str, Any]], Pagination]:
        """Items of one category, paginated."""
        category = await self.get(db, category_id)

        total = category["so_luong_mon"]
        result = await db.execute(
            select(Food)
            .where(Food.id_loai == category_id)
            .order_by(*FOOD_SORT.order_by(params))
            .limit(window.limit)
            .offset(window.offset)
        )
        foods = [
            food_to_dict(f, self.settings.image_base_url)
            for f in result.unique().scalars().all()
        ]
        return category, foods, Pagination.for_window(total, window)

    async def create(self, db: AsyncSession, data: Mapping[str, Any]) -> dict[str, Any]:
        await self._check_unique_name(db, data["ten_loai"])

        category = Category(**data)
        db.add(category)
        await db.commit()
        await db.refresh(category)

        logger.info(f"Category #{category.id_loai} '{category.ten_loai}' created")
        return _to_dict(category)

    async def update(
        self, db: AsyncSession, category_id: int, changes: Mapping[str, Any]
    ) -> dict[str, Any]:
        if not changes:
            raise ValidationError("No fields to update")
        if "ten_loai" in changes and changes["ten_loai"] is None:
            raise ValidationError("Invalid category data", errors=["ten_loai cannot be null"])

        category = await self._get_or_404(db, category_id)
        if "ten_loai" in changes:
            await self._check_unique_name(db, changes["ten_loai"], exclude_id=category_id)

        for field, value in changes.items():
            setattr(category, field, value)
        await db.commit()

        logger.info(f"Category #{category_id} updated: {sorted(changes)}")
        return await self.get(db, category_id)

    async def delete(self, db: AsyncSession, category_id: int) -> dict[str, Any]:
        """
        Raises:
            NotFoundError: Unknown category
            ValidationError: REFERENCED_ROW while any food item still uses it
        """
        category = await self._get_or_404(db, category_id)

        result = await db.execute(
            select(func.count(Food.id_mon)).where(Food.id_loai == category_id)
        )
        food_count = result.scalar() or 0
        if food_count:
            raise ValidationError(
                f"Cannot delete category '{category.ten_loai}': {food_count} food items still use it",
                code="REFERENCED_ROW",
            )

        deleted = {"id_loai": category.id_loai, "ten_loai": category.ten_loai}
        await db.execute(delete(Category).where(Category.id_loai == category_id))
        await db.commit()

        logger.info(f"Category #{category_id} '{deleted['ten_loai']}' deleted")
        return deleted
