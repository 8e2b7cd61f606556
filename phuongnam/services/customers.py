"""
Customer Accounts & Authentication

Registration, login and token refresh for khach_hang, plus the profile
and admin listing operations. Passwords are stored hashed and never
returned; every successful register/login yields an access + refresh
token pair.
"""

import logging
from typing import Any, Mapping

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from phuongnam.core.exceptions import AuthError, ConflictError, NotFoundError, ValidationError
from phuongnam.core.security import REFRESH, TokenService, hash_password, verify_password
from phuongnam.models import Customer
from phuongnam.schemas import CustomerOut
from phuongnam.services.pagination import PageParams, Pagination
from phuongnam.services.query import CUSTOMER_SORT, build_customer_filters

logger = logging.getLogger(__name__)


def customer_to_dict(customer: Customer) -> dict[str, Any]:
    return CustomerOut.model_validate(customer).model_dump(mode="json")


class CustomerService:
    """Account management on top of a TokenService."""

    def __init__(self, tokens: TokenService):
        self.tokens = tokens

    async def _get_or_404(self, db: AsyncSession, customer_id: int) -> Customer:
        customer = await db.get(Customer, customer_id)
        if customer is None:
            raise NotFoundError(f"Customer #{customer_id} not found")
        return customer

    async def _find_by_email(self, db: AsyncSession, email: str):
        result = await db.execute(select(Customer).where(Customer.email == email.lower()))
        return result.scalar_one_or_none()

    def _session(self, customer: Customer) -> dict[str, Any]:
        return {
            "customer": customer_to_dict(customer),
            **self.tokens.issue_pair(customer.id, customer.email),
        }

    # =========================================================================
    # AUTH
    # =========================================================================

    async def register(self, db: AsyncSession, data: Mapping[str, Any]) -> dict[str, Any]:
        """
        Create an account and log it in.

        Raises:
            ConflictError: The email is already registered
        """
        if await self._find_by_email(db, data["email"]) is not None:
            raise ConflictError("Email is already registered", code="DUPLICATE_ENTRY")

        customer = Customer(
            full_name=data["full_name"].strip(),
            email=data["email"].lower(),
            phone=data["phone"],
            password=hash_password(data["password"]),
        )
        db.add(customer)
        await db.commit()
        await db.refresh(customer)

        logger.info(f"Customer #{customer.id} registered ({customer.email})")
        return self._session(customer)

    async def login(self, db: AsyncSession, email: str, password: str) -> dict[str, Any]:
        customer = await self._find_by_email(db, email)
        # Same message for unknown email and wrong password
        if customer is None or not verify_password(customer.password, password):
            logger.info(f"Failed login for {email}")
            raise AuthError("Invalid email or password", code="INVALID_CREDENTIALS")

        logger.info(f"Customer #{customer.id} logged in")
        return self._session(customer)

    async def refresh(self, db: AsyncSession, refresh_token: str) -> dict[str, Any]:
        """Exchange a refresh token for a new access token."""
        payload = self.tokens.decode(refresh_token, expected_type=REFRESH)
        customer = await db.get(Customer, int(payload["sub"]))
        if customer is None:
            raise AuthError("Account no longer exists", code="TOKEN_INVALID")

        return {
            "token": self.tokens.create_access_token(customer.id, customer.email),
            "expiresIn": int(self.tokens.access_ttl.total_seconds()),
        }

    async def authenticate(self, db: AsyncSession, token: str) -> Customer:
        """Resolve an access token to its customer."""
        payload = self.tokens.decode(token)
        try:
            customer_id = int(payload["sub"])
        except (KeyError, ValueError):
            raise AuthError("Invalid token", code="TOKEN_INVALID")

        customer = await db.get(Customer, customer_id)
        if customer is None:
            raise AuthError("Account no longer exists", code="TOKEN_INVALID")
        return customer

    # =========================================================================
    # PROFILE
    # =========================================================================

    async def update_profile(
        self, db: AsyncSession, customer: Customer, changes: Mapping[str, Any]
    ) -> dict[str, Any]:
        changes = {k: v for k, v in changes.items() if v is not None}
        if not changes:
            raise ValidationError("No fields to update")

        for field, value in changes.items():
            setattr(customer, field, value.strip() if isinstance(value, str) else value)
        await db.commit()
        await db.refresh(customer)

        logger.info(f"Customer #{customer.id} profile updated: {sorted(changes)}")
        return customer_to_dict(customer)

    async def delete(self, db: AsyncSession, customer_id: int) -> dict[str, Any]:
        customer = await self._get_or_404(db, customer_id)
        deleted = {"id": customer.id, "email": customer.email}

        await db.execute(delete(Customer).where(Customer.id == customer_id))
        await db.commit()

        logger.info(f"Customer #{customer_id} deleted")
        return deleted

    # =========================================================================
    # ADMIN
    # =========================================================================

    async def list_page(
        self,
        db: AsyncSession,
        params: Mapping[str, Any],
        window: PageParams,
    ) -> tuple[list[dict[str, Any]], Pagination]:
        filters = build_customer_filters(params)

        count = await db.execute(filters.apply(select(func.count(Customer.id))))
        total = count.scalar() or 0

        result = await db.execute(
            filters.apply(select(Customer))
            .order_by(*CUSTOMER_SORT.order_by(params))
            .limit(window.limit)
            .offset(window.offset)
        )
        items = [customer_to_dict(c) for c in result.scalars().all()]
        return items, Pagination.for_window(total, window)

    async def get(self, db: AsyncSession, customer_id: int) -> dict[str, Any]:
        return customer_to_dict(await self._get_or_404(db, customer_id))
