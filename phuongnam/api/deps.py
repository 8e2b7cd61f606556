"""
Shared FastAPI dependencies: settings and services from app state, the
pagination window, and bearer-token authentication.
"""

from typing import Any, Optional

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from phuongnam.core.config import Settings
from phuongnam.core.exceptions import AuthError
from phuongnam.database import get_db
from phuongnam.models import Customer
from phuongnam.services.pagination import PageParams, parse_page_params

bearer_scheme = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_service(name: str):
    """Dependency returning the service registered on app.state under ``name``."""
    def dependency(request: Request) -> Any:
        return getattr(request.app.state, name)
    return dependency


def query_params(request: Request) -> dict[str, str]:
    """Raw query string as a dict; the filter builders pick the keys they know."""
    return dict(request.query_params)


def page_params(
    page: Optional[str] = Query(None, description="1-based page number"),
    limit: Optional[str] = Query(None, description="Page size (clamped to MAX_PAGE_SIZE)"),
    offset: Optional[str] = Query(None, description="Row offset; wins over page"),
    settings: Settings = Depends(get_app_settings),
) -> PageParams:
    return parse_page_params(
        page,
        limit,
        offset,
        default_limit=settings.default_page_size,
        max_limit=settings.max_page_size,
    )


async def current_customer(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Customer:
    """Customer owning the bearer access token; 401 otherwise."""
    if credentials is None:
        raise AuthError("Access token required")
    return await request.app.state.customers.authenticate(db, credentials.credentials)
