"""
Root & Health Endpoints
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from phuongnam.core.responses import success_response
from phuongnam.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["System"])


@router.get("/", summary="API Root")
async def root(request: Request) -> dict[str, Any]:
    """API root with navigation links."""
    settings = request.app.state.settings
    return success_response(
        message=f"Welcome to {settings.app_name}",
        data={
            "version": settings.app_version,
            "environment": settings.env_mode.value,
            "documentation": "/docs",
            "health": "/health",
            "endpoints": {
                "reservations": "/api/datban",
                "foods": "/api/foods",
                "categories": "/api/categories",
                "customers": "/api/customers",
                "chat": "/api/chat",
            },
        },
    )


@router.get("/health", summary="System Health Check")
async def health_check(request: Request, db: AsyncSession = Depends(get_db)):
    """Database ping plus AI provider status; 503 when the database is down."""
    db_status = "healthy"
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        db_status = "unhealthy"
        logger.error(f"Database health check failed: {e}")

    ai = request.app.state.chat.status()
    healthy = db_status == "healthy"
    body = success_response(
        message="operational" if healthy else "degraded",
        data={
            "status": "operational" if healthy else "degraded",
            "database": db_status,
            "ai": {"available": ai["available"], "primary": ai["primary"]},
            "environment": request.app.state.settings.env_mode.value,
        },
    )
    if not healthy:
        body["success"] = False
        return JSONResponse(status_code=503, content=body)
    return body
