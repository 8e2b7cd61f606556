"""
Response Envelopes

Every API response, success or failure, is wrapped in the same shape so
clients can branch on the ``success`` field alone:

    {"success": true,  "message": ..., "data": ..., "pagination": ..., "timestamp": ...}
    {"success": false, "message": ..., "code": ..., "errors": [...], "timestamp": ...}
"""

from datetime import datetime, timezone
from typing import Any, Optional


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def success_response(
    data: Any = None,
    message: str = "Success",
    pagination: Optional[dict[str, Any]] = None,
    **meta: Any,
) -> dict[str, Any]:
    """
    Build a success envelope.

    ``data`` and ``pagination`` are only included when given; extra keyword
    arguments are merged in as top-level metadata.
    """
    response: dict[str, Any] = {
        "success": True,
        "message": message,
        "timestamp": utc_timestamp(),
        **meta,
    }
    if data is not None:
        response["data"] = data
    if pagination is not None:
        response["pagination"] = pagination
    return response


def error_response(
    message: str,
    code: str = "INTERNAL_ERROR",
    errors: Optional[list[Any]] = None,
    details: Any = None,
) -> dict[str, Any]:
    """Build an error envelope. ``details`` is left to the caller to suppress in production."""
    response: dict[str, Any] = {
        "success": False,
        "message": message,
        "code": code,
        "timestamp": utc_timestamp(),
    }
    if errors:
        response["errors"] = errors
    if details is not None:
        response["details"] = details
    return response
