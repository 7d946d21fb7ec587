"""
Uniform response envelope used by every JSON endpoint.

    success: {timestamp, path, success: true, data, meta}
    failure: {timestamp, path, success: false, error: {status, code, message, details}}
"""
from datetime import datetime, timezone
from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from shopkeep.core.errors import ApiError


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2025-01-01T12:00:00.000Z"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def request_path(request: Request) -> str:
    """Path as requested, including the query string"""
    query = request.url.query
    return f"{request.url.path}?{query}" if query else request.url.path


def ok(request: Request, data: Any, meta: dict[str, Any] | None = None) -> dict[str, Any]:
    return {
        "timestamp": utc_timestamp(),
        "path": request_path(request),
        "success": True,
        "data": jsonable_encoder(data),
        "meta": meta or {},
    }


def fail(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    details: list[Any] | None = None,
) -> dict[str, Any]:
    return {
        "timestamp": utc_timestamp(),
        "path": request_path(request),
        "success": False,
        "error": {
            "status": status_code,
            "code": code,
            "message": message,
            "details": jsonable_encoder(details or []),
        },
    }


def error_response(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    details: list[Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        fail(request, status_code, code, message, details),
        status_code=status_code,
        headers=headers,
    )


def api_error_response(request: Request, error: ApiError) -> JSONResponse:
    return error_response(request, error.status_code, error.code, error.message, error.details)
