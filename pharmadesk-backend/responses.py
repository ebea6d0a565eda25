# responses.py
from typing import Any, Dict, Iterable, List

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# Locations FastAPI and pydantic prefix onto error paths
_LOCATION_PREFIXES = ("body", "query", "path", "header")


def envelope(success: bool, message: str, **extra: Any) -> Dict[str, Any]:
    """Build the ``{success, message, ...}`` wrapper every endpoint answers with."""
    result = {"success": success, "message": message}
    result.update(extra)
    return result


def send_json_response(data: Dict[str, Any], status_code: int = 200, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(data),
        headers=headers,
    )


def respond(result: Dict[str, Any], success_status: int = 200, failure_status: int = 400) -> JSONResponse:
    """Send a data-access envelope, picking the status code from its ``success`` flag."""
    status_code = success_status if result.get("success") else failure_status
    return send_json_response(result, status_code)


def error_fields(errors: Iterable[Dict[str, Any]]) -> List[str]:
    """Top-level field names mentioned by a list of pydantic errors, in order."""
    fields: List[str] = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in _LOCATION_PREFIXES]
        if loc and loc[0] not in fields:
            fields.append(loc[0])
    return fields


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return send_json_response(
        envelope(False, str(exc.detail)),
        exc.status_code,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return send_json_response(
        envelope(False, "Invalid request data.", fields=error_fields(exc.errors())),
        400,
    )
