"""Error boundary

Every failure leaves the API as {"success": false, "message": ..., "errors"?: [...]}.
Database constraint violations are mapped to user-facing categories here and
nowhere else.
"""
import traceback
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from autosathi.config import settings

logger = structlog.get_logger()

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
NOT_NULL_VIOLATION = "23502"

# SQLite reports constraint failures only through the message text
_MESSAGE_CODES = (
    ("UNIQUE constraint failed", UNIQUE_VIOLATION),
    ("FOREIGN KEY constraint failed", FOREIGN_KEY_VIOLATION),
    ("NOT NULL constraint failed", NOT_NULL_VIOLATION),
)


def error_body(message: str, **extra) -> dict:
    body = {"success": False, "message": message}
    body.update({k: v for k, v in extra.items() if v is not None})
    return body


def integrity_error_code(exc: IntegrityError) -> Optional[str]:
    """SQLSTATE for a constraint violation, whichever driver raised it"""
    orig = exc.orig
    for attr in ("sqlstate", "pgcode"):
        code = getattr(orig, attr, None)
        if code:
            return str(code)

    text = str(orig)
    for fragment, code in _MESSAGE_CODES:
        if fragment in text:
            return code
    return None


def _field_name(loc) -> str:
    # Drop the leading "body"/"query"/"path" segment
    parts = [str(p) for p in loc[1:]] if len(loc) > 1 else [str(p) for p in loc]
    return ".".join(parts)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": _field_name(err.get("loc", ())), "message": err.get("msg", "Invalid value")}
        for err in exc.errors()
    ]
    logger.info("request_validation_failed", path=request.url.path, errors=len(errors))
    return JSONResponse(status_code=400, content=error_body("Validation failed", errors=errors))


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def integrity_error_handler(request: Request, exc: IntegrityError):
    code = integrity_error_code(exc)
    logger.warning("database_constraint_violation", path=request.url.path, code=code, error=str(exc.orig))

    if code == UNIQUE_VIOLATION:
        return JSONResponse(status_code=409, content=error_body("Duplicate entry"))
    if code == FOREIGN_KEY_VIOLATION:
        return JSONResponse(status_code=400, content=error_body("Referenced record does not exist"))
    if code == NOT_NULL_VIOLATION:
        return JSONResponse(status_code=400, content=error_body("Required field is missing"))
    return await unhandled_exception_handler(request, exc)


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_info=exc,
    )
    stack = None
    if not settings.is_production:
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(status_code=500, content=error_body("Internal server error", stack=stack))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
