"""Maps the storefront error taxonomy onto HTTP responses.

Every failure body carries a ``message``; validation failures add the
per-field ``errors``.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.domain import logger
from storefront.errors import AuthorizationError, DomainConflict, SystemFault

GENERIC_FAULT_MESSAGE = "Something went wrong. Please try again later."


def _first_message(messages, default: str) -> str:
    if isinstance(messages, dict):
        for value in messages.values():
            if isinstance(value, list | tuple) and value:
                return str(value[0])
            if value:
                return str(value)
    if isinstance(messages, str) and messages:
        return messages
    return default


def _field_errors(errors) -> dict[str, list[str]]:
    grouped: dict[str, list[str]] = {}
    for error in errors:
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path", "header")]
        field = ".".join(location) or "request"
        grouped.setdefault(field, []).append(error.get("msg", "Invalid value"))
    return grouped


async def domain_conflict_handler(request: Request, exc: DomainConflict) -> JSONResponse:
    return JSONResponse(status_code=400, content={"message": exc.message})


async def authorization_error_handler(request: Request, exc: AuthorizationError) -> JSONResponse:
    return JSONResponse(status_code=403, content={"message": exc.message})


async def not_found_handler(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    message = _first_message(getattr(exc, "messages", None), "Resource not found")
    return JSONResponse(status_code=404, content={"message": message})


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"message": "Validation failed", "errors": exc.messages},
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"message": "Validation failed", "errors": _field_errors(exc.errors())},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"message": exc.detail}, headers=exc.headers)


async def system_fault_handler(request: Request, exc: SystemFault) -> JSONResponse:
    logger.error(
        "Request failed",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        cause=repr(exc.__cause__) if exc.__cause__ else None,
    )
    return JSONResponse(status_code=500, content={"message": exc.message})


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"message": GENERIC_FAULT_MESSAGE})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainConflict, domain_conflict_handler)
    app.add_exception_handler(AuthorizationError, authorization_error_handler)
    app.add_exception_handler(ObjectNotFoundError, not_found_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(SystemFault, system_fault_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
