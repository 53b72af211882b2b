"""Translation of domain errors into HTTP responses.

Client errors carry a descriptive ``message``; server errors are logged with
their cause and answered with a generic message only.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

from src.shop.core.errors import (
    InvalidMimeType,
    MultipartFieldMissing,
    StorageError,
    StoreError,
)

INTERNAL_ERROR_MESSAGE = "Internal Server Error"


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
        for err in exc.errors()
    )
    logger.info("Rejected invalid request: {}", problems)
    return error_response(400, f"Invalid request: {problems}")


async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    if isinstance(exc, InvalidMimeType):
        return error_response(400, f"Image must be one of: {', '.join(exc.allowed)}.")
    if isinstance(exc, MultipartFieldMissing):
        return error_response(400, f"Invalid request: missing '{exc.field_name}' field")

    logger.opt(exception=exc).error("Asset storage failure")
    return error_response(500, INTERNAL_ERROR_MESSAGE)


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    logger.opt(exception=exc).error("Persistence failure: {}", type(exc).__name__)
    return error_response(500, INTERNAL_ERROR_MESSAGE)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StorageError, storage_error_handler)
    app.add_exception_handler(StoreError, store_error_handler)
