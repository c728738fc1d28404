"""
Exception handlers rendering every error as ``{detail, status_code, code}``.

Request ids reach the logs through the structlog context; they are not echoed
in error bodies. Unhandled exceptions become a generic 500.
"""

from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from catalog.exceptions import CatalogError
from catalog.logging import get_logger

logger = get_logger("backend.errors")


def error_body(detail: str, status_code: int, code: str | None = None) -> dict:
    if code is None:
        try:
            code = HTTPStatus(status_code).name
        except ValueError:
            code = "ERROR"
    return {"detail": detail, "status_code": status_code, "code": code}


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(CatalogError)
    async def catalog_error_handler(request: Request, exc: CatalogError):
        log = logger.error if exc.status_code >= 500 else logger.info
        log("catalog_error", code=exc.code, detail=exc.message, status_code=exc.status_code)
        return JSONResponse(error_body(exc.message, exc.status_code, exc.code), status_code=exc.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        logger.warning("http_exception", detail=exc.detail, status_code=exc.status_code)
        return JSONResponse(
            error_body(str(exc.detail), exc.status_code),
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        errors = jsonable_encoder(exc.errors())
        logger.warning("validation_error", path=request.url.path, errors=errors)
        body = error_body("Validation error", 422, "VALIDATION_ERROR")
        body["errors"] = errors
        return JSONResponse(body, status_code=422)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("unhandled_exception", error_type=type(exc).__name__, path=request.url.path)
        return JSONResponse(error_body("Internal server error", 500, "INTERNAL_ERROR"), status_code=500)
