from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Any, Optional

from core.exceptions import ChainSignError
from core.logging import get_logger

logger = get_logger(__name__)


class ErrorResponse(BaseModel):
    error: str
    code: str
    details: Optional[Any] = None


def _error(status_code: int, error: str, code: str, details: Any = None, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, code=code, details=details).model_dump(),
        headers=headers,
    )


def add_exception_handlers(app: FastAPI):
    """
    Registers exception handlers with the FastAPI app.
    """
    @app.exception_handler(ChainSignError)
    async def chainsign_exception_handler(request: Request, exc: ChainSignError):
        if exc.status_code >= 500:
            logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
        return _error(exc.status_code, exc.message, exc.code, exc.details)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, str(exc.detail), "HTTP_ERROR", headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        # Missing or malformed fields are a client error, reported as 400.
        return _error(400, "Input validation failed", "VALIDATION_ERROR", jsonable_errors(exc))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(
            f"Unhandled exception: {exc!r}",
            extra={"method": request.method, "url": str(request.url)},
            exc_info=exc,
        )
        return _error(500, "Internal Server Error", "INTERNAL_ERROR")


def jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
