# backend/utils/response.py
import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from services.exceptions import MovementError

logger = logging.getLogger(__name__)


# Every response shares the {status, message, data} envelope
def respond_success(data=None, message: str = "OK") -> dict:
    return {"status": "success", "message": message, "data": data}


def respond_error(status_code: int, message: str, headers: dict = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "message": message},
        headers=headers,
    )


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path", "form"))
    msg = first.get("msg", "invalid value")
    return f"Invalid request: {field} {msg}".strip() if field else f"Invalid request: {msg}"


def register_exception_handlers(app: FastAPI):
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        message = exc.detail if isinstance(exc.detail, str) else jsonable_encoder(exc.detail)
        return respond_error(exc.status_code, message, headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return respond_error(status.HTTP_400_BAD_REQUEST, _validation_message(exc))

    @app.exception_handler(MovementError)
    async def movement_exception_handler(request: Request, exc: MovementError):
        return respond_error(exc.status_code, exc.message)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return respond_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
