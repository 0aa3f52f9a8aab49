"""The response envelope every endpoint returns, and error translation into it."""

from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.shared.errors import StorefrontError
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def api_response(status_code: int, message: str, data=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": status_code < 400,
            "message": message,
            "data": jsonable_encoder(data),
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
        },
    )


def validation_message(messages) -> str:
    """Flatten Protean's ``{field: [messages]}`` into one readable line."""
    if not isinstance(messages, dict):
        return str(messages)
    parts = []
    for field, errors in messages.items():
        for error in errors if isinstance(errors, list | tuple) else [errors]:
            parts.append(error if field in ("_entity", "items", "cart") else f"{field}: {error}")
    return "; ".join(parts) or "Invalid request"


def server_error(exc: Exception, request: Request) -> JSONResponse:
    logger.exception(
        "Unhandled error",
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )
    return api_response(500, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StorefrontError)
    async def storefront_error_handler(request: Request, exc: StorefrontError):
        return api_response(exc.status_code, exc.message)

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return api_response(400, validation_message(exc.messages), {"errors": exc.messages})

    @app.exception_handler(ObjectNotFoundError)
    async def not_found_handler(request: Request, exc: ObjectNotFoundError):
        return api_response(404, "Resource not found")

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"field": ".".join(str(part) for part in error["loc"][1:]), "message": error["msg"]}
            for error in exc.errors()
        ]
        return api_response(400, "Invalid request body", {"errors": errors})
