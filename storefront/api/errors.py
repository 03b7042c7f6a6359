"""
Exception handlers turning business errors into JSON responses
"""
import logging
from collections import defaultdict

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from storefront.exceptions import StorefrontError

logger = logging.getLogger(__name__)


async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    """Render a StorefrontError with its status code and details"""
    if exc.status_code >= 500:
        logger.error("Request failed: %s %s", request.method, request.url.path,
                     extra={"error_code": exc.code})
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Field-level messages keyed by field name"""
    errors = defaultdict(list)
    for error in exc.errors():
        location = [str(part) for part in error["loc"] if part != "body"]
        errors[".".join(location) or "body"].append(error["msg"])
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"message": "Validation failed", "errors": dict(errors)}
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StorefrontError, storefront_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
