"""
Error taxonomy shared by both services and the handlers that render it as
JSON:API error documents.
"""

from typing import Any, Dict, Optional, Union

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .jsonapi import JSONAPIResponse
from .logging_config import get_logger

logger = get_logger(__name__)


class ServiceError(Exception):
    """Base class for errors that map to an HTTP status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "internal_error"
    title: str = "Internal Server Error"

    def __init__(self, detail: str, context: Optional[Dict[str, Any]] = None):
        self.detail = detail
        self.context = context or {}
        super().__init__(detail)

    def to_error_object(self) -> Dict[str, Any]:
        error = {
            "status": str(self.status_code),
            "code": self.code,
            "title": self.title,
            "detail": self.detail,
        }
        if self.context:
            error["meta"] = self.context
        return error


class ValidationError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"
    title = "Bad Request"

    def __init__(self, detail: str, field: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        merged = {"field": field} if field else {}
        if context:
            merged.update(context)
        super().__init__(detail, merged)


class AuthenticationError(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "authentication_error"
    title = "Unauthorized"


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    title = "Not Found"

    def __init__(self, resource_type: str, resource_id: Union[str, int], detail: Optional[str] = None):
        if detail is None:
            detail = f"{resource_type} with id '{resource_id}' not found"
        super().__init__(detail, {"resource_type": resource_type, "resource_id": str(resource_id)})


class SerializationError(ServiceError):
    code = "serialization_error"
    title = "Serialization Error"


def error_response(status_code: int, errors: list) -> JSONAPIResponse:
    return JSONAPIResponse(status_code=status_code, content={"errors": errors})


async def handle_service_error(request: Request, exc: ServiceError) -> JSONAPIResponse:
    if exc.status_code >= 500:
        logger.error(
            f"{exc.title}: {exc.detail}",
            exc_info=exc,
            extra={'extra_fields': {'path': request.url.path, 'context': exc.context}}
        )
    else:
        logger.warning(
            f"{exc.title}: {exc.detail}",
            extra={'extra_fields': {'path': request.url.path, 'context': exc.context}}
        )
    return error_response(exc.status_code, [exc.to_error_object()])


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONAPIResponse:
    """Malformed JSON and schema violations are both reported as 400."""
    errors = []
    for err in exc.errors():
        location = [str(part) for part in err.get("loc", ())]
        errors.append({
            "status": "400",
            "code": "validation_error",
            "title": "Bad Request",
            "detail": err.get("msg", "Invalid request"),
            "source": {"pointer": "/" + "/".join(location[1:])} if location[:1] == ["body"] else {"parameter": ".".join(location)},
        })
    logger.warning(
        f"Request validation failed: {request.method} {request.url.path}",
        extra={'extra_fields': {'errors': errors}}
    )
    return error_response(status.HTTP_400_BAD_REQUEST, errors or [{
        "status": "400", "code": "validation_error", "title": "Bad Request", "detail": "Invalid request"
    }])


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONAPIResponse:
    return error_response(exc.status_code, [{
        "status": str(exc.status_code),
        "title": str(exc.detail),
    }])


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONAPIResponse:
    logger.error(
        f"Unhandled error: {request.method} {request.url.path}",
        exc_info=exc,
        extra={'extra_fields': {'method': request.method, 'path': request.url.path}}
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, [{
        "status": "500",
        "code": "internal_error",
        "title": "Internal Server Error",
        "detail": "An unexpected error occurred",
    }])


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, handle_service_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected_error)
