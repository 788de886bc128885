"""Shared core utilities for product-service and inventory-service."""

from .health import ServiceHealth, HealthStatus
from .logging_config import (
    setup_logging,
    get_logger,
    RequestLoggingMiddleware,
    set_request_context,
    generate_request_id,
    LoggerAdapter,
)
from .exceptions import (
    ServiceError,
    ValidationError,
    AuthenticationError,
    NotFoundError,
    SerializationError,
    register_exception_handlers,
)
from .jsonapi import (
    JSONAPI_MEDIA_TYPE,
    JSONAPIResponse,
    DocumentIn,
    ResourceIn,
    document,
    collection_document,
)

__all__ = [
    # Health checks
    "ServiceHealth",
    "HealthStatus",
    # Logging
    "setup_logging",
    "get_logger",
    "RequestLoggingMiddleware",
    "set_request_context",
    "generate_request_id",
    "LoggerAdapter",
    # Errors
    "ServiceError",
    "ValidationError",
    "AuthenticationError",
    "NotFoundError",
    "SerializationError",
    "register_exception_handlers",
    # JSON:API
    "JSONAPI_MEDIA_TYPE",
    "JSONAPIResponse",
    "DocumentIn",
    "ResourceIn",
    "document",
    "collection_document",
]
