"""
JSON:API document envelope helpers.

Incoming documents are validated with the generic ``DocumentIn`` model; outgoing
documents are built from pydantic attribute models and returned through
``JSONAPIResponse`` so that every body carries the JSON:API media type.
"""

from typing import Any, Dict, Generic, Iterable, Optional, TypeVar

from fastapi.responses import JSONResponse
from pydantic import BaseModel
from pydantic_core import PydanticSerializationError

JSONAPI_MEDIA_TYPE = "application/vnd.api+json"

AttributesT = TypeVar("AttributesT", bound=BaseModel)


class JSONAPIResponse(JSONResponse):
    media_type = JSONAPI_MEDIA_TYPE


class ResourceIn(BaseModel, Generic[AttributesT]):
    type: Optional[str] = None
    id: Optional[str] = None
    attributes: AttributesT


class DocumentIn(BaseModel, Generic[AttributesT]):
    data: ResourceIn[AttributesT]


def resource_object(resource_type: str, resource_id: Any, attributes: BaseModel) -> Dict[str, Any]:
    from .exceptions import SerializationError

    try:
        payload = attributes.model_dump(mode="json", by_alias=True)
    except (PydanticSerializationError, ValueError, TypeError) as exc:
        raise SerializationError(f"Could not serialize {resource_type} resource: {exc}") from exc
    return {
        "type": resource_type,
        "id": None if resource_id is None else str(resource_id),
        "attributes": payload,
    }


def document(
    resource_type: str,
    resource_id: Any,
    attributes: BaseModel,
    links: Optional[Dict[str, Optional[str]]] = None,
) -> Dict[str, Any]:
    doc: Dict[str, Any] = {"data": resource_object(resource_type, resource_id, attributes)}
    if links:
        doc["links"] = links
    return doc


def collection_document(
    resource_type: str,
    items: Iterable[tuple],
    meta: Optional[Dict[str, Any]] = None,
    links: Optional[Dict[str, Optional[str]]] = None,
) -> Dict[str, Any]:
    """Build a collection document from ``(id, attributes)`` pairs."""
    doc: Dict[str, Any] = {
        "data": [resource_object(resource_type, rid, attrs) for rid, attrs in items]
    }
    if meta is not None:
        doc["meta"] = meta
    if links is not None:
        doc["links"] = links
    return doc
