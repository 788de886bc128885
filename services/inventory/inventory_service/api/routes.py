from functools import lru_cache

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core import JSONAPIResponse, NotFoundError, document, get_logger
from inventory_service.core_settings import get_settings
from inventory_service.infrastructure.db import get_db
from inventory_service.infrastructure.product_client import ProductServiceClient
from inventory_service.application.service import InventoryService
from inventory_service.application.schemas import (
    INVENTORY_DETAILS_TYPE,
    INVENTORY_TYPE,
    InventoryAttributes,
    InventoryQuantityDocument,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/inventories", tags=["inventory"])

@lru_cache
def get_product_client() -> ProductServiceClient:
    return ProductServiceClient(get_settings().product_client_config())

def get_inventory_service(
    db: Session = Depends(get_db),
    product_client: ProductServiceClient = Depends(get_product_client),
) -> InventoryService:
    return InventoryService(db, product_client)

@router.get("/products/{product_id}")
def get_inventory_by_product(product_id: int, service: InventoryService = Depends(get_inventory_service)):
    details = service.get_inventory_details(product_id)
    if details is None:
        raise NotFoundError("Product", product_id, detail=f"Inventory or product not found for id {product_id}")
    return JSONAPIResponse(content=document(INVENTORY_DETAILS_TYPE, details.resource_id, details))

@router.patch("/products/{product_id}")
def update_inventory_quantity(
    product_id: int,
    payload: InventoryQuantityDocument,
    service: InventoryService = Depends(get_inventory_service),
):
    inventory = service.update_inventory_quantity(product_id, payload.data.attributes.quantity)
    logger.info(f"Inventory for product {product_id} set to {inventory.quantity}")
    return JSONAPIResponse(
        content=document(INVENTORY_TYPE, inventory.id, InventoryAttributes.model_validate(inventory))
    )
