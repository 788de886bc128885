from decimal import Decimal
from typing import Annotated, Optional

from pydantic import BaseModel, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from shared.core.jsonapi import DocumentIn

INVENTORY_TYPE = "inventories"
INVENTORY_DETAILS_TYPE = "inventory-details"

Price = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

# Column is a 32-bit INTEGER; negatives are rejected by the service.
Quantity = Annotated[int, Field(strict=True, le=2**31 - 1)]

class InventoryQuantityUpdate(BaseModel):
    quantity: Quantity

class InventoryQuantityDocument(DocumentIn[InventoryQuantityUpdate]):
    pass

class InventoryAttributes(BaseModel):
    product_id: int
    quantity: int

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True

class InventoryDetails(BaseModel):
    """Local stock merged with the remote product; never persisted."""
    resource_id: str = Field(exclude=True)
    product_id: int
    product_name: str
    product_price: Price
    quantity_available: int

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @classmethod
    def merge(cls, inventory_id: Optional[int], product_id: int, name: str, price: Decimal, quantity: int) -> "InventoryDetails":
        return cls(
            resource_id=str(inventory_id) if inventory_id is not None else f"product-{product_id}",
            product_id=product_id,
            product_name=name,
            product_price=price,
            quantity_available=quantity,
        )

class InventoryChangedEvent(BaseModel):
    product_id: int
    quantity: int
