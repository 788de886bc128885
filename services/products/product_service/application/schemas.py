from dataclasses import dataclass
from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import BaseModel, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from shared.core.jsonapi import DocumentIn
from product_service.domain.models import Product

PRODUCT_TYPE = "products"

# Prices travel as JSON numbers, not strings
Price = Annotated[
    Decimal,
    Field(ge=0, max_digits=10, decimal_places=2),
    PlainSerializer(float, return_type=float, when_used="json"),
]

class ProductCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    price: Price

class ProductUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    price: Optional[Price] = None

class ProductAttributes(BaseModel):
    name: str
    price: Price

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True

class ProductCreateDocument(DocumentIn[ProductCreate]):
    pass

class ProductUpdateDocument(DocumentIn[ProductUpdate]):
    pass

@dataclass
class ProductPage:
    items: List[Product]
    page: int
    size: int
    total_elements: int

    @property
    def total_pages(self) -> int:
        return -(-self.total_elements // self.size) if self.size else 0

    @property
    def has_previous(self) -> bool:
        return self.page > 0

    @property
    def has_next(self) -> bool:
        return self.page + 1 < self.total_pages
