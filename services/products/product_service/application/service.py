from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from shared.core import NotFoundError, get_logger
from product_service.domain.models import Product
from .schemas import ProductCreate, ProductPage, ProductUpdate

logger = get_logger(__name__)

class ProductService:
    def __init__(self, db: Session):
        self.db = db

    def get(self, product_id: int) -> Optional[Product]:
        return self.db.get(Product, product_id)

    def get_or_raise(self, product_id: int) -> Product:
        product = self.get(product_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    def list_page(self, page: int, size: int) -> ProductPage:
        total = self.db.scalar(select(func.count()).select_from(Product)) or 0
        offset = page * size
        items = []
        # Pages past the end are empty without querying the database.
        if offset < total:
            items = self.db.scalars(
                select(Product).order_by(Product.id).offset(offset).limit(size)
            ).all()
        logger.info(f"Listing products page={page} size={size} total={total}")
        return ProductPage(items=list(items), page=page, size=size, total_elements=total)

    def create(self, data: ProductCreate) -> Product:
        obj = Product(**data.model_dump())
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        logger.info(f"Product created: {obj.id}")
        return obj

    def update(self, product_id: int, data: ProductUpdate) -> Product:
        """Merge the attributes present in ``data`` into the stored product."""
        product = self.get_or_raise(product_id)
        changes = data.model_dump(exclude_none=True)
        for field, value in changes.items():
            setattr(product, field, value)
        self.db.commit()
        self.db.refresh(product)
        logger.info(f"Product updated: {product_id} fields={sorted(changes)}")
        return product

    def delete(self, product_id: int) -> None:
        product = self.get_or_raise(product_id)
        self.db.delete(product)
        self.db.commit()
        logger.info(f"Product deleted: {product_id}")
