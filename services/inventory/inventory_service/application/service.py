from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from shared.core import ValidationError, get_logger
from inventory_service.domain.models import Inventory
from inventory_service.infrastructure.product_client import ProductServiceClient
from .schemas import InventoryChangedEvent, InventoryDetails

logger = get_logger(__name__)

class InventoryService:
    def __init__(self, db: Session, product_client: ProductServiceClient):
        self.db = db
        self.product_client = product_client

    def find_by_product_id(self, product_id: int) -> Optional[Inventory]:
        return self.db.scalars(
            select(Inventory).where(Inventory.product_id == product_id)
        ).first()

    def get_inventory_details(self, product_id: int) -> Optional[InventoryDetails]:
        """
        Combine the remote product with the local stock level.

        Returns ``None`` when product-service does not know the product, even
        if a local inventory row exists. A product without a local row is
        reported with quantity 0; no row is created for it.
        """
        product = self.product_client.fetch_product(product_id)
        if product is None:
            logger.warning(f"Product {product_id} not found in product service")
            return None

        inventory = self.find_by_product_id(product_id)
        if inventory is None:
            logger.info(f"No local inventory for product {product_id}, assuming quantity 0")
            inventory_id, quantity = None, 0
        else:
            inventory_id, quantity = inventory.id, inventory.quantity

        logger.info(f"Inventory for product {product_id}: quantity={quantity} name={product.name!r}")
        return InventoryDetails.merge(inventory_id, product_id, product.name, product.price, quantity)

    def update_inventory_quantity(self, product_id: int, new_quantity: int) -> Inventory:
        """Set (not adjust) the stock level of a product, creating the row if needed."""
        if new_quantity < 0:
            raise ValidationError("Quantity cannot be negative", field="quantity")

        inventory = self.find_by_product_id(product_id)
        if inventory is not None:
            logger.info(
                f"Updating inventory for product {product_id}: {inventory.quantity} -> {new_quantity}"
            )
            inventory.quantity = new_quantity
        else:
            logger.info(f"Creating inventory for product {product_id} with quantity {new_quantity}")
            inventory = Inventory(product_id=product_id, quantity=new_quantity)
            self.db.add(inventory)

        self.db.commit()
        self.db.refresh(inventory)

        self._emit_inventory_changed(InventoryChangedEvent(product_id=inventory.product_id, quantity=inventory.quantity))
        return inventory

    def _emit_inventory_changed(self, event: InventoryChangedEvent) -> None:
        logger.info(
            f"Inventory changed: product {event.product_id} quantity is now {event.quantity}",
            extra={'extra_fields': {'event_type': 'inventory.changed', **event.model_dump()}}
        )
