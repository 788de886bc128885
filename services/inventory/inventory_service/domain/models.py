from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy import BigInteger, CheckConstraint, Integer

class Base(DeclarativeBase):
    pass

class Inventory(Base):
    __tablename__ = "inventory"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_inventory_quantity_non_negative"),
    )
    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    # Product ID - owned by product-service, no foreign key across services
    product_id: Mapped[int] = mapped_column(BigInteger, unique=True, index=True)
    quantity: Mapped[int] = mapped_column(Integer, default=0)
