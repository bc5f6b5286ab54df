# shopledger/models/products.py

from sqlalchemy import CheckConstraint, Column, Computed, Index, Integer, String, Numeric, DateTime
from sqlalchemy.sql import func

from shopledger.database import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    cost_price = Column(Numeric(10, 2), nullable=False)
    selling_price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False, default=0)

    # Derived by the database on every write, never set by the application
    total_cost = Column(Numeric(14, 2), Computed("cost_price * quantity", persisted=True))
    total_revenue = Column(Numeric(14, 2), Computed("selling_price * quantity", persisted=True))

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_products_name", "name"),
        Index("ix_products_created_at", "created_at"),
        CheckConstraint("cost_price >= 0", name="ck_cost_price_non_negative"),
        CheckConstraint("selling_price >= 0", name="ck_selling_price_non_negative"),
        CheckConstraint("quantity >= 0", name="ck_quantity_non_negative"),
    )
