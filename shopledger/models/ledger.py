# shopledger/models/ledger.py
#
# Expenses and income share one row shape. They stay two tables and two
# classes; the mixin only carries the common columns and constraints.

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import declared_attr, relationship
from sqlalchemy.sql import func

from shopledger.database import Base


class LedgerEntryMixin:
    id = Column(Integer, primary_key=True, index=True)
    description = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    type = Column(String, nullable=False, default="manual")

    # Written from Python so date-range filters compare one timestamp format
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
        nullable=False,
    )

    @declared_attr
    def product_id(cls):
        # Entries outlive the product they were generated for
        return Column(
            Integer,
            ForeignKey("products.id", ondelete="SET NULL"),
            nullable=True,
        )

    @declared_attr
    def product(cls):
        return relationship("Product")

    @declared_attr
    def __table_args__(cls):
        table = cls.__tablename__
        return (
            CheckConstraint("amount > 0", name=f"ck_{table}_amount_positive"),
            CheckConstraint("type IN ('manual', 'auto')", name=f"ck_{table}_type_valid"),
            Index(f"ix_{table}_type", "type"),
            Index(f"ix_{table}_created_at", "created_at"),
            Index(f"ix_{table}_product_id", "product_id"),
        )

    @property
    def product_name(self):
        return self.product.name if self.product is not None else None


class Expense(LedgerEntryMixin, Base):
    __tablename__ = "expenses"

    category = Column(String, nullable=True, index=True)


class Income(LedgerEntryMixin, Base):
    __tablename__ = "income"
