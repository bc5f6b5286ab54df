# shopledger/services/products.py
#
# Product lifecycle: every stock change that adds inventory value is
# mirrored into the ledger as "auto" expense/income rows. Auto rows are
# append-only. A quantity decrease writes nothing (no reversal entries).

import logging
from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shopledger.core.constants import LOW_STOCK_THRESHOLD, PRODUCT_COST_CATEGORY
from shopledger.core.errors import NotFoundError, StoreError, ValidationError
from shopledger.models.ledger import Expense, Income
from shopledger.models.products import Product
from shopledger.schemas.product import ProductUpdate
from shopledger.services.common import commit, require_text, to_decimal

logger = logging.getLogger(__name__)


def _validate_fields(name, cost_price, selling_price, quantity):
    name = require_text(name, "Product name cannot be empty")

    cost_price = to_decimal(cost_price, "cost_price")
    selling_price = to_decimal(selling_price, "selling_price")

    quantity = to_decimal(quantity, "quantity")
    if quantity != quantity.to_integral_value():
        raise ValidationError("quantity must be a whole number")

    if cost_price < 0 or selling_price < 0 or quantity < 0:
        raise ValidationError("Prices and quantity must be non-negative")

    return name, cost_price, selling_price, int(quantity)


def _auto_expense(product_id: int, description: str, amount: Decimal) -> Expense:
    return Expense(
        description=description,
        amount=amount,
        type="auto",
        category=PRODUCT_COST_CATEGORY,
        product_id=product_id,
    )


def _auto_income(product_id: int, description: str, amount: Decimal) -> Income:
    return Income(
        description=description,
        amount=amount,
        type="auto",
        product_id=product_id,
    )


def get_product(db: Session, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()

    if product is None:
        raise NotFoundError("Product not found")

    return product


def list_products(db: Session, search: str | None = None) -> list[Product]:
    query = db.query(Product)

    if search and search.strip():
        query = query.filter(Product.name.ilike(f"%{search.strip()}%"))

    return query.order_by(Product.created_at.desc(), Product.id.desc()).all()


def create_product(
    db: Session,
    *,
    name: str,
    cost_price,
    selling_price,
    quantity: int,
) -> Product:
    """Insert a product and, for a non-empty stock, its opening auto entries.

    The product row and its ledger rows are committed together.
    """
    name, cost_price, selling_price, quantity = _validate_fields(
        name, cost_price, selling_price, quantity
    )

    try:
        product = Product(
            name=name,
            cost_price=cost_price,
            selling_price=selling_price,
            quantity=quantity,
        )
        db.add(product)
        db.flush()

        # A zero price gives a zero amount, which the ledger does not store
        opening_cost = cost_price * quantity
        if opening_cost > 0:
            db.add(_auto_expense(product.id, f"Product cost for {name}", opening_cost))

        opening_revenue = selling_price * quantity
        if opening_revenue > 0:
            db.add(_auto_income(product.id, f"Product revenue for {name}", opening_revenue))

        db.flush()

    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"Unable to create product {name!r}: {exc}")
        raise StoreError("Unable to create product")

    commit(db, "create product")
    db.refresh(product)

    logger.info(f"Product {product.id} created with quantity {quantity}")
    return product


def update_product(db: Session, product_id: int, changes: ProductUpdate) -> Product:
    """Apply the supplied fields to a product.

    A positive quantity difference appends one auto expense
    (new cost price x difference) and one auto income
    (new selling price x difference).
    """
    product = get_product(db, product_id)
    supplied = changes.model_dump(exclude_unset=True)

    name, cost_price, selling_price, quantity = _validate_fields(
        supplied.get("name", product.name),
        supplied.get("cost_price", product.cost_price),
        supplied.get("selling_price", product.selling_price),
        supplied.get("quantity", product.quantity),
    )

    quantity_diff = quantity - product.quantity

    try:
        product.name = name
        product.cost_price = cost_price
        product.selling_price = selling_price
        product.quantity = quantity

        if quantity_diff != 0:
            cost_diff = cost_price * quantity_diff
            if cost_diff > 0:
                db.add(_auto_expense(product.id, f"Quantity update cost for {name}", cost_diff))

            revenue_diff = selling_price * quantity_diff
            if revenue_diff > 0:
                db.add(_auto_income(product.id, f"Quantity update revenue for {name}", revenue_diff))

        db.flush()

    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"Unable to update product {product_id}: {exc}")
        raise StoreError("Unable to update product")

    commit(db, "update product")
    db.refresh(product)

    return product


def delete_product(db: Session, product_id: int) -> None:
    product = get_product(db, product_id)

    # Ledger rows keep their history; the FK sets product_id to NULL
    db.delete(product)
    commit(db, "delete product")

    logger.info(f"Product {product_id} deleted")


def product_stats(db: Session) -> dict:
    total_products = db.query(func.count(Product.id)).scalar()

    total_cost, total_revenue = db.query(
        func.coalesce(func.sum(Product.total_cost), 0),
        func.coalesce(func.sum(Product.total_revenue), 0),
    ).one()

    low_stock_products = (
        db.query(Product)
        .filter(Product.quantity < LOW_STOCK_THRESHOLD)
        .order_by(Product.quantity.asc())
        .all()
    )

    top_products = (
        db.query(Product)
        .order_by(Product.total_revenue.desc())
        .limit(5)
        .all()
    )

    return {
        "total_products": total_products,
        "inventory_value": {
            "total_cost": Decimal(total_cost or 0),
            "total_revenue": Decimal(total_revenue or 0),
        },
        "low_stock_products": low_stock_products,
        "top_products": top_products,
    }
