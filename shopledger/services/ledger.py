# shopledger/services/ledger.py
#
# CRUD and reporting for the two ledger tables. Every function takes the
# entry class (Expense or Income) so both share one validation path.

import logging
from collections import defaultdict
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Optional, Type

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from shopledger.core.constants import ENTRY_TYPES
from shopledger.core.errors import NotFoundError, ValidationError
from shopledger.models.ledger import Expense, Income
from shopledger.models.products import Product
from shopledger.schemas.ledger import EntryFilters, LedgerEntryUpdate
from shopledger.services.common import commit, require_text, to_decimal

logger = logging.getLogger(__name__)

LedgerModel = Type[Expense] | Type[Income]


def _label(model: LedgerModel) -> str:
    return "Expense" if model is Expense else "Income"


def date_range_filter(model: LedgerModel, start_date: Optional[date], end_date: Optional[date]):
    """Inclusive calendar-date bounds on created_at; either bound may be None."""
    conditions = []

    if start_date is not None:
        conditions.append(model.created_at >= datetime.combine(start_date, time.min))

    if end_date is not None:
        next_day = datetime.combine(end_date + timedelta(days=1), time.min)
        conditions.append(model.created_at < next_day)

    return conditions


def sum_amount(db: Session, model: LedgerModel, start_date=None, end_date=None) -> Decimal:
    total = (
        db.query(func.coalesce(func.sum(model.amount), 0))
        .filter(*date_range_filter(model, start_date, end_date))
        .scalar()
    )
    return Decimal(total or 0)


def validate_entry(db: Session, description, amount, entry_type, product_id):
    description = require_text(description, "Description cannot be empty")

    amount = to_decimal(amount, "amount")
    if amount <= 0:
        raise ValidationError("Amount must be greater than 0")

    if entry_type not in ENTRY_TYPES:
        raise ValidationError("Type must be either manual or auto")

    if product_id is not None:
        exists = db.query(Product.id).filter(Product.id == product_id).first()
        if exists is None:
            raise ValidationError("Invalid product ID")

    return description, amount


def create_entry(
    db: Session,
    model: LedgerModel,
    *,
    description: str,
    amount,
    type: str = "manual",
    product_id: Optional[int] = None,
    category: Optional[str] = None,
):
    description, amount = validate_entry(db, description, amount, type, product_id)

    fields = {
        "description": description,
        "amount": amount,
        "type": type,
        "product_id": product_id,
    }
    if model is Expense:
        fields["category"] = category.strip() if category and category.strip() else None

    entry = model(**fields)
    db.add(entry)
    commit(db, f"create {_label(model).lower()}")
    db.refresh(entry)

    return entry


def get_entry(db: Session, model: LedgerModel, entry_id: int):
    entry = (
        db.query(model)
        .options(joinedload(model.product))
        .filter(model.id == entry_id)
        .first()
    )

    if entry is None:
        raise NotFoundError(f"{_label(model)} not found")

    return entry


def list_entries(db: Session, model: LedgerModel, filters: Optional[EntryFilters] = None):
    filters = filters or EntryFilters()

    query = db.query(model).options(joinedload(model.product))

    if filters.type:
        query = query.filter(model.type == filters.type)

    if filters.category and model is Expense:
        query = query.filter(Expense.category == filters.category)

    if filters.product_id is not None:
        query = query.filter(model.product_id == filters.product_id)

    query = query.filter(*date_range_filter(model, filters.start_date, filters.end_date))

    return query.order_by(model.created_at.desc(), model.id.desc()).all()


def update_entry(db: Session, model: LedgerModel, entry_id: int, changes: LedgerEntryUpdate):
    entry = get_entry(db, model, entry_id)
    supplied = changes.model_dump(exclude_unset=True)

    if not supplied:
        raise ValidationError("No fields to update")

    description, amount = validate_entry(
        db,
        supplied.get("description", entry.description),
        supplied.get("amount", entry.amount),
        supplied.get("type", entry.type),
        supplied.get("product_id", entry.product_id),
    )

    entry.description = description
    entry.amount = amount

    if "type" in supplied:
        entry.type = supplied["type"]

    if "product_id" in supplied:
        entry.product_id = supplied["product_id"]

    if "category" in supplied and model is Expense:
        category = supplied["category"]
        entry.category = category.strip() if category and category.strip() else None

    commit(db, f"update {_label(model).lower()}")
    db.refresh(entry)

    return entry


def delete_entry(db: Session, model: LedgerModel, entry_id: int) -> None:
    entry = get_entry(db, model, entry_id)

    db.delete(entry)
    commit(db, f"delete {_label(model).lower()}")

    logger.info(f"{_label(model)} {entry_id} deleted")


def group_totals(
    db: Session,
    model: LedgerModel,
    column,
    only_not_null: bool = False,
    start_date=None,
    end_date=None,
):
    query = db.query(
        column.label("key"),
        func.coalesce(func.sum(model.amount), 0).label("total"),
        func.count(model.id).label("count"),
    ).filter(*date_range_filter(model, start_date, end_date))

    if only_not_null:
        query = query.filter(column.isnot(None))

    rows = query.group_by(column).order_by(func.sum(model.amount).desc()).all()

    return [
        {"key": row.key, "total": Decimal(row.total or 0), "count": row.count}
        for row in rows
    ]


def period_key(moment: datetime, period: str = "monthly") -> str:
    if period == "yearly":
        return f"{moment.year:04d}"
    if period == "quarterly":
        return f"{moment.year:04d}-Q{(moment.month - 1) // 3 + 1}"
    return f"{moment.year:04d}-{moment.month:02d}"


def totals_by_period(db: Session, model: LedgerModel, period: str = "monthly", limit: int = 12):
    """Sum and count entries per calendar period, newest period first."""
    buckets = defaultdict(lambda: {"total": Decimal("0"), "count": 0})

    for created_at, amount in db.query(model.created_at, model.amount).all():
        bucket = buckets[period_key(created_at, period)]
        bucket["total"] += Decimal(amount or 0)
        bucket["count"] += 1

    keys = sorted(buckets, reverse=True)[:limit]

    return [{"key": key, **buckets[key]} for key in keys]


def expense_stats(db: Session, start_date=None, end_date=None) -> dict:
    top_expenses = (
        db.query(Expense)
        .options(joinedload(Expense.product))
        .filter(*date_range_filter(Expense, start_date, end_date))
        .order_by(Expense.amount.desc())
        .limit(10)
        .all()
    )

    return {
        "total": sum_amount(db, Expense, start_date, end_date),
        "by_type": group_totals(db, Expense, Expense.type, start_date=start_date, end_date=end_date),
        "by_category": group_totals(
            db,
            Expense,
            Expense.category,
            only_not_null=True,
            start_date=start_date,
            end_date=end_date,
        ),
        "by_month": totals_by_period(db, Expense, "monthly"),
        "top_expenses": top_expenses,
    }


def expense_categories(db: Session) -> list[str]:
    rows = (
        db.query(Expense.category)
        .filter(Expense.category.isnot(None))
        .distinct()
        .order_by(Expense.category)
        .all()
    )
    return [row.category for row in rows]
