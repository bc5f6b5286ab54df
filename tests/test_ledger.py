from datetime import date, datetime
from decimal import Decimal

import pytest

from shopledger.core.errors import NotFoundError, ValidationError
from shopledger.models.ledger import Expense, Income
from shopledger.schemas.ledger import EntryFilters, ExpenseUpdate
from shopledger.services import ledger as ledger_service
from shopledger.services import products as product_service


def test_create_manual_expense(db):
    expense = ledger_service.create_entry(
        db, Expense, description=" Rent ", amount=Decimal("1200"), category=" rent "
    )

    assert expense.description == "Rent"
    assert expense.type == "manual"
    assert expense.category == "rent"
    assert expense.product_id is None


def test_entry_validation(db):
    with pytest.raises(ValidationError, match="Amount must be greater than 0"):
        ledger_service.create_entry(db, Income, description="Tip", amount=Decimal("0"))

    with pytest.raises(ValidationError, match="Description cannot be empty"):
        ledger_service.create_entry(db, Income, description="  ", amount=Decimal("5"))

    with pytest.raises(ValidationError, match="Type must be either manual or auto"):
        ledger_service.create_entry(
            db, Income, description="Tip", amount=Decimal("5"), type="refund"
        )

    with pytest.raises(ValidationError, match="Invalid product ID"):
        ledger_service.create_entry(
            db, Expense, description="Bag", amount=Decimal("5"), product_id=404
        )


def test_entry_linked_to_product(db):
    product = product_service.create_product(
        db, name="Oil", cost_price=Decimal("3"), selling_price=Decimal("4"), quantity=0
    )

    income = ledger_service.create_entry(
        db, Income, description="Bulk order", amount=Decimal("40"), product_id=product.id
    )

    assert ledger_service.get_entry(db, Income, income.id).product_name == "Oil"


def test_list_entries_filters(db):
    db.add_all([
        Expense(description="Old", amount=Decimal("10"), created_at=datetime(2026, 1, 5)),
        Expense(description="Stock", amount=Decimal("20"), type="auto", category="product_cost",
                created_at=datetime(2026, 2, 5)),
        Expense(description="Power", amount=Decimal("30"), category="utilities",
                created_at=datetime(2026, 2, 20)),
    ])
    db.commit()

    by_type = ledger_service.list_entries(db, Expense, EntryFilters(type="auto"))
    assert [e.description for e in by_type] == ["Stock"]

    by_date = ledger_service.list_entries(
        db, Expense, EntryFilters(start_date=date(2026, 2, 1), end_date=date(2026, 2, 28))
    )
    assert [e.description for e in by_date] == ["Power", "Stock"]

    by_category = ledger_service.list_entries(db, Expense, EntryFilters(category="utilities"))
    assert [e.description for e in by_category] == ["Power"]


def test_update_entry(db):
    expense = ledger_service.create_entry(db, Expense, description="Rent", amount=Decimal("100"))

    updated = ledger_service.update_entry(
        db, Expense, expense.id, ExpenseUpdate(amount=Decimal("150"), category="rent")
    )

    assert updated.amount == Decimal("150")
    assert updated.description == "Rent"
    assert updated.category == "rent"

    with pytest.raises(ValidationError, match="No fields to update"):
        ledger_service.update_entry(db, Expense, expense.id, ExpenseUpdate())


def test_missing_entry(db):
    with pytest.raises(NotFoundError, match="Expense not found"):
        ledger_service.get_entry(db, Expense, 1)

    with pytest.raises(NotFoundError, match="Income not found"):
        ledger_service.delete_entry(db, Income, 1)


def test_expense_stats_and_categories(db):
    ledger_service.create_entry(db, Expense, description="Rent", amount=Decimal("500"), category="rent")
    ledger_service.create_entry(db, Expense, description="Water", amount=Decimal("40"), category="utilities")
    ledger_service.create_entry(db, Expense, description="Snacks", amount=Decimal("10"))

    stats = ledger_service.expense_stats(db)

    assert stats["total"] == Decimal("550")
    assert [row["key"] for row in stats["by_category"]] == ["rent", "utilities"]
    assert stats["by_type"] == [{"key": "manual", "total": Decimal("550"), "count": 3}]
    assert stats["top_expenses"][0].description == "Rent"
    assert ledger_service.expense_categories(db) == ["rent", "utilities"]


@pytest.mark.parametrize(
    "moment, period, key",
    [
        (datetime(2026, 11, 3), "monthly", "2026-11"),
        (datetime(2026, 11, 3), "quarterly", "2026-Q4"),
        (datetime(2026, 4, 1), "quarterly", "2026-Q2"),
        (datetime(2026, 11, 3), "yearly", "2026"),
    ],
)
def test_period_key(moment, period, key):
    assert ledger_service.period_key(moment, period) == key


# ---------------- HTTP ----------------
def test_expense_endpoints(client, staff_headers):
    response = client.post(
        "/expenses",
        json={"description": "Delivery", "amount": "12.50", "category": "transport"},
        headers=staff_headers,
    )
    assert response.status_code == 201
    expense_id = response.json()["id"]

    response = client.put(
        f"/expenses/{expense_id}", json={"amount": "15"}, headers=staff_headers
    )
    assert Decimal(response.json()["amount"]) == Decimal("15")

    response = client.get("/expenses/categories/list", headers=staff_headers)
    assert response.json() == ["transport"]

    response = client.get("/expenses/stats/summary", headers=staff_headers)
    assert Decimal(response.json()["total"]) == Decimal("15")

    response = client.post(
        "/expenses", json={"description": "Free", "amount": 0}, headers=staff_headers
    )
    assert response.status_code == 422

    response = client.delete(f"/expenses/{expense_id}", headers=staff_headers)
    assert response.status_code == 204
