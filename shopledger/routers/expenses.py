# shopledger/routers/expenses.py

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from shopledger.database import get_db
from shopledger.core.auth import get_current_user
from shopledger.models.ledger import Expense
from shopledger.services import ledger as ledger_service
from shopledger.schemas.ledger import (
    EntryFilters,
    EntryType,
    ExpenseCreate,
    ExpenseUpdate,
    ExpenseResponse,
    ExpenseStatsResponse,
)

router = APIRouter(
    prefix="/expenses",
    tags=["Expenses"],
)


# =========================================================
# STATS
# =========================================================
@router.get("/stats/summary", response_model=ExpenseStatsResponse)
def expense_stats(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return ledger_service.expense_stats(db, start_date, end_date)


@router.get("/categories/list", response_model=list[str])
def expense_categories(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return ledger_service.expense_categories(db)


# =========================================================
# CRUD
# =========================================================
@router.get("", response_model=list[ExpenseResponse])
def list_expenses(
    type: Optional[EntryType] = Query(None),
    category: Optional[str] = Query(None),
    product_id: Optional[int] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    filters = EntryFilters(
        type=type,
        category=category,
        product_id=product_id,
        start_date=start_date,
        end_date=end_date,
    )
    return ledger_service.list_entries(db, Expense, filters)


@router.get("/{expense_id}", response_model=ExpenseResponse)
def get_expense(
    expense_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return ledger_service.get_entry(db, Expense, expense_id)


@router.post(
    "",
    response_model=ExpenseResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_expense(
    expense_data: ExpenseCreate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return ledger_service.create_entry(db, Expense, **expense_data.model_dump())


@router.put("/{expense_id}", response_model=ExpenseResponse)
def update_expense(
    expense_id: int,
    expense_data: ExpenseUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return ledger_service.update_entry(db, Expense, expense_id, expense_data)


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_expense(
    expense_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    ledger_service.delete_entry(db, Expense, expense_id)

    return None
