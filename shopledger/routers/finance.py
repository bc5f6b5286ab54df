# =========================================================
# FINANCE ROUTER
#
# - Income entries (manual and auto)
# - Overview with donation and partner shares
# - Profit & loss, period stats, monthly cash flow
#
# All figures are computed from the ledger on every request.
# =========================================================

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from shopledger.database import get_db
from shopledger.core.auth import get_current_user
from shopledger.models.ledger import Income
from shopledger.services import finance as finance_service
from shopledger.services import ledger as ledger_service
from shopledger.schemas.ledger import (
    EntryFilters,
    EntryType,
    IncomeCreate,
    IncomeUpdate,
    IncomeResponse,
)
from shopledger.schemas.finance import (
    CashFlowResponse,
    FinancialStatsResponse,
    OverviewResponse,
    ProfitLossResponse,
)

router = APIRouter(prefix="/finance", tags=["Finance"])


# =========================================================
# INCOME
# =========================================================
@router.get("/income", response_model=list[IncomeResponse])
def list_income(
    type: Optional[EntryType] = Query(None),
    product_id: Optional[int] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    filters = EntryFilters(
        type=type,
        product_id=product_id,
        start_date=start_date,
        end_date=end_date,
    )
    return ledger_service.list_entries(db, Income, filters)


@router.get("/income/{income_id}", response_model=IncomeResponse)
def get_income(
    income_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return ledger_service.get_entry(db, Income, income_id)


@router.post(
    "/income",
    response_model=IncomeResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_income(
    income_data: IncomeCreate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return ledger_service.create_entry(db, Income, **income_data.model_dump())


@router.put("/income/{income_id}", response_model=IncomeResponse)
def update_income(
    income_id: int,
    income_data: IncomeUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return ledger_service.update_entry(db, Income, income_id, income_data)


@router.delete("/income/{income_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_income(
    income_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    ledger_service.delete_entry(db, Income, income_id)

    return None


# =========================================================
# OVERVIEW
# =========================================================
@router.get("/overview", response_model=OverviewResponse)
def overview(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return finance_service.compute_overview(db, start_date, end_date)


# =========================================================
# REPORTS
# =========================================================
@router.get("/profit-loss", response_model=ProfitLossResponse)
def profit_loss(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return finance_service.profit_loss_statement(db, start_date, end_date)


@router.get("/stats", response_model=FinancialStatsResponse)
def financial_stats(
    period: str = Query("monthly", description="monthly, quarterly or yearly"),
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return finance_service.financial_stats(db, period)


@router.get("/cash-flow", response_model=CashFlowResponse)
def cash_flow(
    months: int = Query(6, ge=1, le=120),
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return finance_service.cash_flow(db, months)
