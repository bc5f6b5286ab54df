# =========================================================
# FINANCE SERVICE
#
# Profit sharing:
#   net_profit     = income - expenses
#   donation       = net_profit * 2%
#   partner_profit = net_profit - donation
#   share_amount   = partner_profit * share_percentage / 100
#
# Always recomputed from the current ledger; nothing is cached or written.
# A loss is distributed as-is (negative donation and shares).
# =========================================================

from calendar import monthrange
from datetime import date, datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from shopledger.core.constants import DONATION_RATE, MAX_SHARE_PERCENTAGE, STATS_PERIODS
from shopledger.core.errors import ValidationError
from shopledger.models.ledger import Expense, Income
from shopledger.models.partners import Partner
from shopledger.services.ledger import group_totals, sum_amount, totals_by_period
from shopledger.services.partners import get_partner

CENTS = Decimal("0.01")


def _money(value) -> Decimal:
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def _margin(net_profit: Decimal, income: Decimal) -> Decimal:
    if income == 0:
        return Decimal("0.00")
    return ((net_profit / income) * 100).quantize(CENTS, rounding=ROUND_HALF_UP)


def _check_range(start_date: Optional[date], end_date: Optional[date]):
    if start_date and end_date and start_date > end_date:
        raise ValidationError("start_date must not be after end_date")


def split_profit(net_profit: Decimal) -> tuple[Decimal, Decimal]:
    """Return (donation, partner_profit) for a net profit figure."""
    donation = net_profit * DONATION_RATE
    return donation, net_profit - donation


def share_amount(partner_profit: Decimal, share_percentage) -> Decimal:
    return partner_profit * Decimal(share_percentage) / 100


# =========================================================
# OVERVIEW / PROFIT SHARING
# =========================================================
def compute_overview(
    db: Session,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> dict:
    _check_range(start_date, end_date)

    income = sum_amount(db, Income, start_date, end_date)
    expenses = sum_amount(db, Expense, start_date, end_date)

    net_profit = income - expenses
    donation, partner_profit = split_profit(net_profit)

    partners = db.query(Partner).order_by(Partner.created_at.asc(), Partner.id.asc()).all()

    partner_shares = [
        {
            "id": partner.id,
            "name": partner.name,
            "share_percentage": partner.share_percentage,
            "created_at": partner.created_at,
            "share_amount": _money(share_amount(partner_profit, partner.share_percentage)),
        }
        for partner in partners
    ]

    total_share_percentage = sum(
        (Decimal(partner.share_percentage) for partner in partners),
        Decimal("0"),
    )

    return {
        "start_date": start_date,
        "end_date": end_date,
        "income": _money(income),
        "expenses": _money(expenses),
        "net_profit": _money(net_profit),
        "donation": _money(donation),
        "partner_profit": _money(partner_profit),
        "partners": partner_shares,
        "total_share_percentage": total_share_percentage,
        "remaining_share": MAX_SHARE_PERCENTAGE - total_share_percentage,
    }


def partner_stats(db: Session) -> dict:
    overview = compute_overview(db)

    partners = sorted(
        overview["partners"],
        key=lambda item: item["share_percentage"],
        reverse=True,
    )

    return {
        "total_partners": len(partners),
        "total_share_percentage": overview["total_share_percentage"],
        "remaining_share": overview["remaining_share"],
        "partners": partners,
        "net_profit": overview["net_profit"],
        "donation": overview["donation"],
        "partner_profit": overview["partner_profit"],
        "total_distributed": sum(
            (item["share_amount"] for item in partners),
            Decimal("0.00"),
        ),
    }


# =========================================================
# PROFIT & LOSS
# =========================================================
def profit_loss_statement(
    db: Session,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> dict:
    _check_range(start_date, end_date)

    income = sum_amount(db, Income, start_date, end_date)
    expenses = sum_amount(db, Expense, start_date, end_date)
    net_profit = income - expenses

    return {
        "start_date": start_date,
        "end_date": end_date,
        "revenue_total": _money(income),
        "revenue_breakdown": group_totals(
            db, Income, Income.type, start_date=start_date, end_date=end_date
        ),
        "expenses_total": _money(expenses),
        "expenses_breakdown": group_totals(
            db,
            Expense,
            Expense.category,
            only_not_null=True,
            start_date=start_date,
            end_date=end_date,
        ),
        "gross_profit": _money(income),
        "net_profit": _money(net_profit),
        "profit_margin_percentage": _margin(net_profit, income),
    }


# =========================================================
# PERIOD STATISTICS
# =========================================================
def financial_stats(db: Session, period: str = "monthly") -> dict:
    if period not in STATS_PERIODS:
        raise ValidationError("period must be one of monthly, quarterly, yearly")

    top_income_sources = (
        db.query(Income)
        .options(joinedload(Income.product))
        .order_by(Income.amount.desc())
        .limit(10)
        .all()
    )

    income = sum_amount(db, Income)
    expenses = sum_amount(db, Expense)
    net_profit = income - expenses

    return {
        "period": period,
        "income_by_period": totals_by_period(db, Income, period),
        "expenses_by_period": totals_by_period(db, Expense, period),
        "income_by_type": group_totals(db, Income, Income.type),
        "expenses_by_type": group_totals(db, Expense, Expense.type),
        "top_income_sources": top_income_sources,
        "total_income": _money(income),
        "total_expenses": _money(expenses),
        "net_profit": _money(net_profit),
        "profit_margin_percentage": _margin(net_profit, income),
    }


# =========================================================
# MONTHLY WINDOWS (CASH FLOW / PARTNER HISTORY)
# =========================================================
def month_windows(months: int, today: Optional[date] = None) -> list[tuple[date, date]]:
    """Calendar months ending with the current one, newest first."""
    if months < 1 or months > 120:
        raise ValidationError("months must be between 1 and 120")

    today = today or datetime.now(timezone.utc).date()

    windows = []
    for i in range(0, months):
        target_month = today.month - i
        target_year = today.year

        while target_month <= 0:
            target_month += 12
            target_year -= 1

        month_start = date(target_year, target_month, 1)
        month_end = date(target_year, target_month, monthrange(target_year, target_month)[1])
        windows.append((month_start, month_end))

    return windows


def cash_flow(db: Session, months: int = 6, today: Optional[date] = None) -> dict:
    rows = []

    for month_start, month_end in month_windows(months, today):
        income = sum_amount(db, Income, month_start, month_end)
        expenses = sum_amount(db, Expense, month_start, month_end)

        rows.append({
            "month": month_start.strftime("%Y-%m"),
            "income": _money(income),
            "expenses": _money(expenses),
            "net": _money(income - expenses),
        })

    return {
        "months": months,
        "cash_flow": rows,
        "total_income": sum((row["income"] for row in rows), Decimal("0.00")),
        "total_expenses": sum((row["expenses"] for row in rows), Decimal("0.00")),
        "net_cash_flow": sum((row["net"] for row in rows), Decimal("0.00")),
    }


def partner_profit_history(
    db: Session,
    partner_id: int,
    months: int = 6,
    today: Optional[date] = None,
) -> dict:
    partner = get_partner(db, partner_id)

    history = []
    for month_start, month_end in month_windows(months, today):
        income = sum_amount(db, Income, month_start, month_end)
        expenses = sum_amount(db, Expense, month_start, month_end)

        net_profit = income - expenses
        donation, partner_profit = split_profit(net_profit)

        history.append({
            "month": month_start.strftime("%Y-%m"),
            "income": _money(income),
            "expenses": _money(expenses),
            "net_profit": _money(net_profit),
            "donation": _money(donation),
            "partner_profit": _money(partner_profit),
            "partner_share": _money(share_amount(partner_profit, partner.share_percentage)),
        })

    return {
        "partner": partner,
        "history": history,
        "total_income": sum((row["income"] for row in history), Decimal("0.00")),
        "total_expenses": sum((row["expenses"] for row in history), Decimal("0.00")),
        "total_net_profit": sum((row["net_profit"] for row in history), Decimal("0.00")),
        "total_partner_share": sum((row["partner_share"] for row in history), Decimal("0.00")),
    }
