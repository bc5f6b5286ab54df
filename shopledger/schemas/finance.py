from pydantic import BaseModel
from datetime import date
from decimal import Decimal
from typing import List, Optional

from shopledger.schemas.ledger import GroupTotal, IncomeResponse
from shopledger.schemas.partner import PartnerResponse, PartnerShareResponse


class OverviewResponse(BaseModel):
    start_date: Optional[date]
    end_date: Optional[date]
    income: Decimal
    expenses: Decimal
    net_profit: Decimal
    donation: Decimal
    partner_profit: Decimal
    partners: List[PartnerShareResponse]
    total_share_percentage: Decimal
    remaining_share: Decimal


class ProfitLossResponse(BaseModel):
    start_date: Optional[date]
    end_date: Optional[date]
    revenue_total: Decimal
    revenue_breakdown: List[GroupTotal]
    expenses_total: Decimal
    expenses_breakdown: List[GroupTotal]
    gross_profit: Decimal
    net_profit: Decimal
    profit_margin_percentage: Decimal


class FinancialStatsResponse(BaseModel):
    period: str
    income_by_period: List[GroupTotal]
    expenses_by_period: List[GroupTotal]
    income_by_type: List[GroupTotal]
    expenses_by_type: List[GroupTotal]
    top_income_sources: List[IncomeResponse]
    total_income: Decimal
    total_expenses: Decimal
    net_profit: Decimal
    profit_margin_percentage: Decimal


class CashFlowMonth(BaseModel):
    month: str
    income: Decimal
    expenses: Decimal
    net: Decimal


class CashFlowResponse(BaseModel):
    months: int
    cash_flow: List[CashFlowMonth]
    total_income: Decimal
    total_expenses: Decimal
    net_cash_flow: Decimal


class PartnerHistoryMonth(BaseModel):
    month: str
    income: Decimal
    expenses: Decimal
    net_profit: Decimal
    donation: Decimal
    partner_profit: Decimal
    partner_share: Decimal


class PartnerHistoryResponse(BaseModel):
    partner: PartnerResponse
    history: List[PartnerHistoryMonth]
    total_income: Decimal
    total_expenses: Decimal
    total_net_profit: Decimal
    total_partner_share: Decimal


class PartnerStatsResponse(BaseModel):
    total_partners: int
    total_share_percentage: Decimal
    remaining_share: Decimal
    partners: List[PartnerShareResponse]
    net_profit: Decimal
    donation: Decimal
    partner_profit: Decimal
    total_distributed: Decimal
