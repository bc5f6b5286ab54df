# schemas/ledger.py

from pydantic import BaseModel, Field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional


EntryType = Literal["manual", "auto"]


class LedgerEntryCreate(BaseModel):
    description: str = Field(..., min_length=1, max_length=500)
    amount: Decimal = Field(..., gt=0, lt=1_000_000_000)
    type: EntryType = "manual"
    product_id: Optional[int] = None


class LedgerEntryUpdate(BaseModel):
    description: Optional[str] = Field(None, min_length=1, max_length=500)
    amount: Optional[Decimal] = Field(None, gt=0, lt=1_000_000_000)
    type: Optional[EntryType] = None
    product_id: Optional[int] = None


class LedgerEntryResponse(BaseModel):
    id: int
    description: str
    amount: Decimal
    type: EntryType
    product_id: Optional[int]
    product_name: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class ExpenseCreate(LedgerEntryCreate):
    category: Optional[str] = Field(None, max_length=100)


class ExpenseUpdate(LedgerEntryUpdate):
    category: Optional[str] = Field(None, max_length=100)


class ExpenseResponse(LedgerEntryResponse):
    category: Optional[str]


class IncomeCreate(LedgerEntryCreate):
    pass


class IncomeUpdate(LedgerEntryUpdate):
    pass


class IncomeResponse(LedgerEntryResponse):
    pass


class EntryFilters(BaseModel):
    type: Optional[EntryType] = None
    category: Optional[str] = None
    product_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class GroupTotal(BaseModel):
    key: Optional[str]
    total: Decimal
    count: int


class ExpenseStatsResponse(BaseModel):
    total: Decimal
    by_type: List[GroupTotal]
    by_category: List[GroupTotal]
    by_month: List[GroupTotal]
    top_expenses: List[ExpenseResponse]
