from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal
from typing import Optional


class PartnerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    share_percentage: Decimal = Field(..., ge=0, le=100, description="Share of post-donation profit")


class PartnerUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    share_percentage: Optional[Decimal] = Field(None, ge=0, le=100)


class PartnerResponse(BaseModel):
    id: int
    name: str
    share_percentage: Decimal
    created_at: datetime

    class Config:
        from_attributes = True


class PartnerShareResponse(PartnerResponse):
    share_amount: Decimal
