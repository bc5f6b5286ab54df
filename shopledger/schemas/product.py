from decimal import Decimal
from pydantic import BaseModel, Field
from datetime import datetime
from typing import List


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)

    cost_price: Decimal = Field(
        ...,
        ge=0,
        lt=100_000_000,
        description="Cost price must be below 100 million"
    )

    selling_price: Decimal = Field(
        ...,
        ge=0,
        lt=100_000_000,
        description="Selling price must be below 100 million"
    )

    quantity: int = Field(..., ge=0, description="Units in stock")


class ProductUpdate(BaseModel):
    # Only the fields the client actually sends are applied
    name: str | None = Field(None, min_length=1, max_length=200)
    cost_price: Decimal | None = Field(None, ge=0, lt=100_000_000)
    selling_price: Decimal | None = Field(None, ge=0, lt=100_000_000)
    quantity: int | None = Field(None, ge=0)

class ProductResponse(BaseModel):
    id: int
    name: str
    cost_price: Decimal
    selling_price: Decimal
    quantity: int
    total_cost: Decimal
    total_revenue: Decimal
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class InventoryValue(BaseModel):
    total_cost: Decimal
    total_revenue: Decimal


class ProductStatsResponse(BaseModel):
    total_products: int
    inventory_value: InventoryValue
    low_stock_products: List[ProductResponse]
    top_products: List[ProductResponse]
