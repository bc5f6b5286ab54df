# shopledger/routers/products.py

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from shopledger.database import get_db
from shopledger.core.auth import get_current_user
from shopledger.services import products as product_service
from shopledger.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductStatsResponse,
)

router = APIRouter(
    prefix="/products",
    tags=["Products"],
)


@router.get("/stats/summary", response_model=ProductStatsResponse)
def product_stats(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return product_service.product_stats(db)


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_product(
    product_data: ProductCreate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    # Stock on hand at creation is booked as auto expense + income
    return product_service.create_product(
        db,
        name=product_data.name,
        cost_price=product_data.cost_price,
        selling_price=product_data.selling_price,
        quantity=product_data.quantity,
    )


@router.get("", response_model=list[ProductResponse])
def list_products(
    search: Optional[str] = Query(None, description="Case-insensitive name filter"),
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return product_service.list_products(db, search=search)


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return product_service.get_product(db, product_id)


@router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: int,
    product_data: ProductUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return product_service.update_product(db, product_id, product_data)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    # Ledger rows stay; their product_id is set to NULL
    product_service.delete_product(db, product_id)

    return None
