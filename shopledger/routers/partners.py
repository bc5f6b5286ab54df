# shopledger/routers/partners.py
#
# Owner-only. Share percentages across all partners never add up to more
# than 100; the service rejects the write with 409 otherwise.

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from shopledger.database import get_db
from shopledger.core.auth import get_owner_user
from shopledger.services import finance as finance_service
from shopledger.services import partners as partner_service
from shopledger.schemas.partner import (
    PartnerCreate,
    PartnerUpdate,
    PartnerResponse,
)
from shopledger.schemas.finance import (
    OverviewResponse,
    PartnerHistoryResponse,
    PartnerStatsResponse,
)

router = APIRouter(
    prefix="/partners",
    tags=["Partners"],
)


# ---------------- PROFIT SHARING ----------------
@router.get("/profit-sharing", response_model=OverviewResponse)
def profit_sharing(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    owner=Depends(get_owner_user),
):
    return finance_service.compute_overview(db, start_date, end_date)


@router.get("/stats/summary", response_model=PartnerStatsResponse)
def partner_stats(
    db: Session = Depends(get_db),
    owner=Depends(get_owner_user),
):
    return finance_service.partner_stats(db)


@router.get("/profit-history", response_model=PartnerHistoryResponse)
def profit_history(
    partner_id: int = Query(...),
    months: int = Query(6, ge=1, le=120),
    db: Session = Depends(get_db),
    owner=Depends(get_owner_user),
):
    return finance_service.partner_profit_history(db, partner_id, months)


# ---------------- CRUD ----------------
@router.get("", response_model=list[PartnerResponse])
def list_partners(
    db: Session = Depends(get_db),
    owner=Depends(get_owner_user),
):
    return partner_service.list_partners(db)


@router.get("/{partner_id}", response_model=PartnerResponse)
def get_partner(
    partner_id: int,
    db: Session = Depends(get_db),
    owner=Depends(get_owner_user),
):
    return partner_service.get_partner(db, partner_id)


@router.post(
    "",
    response_model=PartnerResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_partner(
    partner_data: PartnerCreate,
    db: Session = Depends(get_db),
    owner=Depends(get_owner_user),
):
    return partner_service.create_partner(
        db,
        name=partner_data.name,
        share_percentage=partner_data.share_percentage,
    )


@router.put("/{partner_id}", response_model=PartnerResponse)
def update_partner(
    partner_id: int,
    partner_data: PartnerUpdate,
    db: Session = Depends(get_db),
    owner=Depends(get_owner_user),
):
    return partner_service.update_partner(db, partner_id, partner_data)


@router.delete("/{partner_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_partner(
    partner_id: int,
    db: Session = Depends(get_db),
    owner=Depends(get_owner_user),
):
    partner_service.delete_partner(db, partner_id)

    return None
