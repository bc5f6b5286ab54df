# shopledger/services/partners.py
#
# The sum of all partners' share_percentage never exceeds 100.
# The check and the write are a single conditional statement, so two
# concurrent requests cannot both pass a stale sum and then both commit.

import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy import Numeric, String, bindparam, func, insert, literal, select, update
from sqlalchemy.orm import Session

from shopledger.core.constants import MAX_SHARE_PERCENTAGE
from shopledger.core.errors import ConflictError, NotFoundError, ValidationError
from shopledger.models.partners import Partner
from shopledger.schemas.partner import PartnerUpdate
from shopledger.services.common import commit, require_text, to_decimal

logger = logging.getLogger(__name__)

partners_table = Partner.__table__


def _validate(name, share_percentage):
    name = require_text(name, "Partner name cannot be empty")

    share_percentage = to_decimal(share_percentage, "share_percentage")
    if share_percentage < 0 or share_percentage > MAX_SHARE_PERCENTAGE:
        raise ValidationError("Share percentage must be between 0 and 100")

    return name, share_percentage


def _others_total_subquery(exclude_id: Optional[int] = None):
    others = partners_table.alias("others")
    query = select(func.coalesce(func.sum(others.c.share_percentage), 0))

    if exclude_id is not None:
        query = query.where(others.c.id != exclude_id)

    return query.scalar_subquery()


def share_total(db: Session, exclude_id: Optional[int] = None) -> Decimal:
    query = db.query(func.coalesce(func.sum(Partner.share_percentage), 0))

    if exclude_id is not None:
        query = query.filter(Partner.id != exclude_id)

    return Decimal(query.scalar() or 0)


def _over_limit(db: Session, exclude_id: Optional[int] = None):
    current_total = share_total(db, exclude_id)
    logger.warning(f"Partner share write rejected, other partners hold {current_total}%")
    return ConflictError(
        f"Total share percentage cannot exceed 100%. Current total: {current_total}%"
    )


def list_partners(db: Session) -> list[Partner]:
    return db.query(Partner).order_by(Partner.created_at.desc(), Partner.id.desc()).all()


def get_partner(db: Session, partner_id: int) -> Partner:
    partner = db.query(Partner).filter(Partner.id == partner_id).first()

    if partner is None:
        raise NotFoundError("Partner not found")

    return partner


def create_partner(db: Session, *, name: str, share_percentage) -> Partner:
    name, share_percentage = _validate(name, share_percentage)

    share = bindparam("share", value=share_percentage, type_=Numeric(5, 2))
    guard = func.round(_others_total_subquery() + share, 2) <= MAX_SHARE_PERCENTAGE

    stmt = (
        insert(partners_table)
        .from_select(
            ["name", "share_percentage"],
            select(literal(name, String), share).where(guard),
        )
        .returning(partners_table.c.id)
    )

    partner_id = db.execute(stmt).scalar_one_or_none()

    if partner_id is None:
        db.rollback()
        raise _over_limit(db)

    commit(db, "create partner")

    logger.info(f"Partner {partner_id} created with {share_percentage}% share")
    return get_partner(db, partner_id)


def update_partner(db: Session, partner_id: int, changes: PartnerUpdate) -> Partner:
    partner = get_partner(db, partner_id)
    supplied = changes.model_dump(exclude_unset=True)

    name, share_percentage = _validate(
        supplied.get("name", partner.name),
        supplied.get("share_percentage", partner.share_percentage),
    )

    share = bindparam("share", value=share_percentage, type_=Numeric(5, 2))
    guard = func.round(_others_total_subquery(exclude_id=partner_id) + share, 2) <= MAX_SHARE_PERCENTAGE

    stmt = (
        update(partners_table)
        .where(partners_table.c.id == partner_id, guard)
        .values(name=name, share_percentage=share)
    )

    result = db.execute(stmt)

    if result.rowcount == 0:
        db.rollback()
        raise _over_limit(db, exclude_id=partner_id)

    commit(db, "update partner")
    db.refresh(partner)

    return partner


def delete_partner(db: Session, partner_id: int) -> None:
    partner = get_partner(db, partner_id)

    db.delete(partner)
    commit(db, "delete partner")

    logger.info(f"Partner {partner_id} deleted")
