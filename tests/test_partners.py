from decimal import Decimal

import pytest
from sqlalchemy.orm import sessionmaker

from shopledger.core.errors import ConflictError, NotFoundError, ValidationError
from shopledger.database import Base, build_engine
from shopledger.models.partners import Partner
from shopledger.schemas.partner import PartnerUpdate
from shopledger.services import partners as partner_service


def test_create_partner(db):
    partner = partner_service.create_partner(db, name="  Alice ", share_percentage=Decimal("40"))

    assert partner.id is not None
    assert partner.name == "Alice"
    assert partner.share_percentage == Decimal("40")
    assert partner_service.share_total(db) == Decimal("40")


def test_total_can_reach_exactly_one_hundred(db):
    partner_service.create_partner(db, name="A", share_percentage=Decimal("33.33"))
    partner_service.create_partner(db, name="B", share_percentage=Decimal("33.33"))
    partner_service.create_partner(db, name="C", share_percentage=Decimal("33.34"))

    assert partner_service.share_total(db) == Decimal("100")


def test_create_over_limit_is_rejected_and_store_unchanged(db):
    partner_service.create_partner(db, name="A", share_percentage=Decimal("60"))

    with pytest.raises(ConflictError, match="Current total: 60"):
        partner_service.create_partner(db, name="B", share_percentage=Decimal("50"))

    assert [p.name for p in partner_service.list_partners(db)] == ["A"]
    assert partner_service.share_total(db) == Decimal("60")


def test_create_rejects_out_of_range_share(db):
    with pytest.raises(ValidationError):
        partner_service.create_partner(db, name="A", share_percentage=Decimal("101"))

    with pytest.raises(ValidationError):
        partner_service.create_partner(db, name="A", share_percentage=Decimal("-1"))

    with pytest.raises(ValidationError, match="Partner name cannot be empty"):
        partner_service.create_partner(db, name=" ", share_percentage=Decimal("10"))


def test_update_excludes_own_current_share(db):
    partner = partner_service.create_partner(db, name="A", share_percentage=Decimal("60"))

    updated = partner_service.update_partner(
        db, partner.id, PartnerUpdate(share_percentage=Decimal("100"))
    )

    assert updated.share_percentage == Decimal("100")


def test_update_over_limit_is_rejected(db):
    a = partner_service.create_partner(db, name="A", share_percentage=Decimal("50"))
    partner_service.create_partner(db, name="B", share_percentage=Decimal("50"))

    with pytest.raises(ConflictError):
        partner_service.update_partner(db, a.id, PartnerUpdate(share_percentage=Decimal("60")))

    db.expire_all()
    assert partner_service.get_partner(db, a.id).share_percentage == Decimal("50")

    renamed = partner_service.update_partner(db, a.id, PartnerUpdate(name="Alice"))
    assert renamed.name == "Alice"
    assert renamed.share_percentage == Decimal("50")


def test_delete_partner_frees_share(db):
    a = partner_service.create_partner(db, name="A", share_percentage=Decimal("70"))

    partner_service.delete_partner(db, a.id)

    assert partner_service.share_total(db) == Decimal("0")
    with pytest.raises(NotFoundError):
        partner_service.get_partner(db, a.id)


def test_share_guard_reads_committed_state_not_callers_snapshot(tmp_path):
    # Two sessions on one file database stand in for two concurrent requests.
    # The first reads the total, the second commits in between, and the
    # first write must still be refused because the guard runs inside it.
    engine = build_engine(f"sqlite:///{tmp_path / 'race.db'}")
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    first, second = Session(), Session()
    try:
        partner_service.create_partner(first, name="A", share_percentage=Decimal("50"))

        assert partner_service.share_total(first) + Decimal("40") <= 100

        partner_service.create_partner(second, name="B", share_percentage=Decimal("50"))

        with pytest.raises(ConflictError):
            partner_service.create_partner(first, name="C", share_percentage=Decimal("40"))

        assert first.query(Partner).count() == 2
        assert partner_service.share_total(first) == Decimal("100")
    finally:
        first.close()
        second.close()
        engine.dispose()


# ---------------- HTTP ----------------
def test_partner_endpoints_are_owner_only(client, staff_headers):
    assert client.get("/partners", headers=staff_headers).status_code == 403

    response = client.post(
        "/partners",
        json={"name": "A", "share_percentage": 10},
        headers=staff_headers,
    )
    assert response.status_code == 403
    assert response.json() == {"detail": "Owner access required"}


def test_partner_crud_over_http(client, owner_headers):
    response = client.post(
        "/partners", json={"name": "A", "share_percentage": 70}, headers=owner_headers
    )
    assert response.status_code == 201
    partner_id = response.json()["id"]

    response = client.post(
        "/partners", json={"name": "B", "share_percentage": 40}, headers=owner_headers
    )
    assert response.status_code == 409
    assert "cannot exceed 100%" in response.json()["detail"]

    response = client.put(
        f"/partners/{partner_id}", json={"share_percentage": 30}, headers=owner_headers
    )
    assert response.status_code == 200
    assert Decimal(response.json()["share_percentage"]) == Decimal("30")

    response = client.post(
        "/partners", json={"name": "B", "share_percentage": 150}, headers=owner_headers
    )
    assert response.status_code == 422

    response = client.delete(f"/partners/{partner_id}", headers=owner_headers)
    assert response.status_code == 204
    assert client.get("/partners", headers=owner_headers).json() == []
