from datetime import timedelta
from decimal import Decimal

import pytest
from sqlalchemy.orm import sessionmaker

from shopledger.core.errors import ConflictError, NotFoundError, ValidationError
from shopledger.core.hashing import hash_password, verify_password
from shopledger.core.jwt import create_access_token, decode_access_token
from shopledger.database import Base, build_engine
from shopledger.models.partners import Partner
from shopledger.models.users import User
from shopledger.services import users as user_service


def test_register_staff_and_owner(db):
    staff = user_service.register_user(db, username="cashier", password="secret123", role="staff")
    owner = user_service.register_user(db, username="boss", password="secret123", role="owner")

    assert staff.role == "staff"
    assert owner.is_owner
    assert verify_password("secret123", owner.password_hash)


def test_password_over_72_bytes_is_rejected_on_register(db):
    # 40 characters but 80 bytes in UTF-8
    with pytest.raises(ValidationError, match="at most 72 bytes"):
        user_service.register_user(db, username="cafe", password="é" * 40, role="staff")

    assert db.query(User).count() == 0


def test_password_over_72_bytes_is_rejected_on_change(db, staff):
    with pytest.raises(ValidationError, match="at most 72 bytes"):
        user_service.change_password(db, staff, "secret123", "é" * 40)

    assert user_service.authenticate(db, "staff1", "secret123") is not None


def test_overlong_password_never_verifies():
    password_hash = hash_password("secret123")

    assert verify_password("x" * 100, password_hash) is False
    assert verify_password("é" * 40, password_hash) is False


def test_owner_cap_reads_committed_state_not_callers_snapshot(tmp_path):
    # Same shape as the partner share check: the first session sees one
    # owner, the second commits another owner, and the first session's
    # insert must still be refused because the count runs inside it.
    engine = build_engine(f"sqlite:///{tmp_path / 'owners.db'}")
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    first, second = Session(), Session()
    try:
        user_service.register_user(first, username="owner1", password="secret123", role="owner")

        assert user_service.owner_count(first) < 2

        user_service.register_user(second, username="owner2", password="secret123", role="owner")

        with pytest.raises(ConflictError, match="Maximum 2 owners allowed"):
            user_service.register_user(first, username="owner3", password="secret123", role="owner")

        assert user_service.owner_count(first) == 2
        assert first.query(User).filter(User.username == "owner3").first() is None
    finally:
        first.close()
        second.close()
        engine.dispose()


def test_third_owner_is_rejected(db):
    user_service.register_user(db, username="owner1", password="secret123", role="owner")
    user_service.register_user(db, username="owner2", password="secret123", role="owner")

    with pytest.raises(ConflictError, match="Maximum 2 owners allowed"):
        user_service.register_user(db, username="owner3", password="secret123", role="owner")

    assert user_service.owner_count(db) == 2

    # Staff accounts are not capped
    user_service.register_user(db, username="helper", password="secret123", role="staff")
    assert db.query(User).count() == 3


def test_duplicate_username_is_rejected(db):
    user_service.register_user(db, username="cashier", password="secret123", role="staff")

    with pytest.raises(ConflictError, match="Username already exists"):
        user_service.register_user(db, username="cashier", password="other123", role="staff")


def test_register_validation(db):
    with pytest.raises(ValidationError):
        user_service.register_user(db, username="ab", password="secret123", role="staff")

    with pytest.raises(ValidationError):
        user_service.register_user(db, username="abc", password="123", role="staff")

    with pytest.raises(ValidationError):
        user_service.register_user(db, username="abc", password="secret123", role="admin")


def test_self_delete_is_rejected(db, owner):
    with pytest.raises(ValidationError, match="Cannot delete your own account"):
        user_service.delete_user(db, owner.id, acting_user_id=owner.id)

    assert db.query(User).count() == 1


def test_delete_other_user(db, owner, staff):
    user_service.delete_user(db, staff.id, acting_user_id=owner.id)

    with pytest.raises(NotFoundError):
        user_service.get_user(db, staff.id)


def test_change_password(db, staff):
    with pytest.raises(ValidationError, match="Current password is incorrect"):
        user_service.change_password(db, staff, "wrong-pass", "newsecret")

    user_service.change_password(db, staff, "secret123", "newsecret")

    assert user_service.authenticate(db, "staff1", "newsecret") is not None
    assert user_service.authenticate(db, "staff1", "secret123") is None


def test_seed_defaults_runs_once(db):
    user_service.seed_defaults(db)
    user_service.seed_defaults(db)

    assert sorted(u.username for u in db.query(User).all()) == ["owner1", "owner2"]
    partners = db.query(Partner).order_by(Partner.name).all()
    assert [(p.name, p.share_percentage) for p in partners] == [
        ("Partner A", Decimal("50")),
        ("Partner B", Decimal("50")),
    ]


def test_token_carries_user_claims(staff):
    payload = decode_access_token(create_access_token(staff))

    assert payload["sub"] == str(staff.id)
    assert payload["username"] == "staff1"
    assert payload["role"] == "staff"
    assert payload["type"] == "access"


def test_expired_or_garbled_token_is_rejected(staff):
    expired = create_access_token(staff, expires_delta=timedelta(minutes=-1))

    assert decode_access_token(expired) is None
    assert decode_access_token("not-a-token") is None


# ---------------- HTTP ----------------
def test_login_and_me(client, staff):
    response = client.post(
        "/auth/login", data={"username": "staff1", "password": "secret123"}
    )
    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["username"] == "staff1"

    response = client.get(
        "/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"}
    )
    assert response.status_code == 200
    assert response.json()["role"] == "staff"


def test_login_with_wrong_password(client, staff):
    response = client.post(
        "/auth/login", data={"username": "staff1", "password": "nope-nope"}
    )
    assert response.status_code == 401


def test_login_with_overlong_password(client, staff):
    response = client.post(
        "/auth/login", data={"username": "staff1", "password": "x" * 100}
    )
    assert response.status_code == 401


def test_register_multibyte_password_over_limit(client, owner_headers):
    response = client.post(
        "/auth/register",
        json={"username": "cafe", "password": "é" * 40, "role": "staff"},
        headers=owner_headers,
    )
    assert response.status_code == 400
    assert response.json() == {"detail": "Password must be at most 72 bytes"}


def test_invalid_token_is_rejected(client):
    response = client.get("/auth/me", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401


def test_register_requires_owner(client, staff_headers, owner_headers):
    payload = {"username": "newbie", "password": "secret123", "role": "staff"}

    assert client.post("/auth/register", json=payload, headers=staff_headers).status_code == 403

    response = client.post("/auth/register", json=payload, headers=owner_headers)
    assert response.status_code == 201
    assert response.json()["username"] == "newbie"


def test_register_third_owner_over_http(client, db, owner_headers):
    db.add(User(username="owner2", password_hash="x", role="owner"))
    db.commit()

    response = client.post(
        "/auth/register",
        json={"username": "owner3", "password": "secret123", "role": "owner"},
        headers=owner_headers,
    )
    assert response.status_code == 409


def test_owner_cannot_delete_self_over_http(client, owner, owner_headers):
    response = client.delete(f"/auth/users/{owner.id}", headers=owner_headers)

    assert response.status_code == 400
    assert response.json() == {"detail": "Cannot delete your own account"}


def test_list_users(client, owner, staff, owner_headers, staff_headers):
    assert client.get("/auth/users", headers=staff_headers).status_code == 403

    response = client.get("/auth/users", headers=owner_headers)
    assert [u["username"] for u in response.json()] == ["owner1", "staff1"]
    assert all("password_hash" not in u for u in response.json())


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
