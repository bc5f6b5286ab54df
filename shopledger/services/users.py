# shopledger/services/users.py
#
# At most two owners exist. Like the partner share total, the owner count is
# checked inside the INSERT that adds the owner.

import logging
from typing import Optional

from sqlalchemy import String, func, insert, literal, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shopledger.core.config import settings
from shopledger.core.constants import MAX_OWNERS, USER_ROLES
from shopledger.core.errors import ConflictError, NotFoundError, ValidationError
from shopledger.core.hashing import hash_password, password_too_long, verify_password
from shopledger.models.partners import Partner
from shopledger.models.users import User
from shopledger.services.common import commit

logger = logging.getLogger(__name__)

users_table = User.__table__

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6


def _owner_count_subquery():
    existing = users_table.alias("existing")
    return (
        select(func.count(existing.c.id))
        .where(existing.c.role == "owner")
        .scalar_subquery()
    )


def _check_new_password(password: str) -> None:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError("Password must be at least 6 characters")

    if password_too_long(password):
        raise ValidationError("Password must be at most 72 bytes")


def owner_count(db: Session) -> int:
    return db.query(func.count(User.id)).filter(User.role == "owner").scalar() or 0


def authenticate(db: Session, username: str, password: str) -> Optional[User]:
    user = db.query(User).filter(User.username == username).first()

    if not user or not verify_password(password, user.password_hash):
        return None

    return user


def get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()

    if user is None:
        raise NotFoundError("User not found")

    return user


def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.created_at.asc(), User.id.asc()).all()


def register_user(db: Session, *, username: str, password: str, role: str) -> User:
    username = (username or "").strip()

    if len(username) < MIN_USERNAME_LENGTH:
        raise ValidationError("Username must be at least 3 characters")

    _check_new_password(password)

    if role not in USER_ROLES:
        raise ValidationError("Role must be either owner or staff")

    if db.query(User.id).filter(User.username == username).first():
        raise ConflictError("Username already exists")

    row = select(
        literal(username, String),
        literal(hash_password(password), String),
        literal(role, String),
    )

    if role == "owner":
        row = row.where(_owner_count_subquery() < MAX_OWNERS)

    stmt = (
        insert(users_table)
        .from_select(["username", "password_hash", "role"], row)
        .returning(users_table.c.id)
    )

    try:
        user_id = db.execute(stmt).scalar_one_or_none()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Username already exists")

    if user_id is None:
        db.rollback()
        logger.warning(f"Owner registration for '{username}' rejected, owner limit reached")
        raise ConflictError("Maximum 2 owners allowed")

    commit(db, "create user")

    logger.info(f"User '{username}' registered as {role}")
    return get_user(db, user_id)


def delete_user(db: Session, user_id: int, acting_user_id: int) -> None:
    if user_id == acting_user_id:
        raise ValidationError("Cannot delete your own account")

    user = get_user(db, user_id)

    db.delete(user)
    commit(db, "delete user")

    logger.info(f"User {user_id} deleted by user {acting_user_id}")


def change_password(db: Session, user: User, current_password: str, new_password: str) -> None:
    if not verify_password(current_password, user.password_hash):
        raise ValidationError("Current password is incorrect")

    _check_new_password(new_password)

    user.password_hash = hash_password(new_password)
    commit(db, "change password")

    logger.info(f"Password changed for user {user.id}")


def seed_defaults(db: Session) -> None:
    """First-run data: two owner accounts and an even two-partner split."""
    if db.query(User.id).first() is None:
        for username in ("owner1", "owner2"):
            db.add(User(
                username=username,
                password_hash=hash_password(settings.DEFAULT_OWNER_PASSWORD),
                role="owner",
            ))
        commit(db, "seed default owners")
        logger.info("Default owner accounts created")

    if db.query(Partner.id).first() is None:
        db.add(Partner(name="Partner A", share_percentage=50))
        db.add(Partner(name="Partner B", share_percentage=50))
        commit(db, "seed default partners")
        logger.info("Default partners created")
