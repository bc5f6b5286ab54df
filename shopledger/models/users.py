# shopledger/models/users.py

from sqlalchemy import CheckConstraint, Column, Integer, String, DateTime
from sqlalchemy.sql import func

from shopledger.database import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)

    # Owners manage users and partners; staff work with stock and the ledger
    role = Column(String, nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("role IN ('owner', 'staff')", name="ck_users_role_valid"),
        CheckConstraint("length(username) >= 3", name="ck_users_username_length"),
    )

    @property
    def is_owner(self) -> bool:
        return self.role == "owner"
