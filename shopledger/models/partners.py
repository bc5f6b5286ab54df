# shopledger/models/partners.py

from sqlalchemy import CheckConstraint, Column, Integer, String, Numeric, DateTime
from sqlalchemy.sql import func

from shopledger.database import Base


class Partner(Base):
    __tablename__ = "partners"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    share_percentage = Column(Numeric(5, 2), nullable=False, default=0)

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    __table_args__ = (
        CheckConstraint(
            "share_percentage >= 0 AND share_percentage <= 100",
            name="ck_partners_share_range",
        ),
    )
