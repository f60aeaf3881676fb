"""Loan model for the database."""

import uuid

from sqlalchemy import Column, Integer, String, Date, Numeric
from sqlalchemy.orm import relationship

from components.core.database import Base


def generate_id() -> str:
    return str(uuid.uuid4())


class Loan(Base):
    """Loan model representing one credit line disbursed to a member."""
    __tablename__ = "loans"

    id = Column(String(36), primary_key=True, default=generate_id)
    member_id = Column(String(50), nullable=False, index=True)
    member_name = Column(String(100), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    issued_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    total_interest = Column(Numeric(10, 2), nullable=False, default=0)
    # Cached hint only, the accounting module derives the real status
    status = Column(String(20), nullable=False, default="active")
    revision = Column(Integer, nullable=False, default=1)

    # Relationships
    payments = relationship("Payment", back_populates="loan")
