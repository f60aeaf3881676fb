"""Payment model for the database."""

from sqlalchemy import Column, String, Date, ForeignKey, Numeric
from sqlalchemy.orm import relationship

from components.core.database import Base
from components.loan.models import generate_id


class Payment(Base):
    """Payment model for storing loan repayments."""
    __tablename__ = "payments"

    id = Column(String(36), primary_key=True, default=generate_id)
    loan_id = Column(String(36), ForeignKey("loans.id"), nullable=False, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    date = Column(Date, nullable=False)

    # Relationships
    loan = relationship("Loan", back_populates="payments")
