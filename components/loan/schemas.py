"""Pydantic schemas for loan data validation."""

from datetime import date
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator

from components.payment.schemas import Payment


class LoanStatus(str, Enum):
    """Loan status, either stored as a hint or derived from payments."""
    ACTIVE = "active"
    PAID = "paid"
    DEFAULTED = "defaulted"


class LoanBase(BaseModel):
    """Base loan schema."""
    member_id: str
    member_name: str
    amount: float
    due_date: date
    total_interest: float = 0


class LoanCreate(LoanBase):
    """Schema for loan issuance.

    The issue date defaults to today, so a same-day issuance needs a due
    date in the future. A back-dated issue date only requires the due date
    to come after it.
    """
    amount: float = Field(gt=0)
    total_interest: float = Field(default=0, ge=0)
    issued_date: Optional[date] = None

    @field_validator("member_id", "member_name")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @model_validator(mode="after")
    def due_after_issue(self) -> "LoanCreate":
        if self.issued_date is None:
            self.issued_date = date.today()
        if self.due_date <= self.issued_date:
            raise ValueError("Due date must be after the issue date")
        return self


class LoanInDB(LoanBase):
    """Schema for loan in database."""
    id: str
    issued_date: date
    status: LoanStatus
    revision: int

    class Config:
        from_attributes = True


class Loan(LoanInDB):
    """Schema for loan response."""
    pass


class PaymentStatus(BaseModel):
    """Derived repayment position of a loan."""
    total_paid: float
    total_due: float
    remaining: float
    is_paid: bool
    is_overdue: bool


class ScheduleEntry(BaseModel):
    """One daily installment of the repayment schedule."""
    day: int
    due_date: date
    amount: float
    is_paid: bool = False


class LoanSummary(BaseModel):
    """Loan together with its derived status."""
    loan: Loan
    payment_status: PaymentStatus
    derived_status: LoanStatus
    is_defaulted: bool


class LoanDetail(LoanSummary):
    """Loan summary with its payments and schedule."""
    payments: List[Payment]
    schedule: List[ScheduleEntry]


class Defaulter(BaseModel):
    """Defaulted loan as shown on the defaulters list."""
    loan: Loan
    days_late: int
    total_paid: float
    remaining: float
    penalty: float


class DefaultersReport(BaseModel):
    """Defaulted loans with their combined balance and penalties."""
    total_defaulters: int
    total_outstanding: float
    total_penalties: float
    defaulters: List[Defaulter]


class DashboardStats(BaseModel):
    """Portfolio counts and totals."""
    total: int
    active: int
    paid: int
    defaulted: int
    total_disbursed: float
    total_collected: float
    total_outstanding: float
    currency: str
