"""Pydantic schemas for payment data validation."""

from datetime import date as date_type
from typing import List, Optional
from pydantic import BaseModel, Field


class PaymentBase(BaseModel):
    """Base payment schema."""
    loan_id: str
    amount: float


class PaymentCreate(PaymentBase):
    """Schema for recording a payment, dated today unless given."""
    amount: float = Field(gt=0)
    date: Optional[date_type] = None


class PaymentInDB(PaymentBase):
    """Schema for payment in database."""
    id: str
    date: date_type

    class Config:
        from_attributes = True


class Payment(PaymentInDB):
    """Schema for payment response."""
    pass


class PaymentUploadError(BaseModel):
    """Schema for payment upload error."""
    row: int
    message: str


class PaymentUploadResponse(BaseModel):
    """Schema for payment upload response."""
    success: bool
    message: str
    errors: Optional[List[PaymentUploadError]] = None
