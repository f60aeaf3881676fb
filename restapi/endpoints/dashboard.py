"""Dashboard endpoint for the API."""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from components.core import config
from components.core.init_db import get_db
from components.loan import accounting, schemas
from components.loan.repository import LoanRepository
from components.payment.repository import PaymentRepository

router = APIRouter(
    prefix="/dashboard",
    tags=["dashboard"],
)


@router.get("/", response_model=schemas.DashboardStats)
async def read_dashboard(
    as_of_date: Optional[date] = Query(None, description="Date to evaluate status on (defaults to today)"),
    db: AsyncSession = Depends(get_db)
):
    """Get loan counts by derived status and portfolio totals."""
    loans = await LoanRepository(db).get_all(limit=None)
    payments = await PaymentRepository(db).get_grouped_by_loan()

    counts = {loan_status: 0 for loan_status in schemas.LoanStatus}
    total_disbursed = 0.0
    total_collected = 0.0
    total_outstanding = 0.0

    for loan in loans:
        loan_payments = payments.get(loan.id, [])
        payment_status = accounting.compute_payment_status(loan, loan_payments, as_of_date)
        counts[accounting.derive_loan_status(loan, loan_payments, as_of_date)] += 1
        total_disbursed += payment_status.total_due
        total_collected += payment_status.total_paid
        total_outstanding += payment_status.remaining

    return schemas.DashboardStats(
        total=len(loans),
        active=counts[schemas.LoanStatus.ACTIVE],
        paid=counts[schemas.LoanStatus.PAID],
        defaulted=counts[schemas.LoanStatus.DEFAULTED],
        total_disbursed=accounting.round_currency(total_disbursed),
        total_collected=accounting.round_currency(total_collected),
        total_outstanding=accounting.round_currency(total_outstanding),
        currency=config.get_settings().CURRENCY,
    )
