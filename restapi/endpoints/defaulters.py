"""Defaulters endpoint for the API."""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.init_db import get_db
from components.loan import accounting, schemas
from components.loan.repository import LoanRepository
from components.payment.repository import PaymentRepository

router = APIRouter(
    prefix="/defaulters",
    tags=["defaulters"],
)


@router.get("/", response_model=schemas.DefaultersReport)
async def read_defaulters(
    as_of_date: Optional[date] = Query(None, description="Date to evaluate defaults on (defaults to today)"),
    db: AsyncSession = Depends(get_db)
):
    """
    Get loans in default, most overdue first.

    Each entry carries the days late, the outstanding balance and the late
    penalty. The report also totals the outstanding balances and penalties.
    """
    loans = await LoanRepository(db).get_all(limit=None)
    payments = await PaymentRepository(db).get_grouped_by_loan()

    defaulters = []
    for loan in loans:
        loan_payments = payments.get(loan.id, [])
        if not accounting.is_loan_defaulted(loan, loan_payments, as_of_date):
            continue

        payment_status = accounting.compute_payment_status(loan, loan_payments, as_of_date)
        defaulters.append(schemas.Defaulter(
            loan=schemas.Loan.model_validate(loan),
            days_late=accounting.days_late(loan.due_date, as_of_date),
            total_paid=payment_status.total_paid,
            remaining=payment_status.remaining,
            penalty=accounting.calculate_late_penalty(loan.id, loan_payments, loan.due_date, as_of_date),
        ))

    defaulters.sort(key=lambda defaulter: defaulter.days_late, reverse=True)
    return schemas.DefaultersReport(
        total_defaulters=len(defaulters),
        total_outstanding=accounting.round_currency(sum(d.remaining for d in defaulters)),
        total_penalties=accounting.round_currency(sum(d.penalty for d in defaulters)),
        defaulters=defaulters,
    )
