"""Loan endpoints for the API."""

from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.init_db import get_db
from components.loan import accounting, schemas
from components.loan.repository import LoanRepository
from components.payment import schemas as payment_schemas
from components.payment.repository import PaymentRepository

router = APIRouter(
    prefix="/loans",
    tags=["loans"],
    responses={404: {"description": "Not found"}},
)


@router.post("/", response_model=schemas.Loan, status_code=status.HTTP_201_CREATED)
async def issue_loan(
    loan: schemas.LoanCreate,
    db: AsyncSession = Depends(get_db)
):
    """Issue a new loan to a member."""
    repo = LoanRepository(db)
    return await repo.create(loan)


@router.get("/", response_model=List[schemas.LoanSummary])
async def read_loans(
    member_id: Optional[str] = Query(None, description="Only loans of this member"),
    loan_status: Optional[schemas.LoanStatus] = Query(None, alias="status", description="Filter by derived status"),
    as_of_date: Optional[date] = Query(None, description="Date to evaluate status on (defaults to today)"),
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=100, description="Number of records to return"),
    db: AsyncSession = Depends(get_db)
):
    """
    Get loans with their payment status.

    The status reported and filtered on is derived from the payments, not
    the stored status field.
    """
    # Paginate after the derived-status filter
    loans = await LoanRepository(db).get_all(limit=None, member_id=member_id)
    payments = await PaymentRepository(db).get_grouped_by_loan()

    summaries = [
        accounting.summarize_loan(loan, payments.get(loan.id, []), as_of_date)
        for loan in loans
    ]
    if loan_status is not None:
        summaries = [summary for summary in summaries if summary.derived_status == loan_status]
    return summaries[skip:skip + limit]


@router.get("/{loan_id}", response_model=schemas.LoanDetail)
async def read_loan(
    loan_id: str,
    as_of_date: Optional[date] = Query(None, description="Date to evaluate status on (defaults to today)"),
    db: AsyncSession = Depends(get_db)
):
    """Get a loan with its payments and repayment schedule."""
    loan = await LoanRepository(db).get_by_id(loan_id)
    payments = await PaymentRepository(db).get_by_loan(loan_id)

    summary = accounting.summarize_loan(loan, payments, as_of_date)
    schedule = accounting.mark_paid_installments(accounting.compute_loan_schedule(loan), payments)
    return schemas.LoanDetail(
        **summary.model_dump(),
        payments=[payment_schemas.Payment.model_validate(payment) for payment in payments],
        schedule=schedule,
    )


@router.get("/{loan_id}/schedule", response_model=List[schemas.ScheduleEntry])
async def read_loan_schedule(
    loan_id: str,
    absorb_remainder: bool = Query(False, description="Let the last installment take up rounding cents"),
    db: AsyncSession = Depends(get_db)
):
    """
    Get the 10-day repayment schedule of a loan.

    An installment is marked paid when payments made on its due day cover it.
    """
    loan = await LoanRepository(db).get_by_id(loan_id)
    payments = await PaymentRepository(db).get_by_loan(loan_id)
    schedule = accounting.compute_loan_schedule(loan, absorb_remainder=absorb_remainder)
    return accounting.mark_paid_installments(schedule, payments)


@router.get("/{loan_id}/payments", response_model=List[payment_schemas.Payment])
async def read_loan_payments(
    loan_id: str,
    db: AsyncSession = Depends(get_db)
):
    """Get the payments recorded against a loan."""
    await LoanRepository(db).get_by_id(loan_id)
    return await PaymentRepository(db).get_by_loan(loan_id)


@router.post("/{loan_id}/reconcile", response_model=schemas.Loan)
async def reconcile_loan_status(
    loan_id: str,
    as_of_date: Optional[date] = Query(None, description="Date to evaluate status on (defaults to today)"),
    db: AsyncSession = Depends(get_db)
):
    """Refresh the stored status of a loan from its payments."""
    repo = LoanRepository(db)
    return await repo.reconcile_status(loan_id, as_of_date)
