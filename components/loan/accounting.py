"""Loan accounting rules.

Pure functions over a loan and the payments already filtered to it. Nothing
here touches the database; every value is derived fresh on each call. The
functions that depend on the current date take an ``as_of`` date which
defaults to today.

Amounts are accumulated as floats. Rounding to cents is round-half-up on
the exact decimal value, so ``1005 / 10`` gives ``100.5`` and ``0.05 / 10``
gives ``0.01``.
"""

from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional, Sequence, Union

from components.loan import schemas
from components.loan.models import Loan
from components.payment.models import Payment

SCHEDULE_DAYS = 10
PENALTY_RATE = 0.1
# Share of the original principal that the amount paid is assumed to cover
PAID_PRINCIPAL_SHARE = 0.9

_CENT = Decimal("0.01")


def _to_decimal(value: Union[Decimal, float, int, str]) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def round_currency(value: Union[Decimal, float, int]) -> float:
    """Round to two decimals, halves away from zero."""
    return float(_to_decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP))


def _total_paid(payments: Iterable[Payment]) -> float:
    return sum((float(payment.amount) for payment in payments), 0.0)


def compute_payment_status(
    loan: Loan, payments: Sequence[Payment], as_of: Optional[date] = None
) -> schemas.PaymentStatus:
    """Compute how much of the principal is paid and whether it is overdue.

    Interest is informational and never part of the amount due.
    """
    today = as_of or date.today()
    total_paid = _total_paid(payments)
    total_due = float(loan.amount)

    return schemas.PaymentStatus(
        total_paid=total_paid,
        total_due=total_due,
        remaining=max(0.0, total_due - total_paid),
        is_paid=total_paid >= total_due,
        is_overdue=total_paid < total_due and today > loan.due_date,
    )


def is_loan_defaulted(
    loan: Loan, payments: Sequence[Payment], as_of: Optional[date] = None
) -> bool:
    """A loan is in default when it is overdue and not fully paid."""
    status = compute_payment_status(loan, payments, as_of)
    return status.is_overdue and not status.is_paid


def _status_from(status: schemas.PaymentStatus) -> schemas.LoanStatus:
    if status.is_paid:
        return schemas.LoanStatus.PAID
    if status.is_overdue:
        return schemas.LoanStatus.DEFAULTED
    return schemas.LoanStatus.ACTIVE


def derive_loan_status(
    loan: Loan, payments: Sequence[Payment], as_of: Optional[date] = None
) -> schemas.LoanStatus:
    return _status_from(compute_payment_status(loan, payments, as_of))


def compute_daily_repayment(amount: Union[Decimal, float, int]) -> float:
    """Split the principal into equal daily installments, rounded to cents."""
    return round_currency(_to_decimal(amount) / SCHEDULE_DAYS)


def compute_loan_schedule(
    loan: Loan, absorb_remainder: bool = False
) -> List[schemas.ScheduleEntry]:
    """
    Build the fixed 10-day repayment schedule of a loan.

    Installment ``i`` falls due ``i`` days after the issue date, whatever the
    loan's own due date is. All installments are equal, so their sum can be
    off the principal by a few cents. With ``absorb_remainder`` the last
    installment takes up that difference.

    Paid flags are left unset; see ``mark_paid_installments``.
    """
    daily_repayment = compute_daily_repayment(loan.amount)
    schedule = [
        schemas.ScheduleEntry(
            day=day,
            due_date=loan.issued_date + timedelta(days=day),
            amount=daily_repayment,
            is_paid=False,
        )
        for day in range(1, SCHEDULE_DAYS + 1)
    ]

    if absorb_remainder:
        remainder = _to_decimal(loan.amount) - _to_decimal(daily_repayment) * SCHEDULE_DAYS
        schedule[-1].amount = float(_to_decimal(daily_repayment) + remainder)

    return schedule


def mark_paid_installments(
    schedule: Sequence[schemas.ScheduleEntry], payments: Sequence[Payment]
) -> List[schemas.ScheduleEntry]:
    """
    Flag the installments covered by payments made on their due day.

    A payment counts toward an installment when its date falls in
    ``[due_date, due_date + 1 day)``. Overflow is not rolled forward.
    """
    marked = []
    for entry in schedule:
        window_end = entry.due_date + timedelta(days=1)
        paid_that_day = _total_paid(
            payment for payment in payments
            if entry.due_date <= payment.date < window_end
        )
        marked.append(entry.model_copy(update={"is_paid": paid_that_day >= entry.amount}))
    return marked


def days_late(due_date: date, as_of: Optional[date] = None) -> int:
    """Whole days past the due date, never negative."""
    today = as_of or date.today()
    return max(0, (today - due_date).days)


def calculate_late_penalty(
    loan_id: str,
    payments: Sequence[Payment],
    due_date: date,
    as_of: Optional[date] = None,
) -> float:
    """
    Flat 10% penalty on the principal inferred from the amount paid.

    The amount paid is taken to be 90% of the original principal, so the
    penalty is ``(total_paid / 0.9) * 0.1``. Nothing is paid, no penalty.
    Payoff is not checked here; callers only ask for defaulted loans.
    """
    today = as_of or date.today()
    total_paid = _total_paid(payments)
    inferred_principal = total_paid / PAID_PRINCIPAL_SHARE

    if today > due_date:
        if days_late(due_date, today) > 0:
            return round_currency(inferred_principal * PENALTY_RATE)

    return 0.0


def roll_forward_payment(payment: float, daily_repayment: float) -> float:
    """Part of a payment that exceeds one day's installment."""
    return max(0.0, payment - daily_repayment)


def summarize_loan(
    loan: Loan, payments: Sequence[Payment], as_of: Optional[date] = None
) -> schemas.LoanSummary:
    status = compute_payment_status(loan, payments, as_of)
    derived = _status_from(status)
    return schemas.LoanSummary(
        loan=schemas.Loan.model_validate(loan),
        payment_status=status,
        derived_status=derived,
        is_defaulted=derived == schemas.LoanStatus.DEFAULTED,
    )
