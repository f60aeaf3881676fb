"""Tests for the sample data script."""

from datetime import date

import pytest

from components.loan import accounting
from components.loan.schemas import LoanStatus
from components.payment.repository import PaymentRepository
from scripts.seed_data import seed_data

pytestmark = pytest.mark.anyio


async def test_seed_one_loan_of_each_status(session) -> None:
    today = date(2025, 1, 20)

    loans = await seed_data(session, today=today)

    payments = await PaymentRepository(session).get_grouped_by_loan()
    statuses = [accounting.derive_loan_status(loan, payments.get(loan.id, []), today) for loan in loans]
    assert statuses == [LoanStatus.PAID, LoanStatus.DEFAULTED, LoanStatus.ACTIVE]

    penalty = accounting.calculate_late_penalty(loans[1].id, payments[loans[1].id], loans[1].due_date, today)
    assert penalty == 1000.0

    schedule = accounting.mark_paid_installments(accounting.compute_loan_schedule(loans[2]), payments[loans[2].id])
    assert schedule[0].is_paid is True
    assert schedule[0].amount == 100.5
