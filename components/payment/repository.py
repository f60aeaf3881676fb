"""Repository for payment operations."""

from collections import defaultdict
from datetime import date
from typing import BinaryIO, Dict, List, Tuple
import pandas as pd
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.database import storage_errors
from components.core.exceptions import NotFoundError, PaymentExceedsBalanceError, ValidationError
from components.core.logging import get_logger
from components.loan import accounting
from components.loan.models import Loan
from components.payment import schemas
from components.payment.models import Payment

logger = get_logger(__name__)

REQUIRED_COLUMNS = ("loan_id", "amount")


class PaymentRepository:
    """Repository for payment operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def create(self, payment: schemas.PaymentCreate) -> Payment:
        """
        Record a payment against a loan.

        The loan must exist and the amount must be positive and within the
        loan's remaining balance.
        """
        if payment.amount <= 0:
            raise ValidationError("Payment amount must be positive")

        async with storage_errors(self.session):
            result = await self.session.execute(
                select(Loan).where(Loan.id == payment.loan_id)
            )
            loan = result.scalar_one_or_none()
        if loan is None:
            raise NotFoundError(f"Loan {payment.loan_id} not found")

        status = accounting.compute_payment_status(loan, await self.get_by_loan(loan.id))
        remaining = accounting.round_currency(status.remaining)
        if accounting.round_currency(payment.amount) > remaining:
            raise PaymentExceedsBalanceError(
                f"Payment exceeds remaining balance of {remaining:,.2f}"
            )

        db_payment = Payment(
            loan_id=loan.id,
            amount=payment.amount,
            date=payment.date or date.today(),
        )
        async with storage_errors(self.session):
            self.session.add(db_payment)
            await self.session.commit()
            await self.session.refresh(db_payment)

        logger.info(
            "Payment %s of %s recorded for loan %s", db_payment.id, payment.amount, loan.id,
            extra={"loan_id": loan.id, "payment_id": db_payment.id},
        )
        return db_payment

    async def get_all(self) -> List[Payment]:
        """Get all payments."""
        async with storage_errors(self.session):
            result = await self.session.execute(
                select(Payment).order_by(Payment.date, Payment.id)
            )
            return list(result.scalars().all())

    async def get_by_loan(self, loan_id: str) -> List[Payment]:
        """Get payments of one loan, oldest first."""
        async with storage_errors(self.session):
            result = await self.session.execute(
                select(Payment)
                .where(Payment.loan_id == loan_id)
                .order_by(Payment.date, Payment.id)
            )
            return list(result.scalars().all())

    async def get_grouped_by_loan(self) -> Dict[str, List[Payment]]:
        """Get all payments keyed by loan ID."""
        grouped: Dict[str, List[Payment]] = defaultdict(list)
        for payment in await self.get_all():
            grouped[payment.loan_id].append(payment)
        return grouped

    async def import_from_csv(self, file_content: BinaryIO) -> Tuple[bool, str, List[Dict]]:
        """
        Import payments from a tab-separated file.

        Args:
            file_content: The file content with ``loan_id``, ``amount`` and
                optional ``date`` (YYYY-MM-DD) columns

        Returns:
            Tuple containing:
            - Success status (bool)
            - Message (str)
            - List of errors if any (List[Dict])

        Every row is validated before anything is written.
        """
        errors = []

        try:
            frame = pd.read_csv(file_content, sep="\t", dtype=str)
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
            return False, f"Error processing file: {exc}", []

        if not all(column in frame.columns for column in REQUIRED_COLUMNS):
            return False, "File must contain 'loan_id' and 'amount' columns", []

        has_dates = "date" in frame.columns
        loans: Dict[str, Loan] = {}
        remaining: Dict[str, float] = {}
        pending: Dict[str, float] = defaultdict(float)
        new_payments = []

        # Start at 2 to account for the header row
        for row_num, row in enumerate(frame.itertuples(index=False), start=2):
            loan_id = row.loan_id
            if pd.isna(loan_id) or not str(loan_id).strip():
                errors.append({"row": row_num, "message": "Loan ID cannot be empty"})
                continue
            loan_id = str(loan_id).strip()

            try:
                amount = float(row.amount)
            except (TypeError, ValueError):
                errors.append({"row": row_num, "message": f"Invalid amount value: {row.amount}"})
                continue
            if pd.isna(amount) or amount <= 0:
                errors.append({"row": row_num, "message": "Amount must be a positive number"})
                continue

            payment_date = date.today()
            if has_dates and not pd.isna(row.date):
                try:
                    payment_date = date.fromisoformat(str(row.date).strip())
                except ValueError:
                    errors.append({
                        "row": row_num,
                        "message": f"Invalid date format: {row.date}. Expected YYYY-MM-DD"
                    })
                    continue

            if loan_id not in loans:
                async with storage_errors(self.session):
                    result = await self.session.execute(
                        select(Loan).where(Loan.id == loan_id)
                    )
                    loan = result.scalar_one_or_none()
                if loan is None:
                    errors.append({"row": row_num, "message": f"Loan {loan_id} does not exist"})
                    continue
                loans[loan_id] = loan
                status = accounting.compute_payment_status(loan, await self.get_by_loan(loan_id))
                remaining[loan_id] = accounting.round_currency(status.remaining)

            if accounting.round_currency(pending[loan_id] + amount) > remaining[loan_id]:
                left = accounting.round_currency(remaining[loan_id] - pending[loan_id])
                errors.append({
                    "row": row_num,
                    "message": f"Payment exceeds remaining balance of {left:,.2f}"
                })
                continue

            pending[loan_id] += amount
            new_payments.append(Payment(loan_id=loan_id, amount=amount, date=payment_date))

        if errors:
            return False, "Validation errors occurred", errors

        async with storage_errors(self.session):
            self.session.add_all(new_payments)
            await self.session.commit()

        logger.info("Imported %d payments", len(new_payments))
        return True, f"Imported {len(new_payments)} payments", []
