"""Repository for loan operations."""

from datetime import date
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.database import storage_errors
from components.core.exceptions import NotFoundError
from components.core.logging import get_logger
from components.loan import accounting, schemas
from components.loan.models import Loan
from components.payment.models import Payment

logger = get_logger(__name__)


class LoanRepository:
    """Repository for loan operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def create(self, loan: schemas.LoanCreate) -> Loan:
        """Issue a new loan, always stored as active."""
        db_loan = Loan(
            member_id=loan.member_id,
            member_name=loan.member_name,
            amount=loan.amount,
            issued_date=loan.issued_date or date.today(),
            due_date=loan.due_date,
            total_interest=loan.total_interest,
            status=schemas.LoanStatus.ACTIVE.value,
            revision=1,
        )
        async with storage_errors(self.session):
            self.session.add(db_loan)
            await self.session.commit()
            await self.session.refresh(db_loan)

        logger.info(
            "Loan %s issued to member %s for %s", db_loan.id, db_loan.member_id, loan.amount,
            extra={"loan_id": db_loan.id, "member_id": db_loan.member_id},
        )
        return db_loan

    async def get_by_id(self, loan_id: str) -> Loan:
        """Get loan by ID."""
        async with storage_errors(self.session):
            result = await self.session.execute(
                select(Loan).where(Loan.id == loan_id)
            )
            loan = result.scalar_one_or_none()

        if loan is None:
            raise NotFoundError(f"Loan {loan_id} not found")
        return loan

    async def get_all(
        self,
        skip: int = 0,
        limit: Optional[int] = 100,
        member_id: Optional[str] = None
    ) -> List[Loan]:
        """Get all loans, newest first, with optional filtering by member."""
        query = select(Loan)

        if member_id:
            query = query.where(Loan.member_id == member_id)

        query = query.order_by(Loan.issued_date.desc(), Loan.id).offset(skip).limit(limit)
        async with storage_errors(self.session):
            result = await self.session.execute(query)
            return list(result.scalars().all())

    async def reconcile_status(self, loan_id: str, as_of: Optional[date] = None) -> Loan:
        """
        Write the derived status back into the stored status field.

        The revision is bumped only when the stored value changes.
        """
        loan = await self.get_by_id(loan_id)

        async with storage_errors(self.session):
            result = await self.session.execute(
                select(Payment).where(Payment.loan_id == loan_id)
            )
            payments = list(result.scalars().all())

            derived = accounting.derive_loan_status(loan, payments, as_of)
            if loan.status != derived.value:
                logger.info("Loan %s status %s -> %s", loan.id, loan.status, derived.value)
                loan.status = derived.value
                loan.revision += 1
                await self.session.commit()
                await self.session.refresh(loan)

        return loan
