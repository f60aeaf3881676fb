"""Script to seed sample loans and payments into the database."""

from datetime import date, timedelta
import asyncio
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.database import DatabaseManager
from components.core.logging import get_logger, setup_logging
from components.loan.models import Loan
from components.payment.models import Payment

logger = get_logger(__name__)

MEMBERS = [
    ("M-001", "Achieng Otieno"),
    ("M-002", "Wanjiru Kamau"),
    ("M-003", "Kiprop Cheruiyot"),
]


async def seed_data(db: AsyncSession, today: Optional[date] = None) -> List[Loan]:
    """
    Seed one loan of each kind.

    - a fully repaid loan
    - a loan in default with a partial payment
    - a current loan with one installment paid
    """
    today = today or date.today()

    loans = [
        Loan(
            member_id=MEMBERS[0][0],
            member_name=MEMBERS[0][1],
            amount=5000.00,
            issued_date=today - timedelta(days=20),
            due_date=today - timedelta(days=10),
            total_interest=500.00,
            status="active",
        ),
        Loan(
            member_id=MEMBERS[1][0],
            member_name=MEMBERS[1][1],
            amount=10000.00,
            issued_date=today - timedelta(days=15),
            due_date=today - timedelta(days=5),
            total_interest=1000.00,
            status="active",
        ),
        Loan(
            member_id=MEMBERS[2][0],
            member_name=MEMBERS[2][1],
            amount=1005.00,
            issued_date=today - timedelta(days=1),
            due_date=today + timedelta(days=9),
            total_interest=100.50,
            status="active",
        ),
    ]
    db.add_all(loans)
    await db.commit()

    payments = [
        Payment(loan_id=loans[0].id, amount=2500.00, date=loans[0].issued_date + timedelta(days=1)),
        Payment(loan_id=loans[0].id, amount=2500.00, date=loans[0].issued_date + timedelta(days=2)),
        Payment(loan_id=loans[1].id, amount=9000.00, date=loans[1].issued_date + timedelta(days=3)),
        Payment(loan_id=loans[2].id, amount=100.50, date=today),
    ]
    db.add_all(payments)
    await db.commit()

    logger.info("Seeded %d loans and %d payments", len(loans), len(payments))
    return loans


async def main() -> None:
    setup_logging()
    db_manager = DatabaseManager()
    await db_manager.create_all()
    async with db_manager.get_db() as db:
        await seed_data(db)
    await db_manager.dispose()


if __name__ == "__main__":
    asyncio.run(main())
