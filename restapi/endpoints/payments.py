"""Payment endpoints for the API."""

import io
from typing import List
from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.init_db import get_db
from components.payment import schemas
from components.payment.repository import PaymentRepository

router = APIRouter(
    prefix="/payments",
    tags=["payments"],
    responses={404: {"description": "Not found"}},
)


@router.post("/", response_model=schemas.Payment, status_code=status.HTTP_201_CREATED)
async def record_payment(
    payment: schemas.PaymentCreate,
    db: AsyncSession = Depends(get_db)
):
    """
    Record a payment against a loan.

    Fails with 404 for an unknown loan and 400 when the amount exceeds the
    remaining balance.
    """
    repo = PaymentRepository(db)
    return await repo.create(payment)


@router.get("/", response_model=List[schemas.Payment])
async def read_payments(db: AsyncSession = Depends(get_db)):
    """Get all payments."""
    repo = PaymentRepository(db)
    return await repo.get_all()


@router.post("/import", response_model=schemas.PaymentUploadResponse)
async def import_payments(
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db)
):
    """
    Import payments from a tab-separated file.

    Columns:
    - loan_id: ID of an existing loan
    - amount: positive payment amount
    - date: optional, YYYY-MM-DD (defaults to today)

    Nothing is recorded unless every row is valid.
    """
    repo = PaymentRepository(db)

    file_content = await file.read()
    success, message, errors = await repo.import_from_csv(io.BytesIO(file_content))

    if not success:
        error_objects = [schemas.PaymentUploadError(**error) for error in errors]
        return schemas.PaymentUploadResponse(
            success=False,
            message=message,
            errors=error_objects
        )

    return schemas.PaymentUploadResponse(
        success=True,
        message=message
    )
