"""Payment record endpoints.

Payments are created and settled by the external payment processor; these
endpoints let it record a payment and report its outcome.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.payment import Payment
from app.schemas.payment import PaymentCreate, PaymentUpdate, PaymentInDB

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("", response_model=PaymentInDB, status_code=201)
async def create_payment(
    payment: PaymentCreate,
    db: AsyncSession = Depends(get_db),
):
    """Record a payment."""
    db_payment = Payment(**payment.model_dump())
    db.add(db_payment)
    await db.commit()
    await db.refresh(db_payment)

    return db_payment


@router.get("/{payment_id}", response_model=PaymentInDB)
async def get_payment(
    payment_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Get a payment by ID."""
    payment = await db.get(Payment, payment_id)

    if not payment:
        raise HTTPException(status_code=404, detail="Payment not found")

    return payment


@router.patch("/{payment_id}", response_model=PaymentInDB)
async def update_payment(
    payment_id: int,
    payment_update: PaymentUpdate,
    db: AsyncSession = Depends(get_db),
):
    """
    Update a payment's status.

    Args:
        payment_id: Payment ID
        payment_update: New status and settlement date
        db: Database session

    Returns:
        Updated payment
    """
    payment = await db.get(Payment, payment_id)

    if not payment:
        raise HTTPException(status_code=404, detail="Payment not found")

    update_data = payment_update.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(payment, field, value)

    await db.commit()
    await db.refresh(payment)

    return payment
