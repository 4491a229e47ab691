"""
Payment history and gateway checkout verification for customers.
"""

from typing import Any, Dict, List
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.api.deps import get_customer, require_db
from app.api.routes_bookings import get_owned_booking
from app.api.serializers import booking_to_dict, payment_record
from app.core.monitoring import track_performance
from app.core.rate_limiting import limiter, PAYMENT_LIMIT
from app.db.models import PaymentStatus, User
from app.db.repositories import BookingRepository
from app.services.payments import verify_payment_signature

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["payments"])


class PaymentVerification(BaseModel):
    bookingId: int
    orderId: str = Field(..., min_length=1, max_length=120)
    paymentId: str = Field(..., min_length=1, max_length=120)
    signature: str = Field(..., min_length=1, max_length=256)


@router.get("", response_model=List[Dict[str, Any]])
@limiter.limit(PAYMENT_LIMIT)
def list_my_payments(
    request: Request,
    user: User = Depends(get_customer),
    db: Session = Depends(require_db),
):
    """Payment records derived from the caller's paid, refunded or gateway-referenced bookings."""
    return [payment_record(b) for b in BookingRepository(db).payments_for_user(user.id)]


@router.post("/verify", response_model=Dict[str, Any])
@limiter.limit(PAYMENT_LIMIT)
@track_performance("verify_payment")
def verify_payment(
    request: Request,
    body: PaymentVerification,
    user: User = Depends(get_customer),
    db: Session = Depends(require_db),
):
    booking = get_owned_booking(body.bookingId, user, db)

    if not verify_payment_signature(body.orderId, body.paymentId, body.signature):
        logger.warning(f"Payment signature mismatch for booking {booking.id}")
        raise HTTPException(status_code=400, detail="Invalid payment signature")

    booking = BookingRepository(db).update(booking, {
        "payment_id": body.paymentId,
        "payment_status": PaymentStatus.COMPLETED.value,
    })
    logger.info(f"Payment {body.paymentId} verified for booking {booking.id}")
    return {"message": "Payment verified successfully", "booking": booking_to_dict(booking)}
