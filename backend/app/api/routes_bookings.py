"""
Customer booking routes.
A booking is created pending/pending and belongs to the calling user;
customers can read their own bookings and cancel them.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.orm import Session

from app.api.deps import get_customer, require_db
from app.api.serializers import booking_to_dict
from app.core.monitoring import track_performance
from app.core.rate_limiting import limiter, BOOKING_LIMIT
from app.db.models import Booking, BookingStatus, PaymentStatus, User, as_naive_utc
from app.db.repositories import BookingRepository, PackageRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])

CANCELLABLE = (BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value)


class ContactInfo(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=40)


class BookingCreate(BaseModel):
    packageId: int = Field(..., description="Package being booked")
    startDate: datetime = Field(..., description="Trip start date")
    numberOfPeople: int = Field(..., ge=1, le=500)
    totalAmount: float = Field(..., ge=0)
    contactInfo: ContactInfo
    specialRequests: Optional[str] = Field(None, max_length=2000)


class BookingStatusUpdate(BaseModel):
    status: Optional[str] = Field(None, description="Only 'cancelled' is accepted")


def booking_columns(body: BookingCreate) -> Dict[str, Any]:
    """Column values shared by customer and admin booking creation."""
    return {
        "package_id": body.packageId,
        "start_date": as_naive_utc(body.startDate),
        "number_of_people": body.numberOfPeople,
        "total_amount": body.totalAmount,
        "contact_name": body.contactInfo.name.strip(),
        "contact_email": str(body.contactInfo.email),
        "contact_phone": body.contactInfo.phone.strip(),
        "special_requests": body.specialRequests or "",
    }


def get_owned_booking(booking_id: int, user: User, db: Session) -> Booking:
    booking = BookingRepository(db).get_by_id(booking_id)
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    if booking.user_id != user.id:
        logger.warning(f"User {user.id} tried to access booking {booking_id}")
        raise HTTPException(status_code=403, detail="Unauthorized")
    return booking


@router.post("", status_code=201)
@limiter.limit(BOOKING_LIMIT)
@track_performance("create_booking")
def create_booking(
    request: Request,
    body: BookingCreate,
    user: User = Depends(get_customer),
    db: Session = Depends(require_db),
):
    if PackageRepository(db).get_by_id(body.packageId) is None:
        raise HTTPException(status_code=404, detail="Package not found")

    values = booking_columns(body)
    values.update(
        user_id=user.id,
        status=BookingStatus.PENDING.value,
        payment_status=PaymentStatus.PENDING.value,
    )
    booking = BookingRepository(db).create(values)
    logger.info(f"Booking {booking.id} created by user {user.id} for package {body.packageId}")
    return {
        "message": "Booking created successfully",
        "bookingId": booking.id,
        "status": booking.status,
    }


@router.get("", response_model=List[Dict[str, Any]])
@limiter.limit(BOOKING_LIMIT)
def list_my_bookings(
    request: Request,
    user: User = Depends(get_customer),
    db: Session = Depends(require_db),
):
    """The caller's bookings, newest first, with package details."""
    return [booking_to_dict(b) for b in BookingRepository(db).list_for_user(user.id)]


@router.get("/{booking_id}", response_model=Dict[str, Any])
@limiter.limit(BOOKING_LIMIT)
def get_my_booking(
    request: Request,
    booking_id: int,
    user: User = Depends(get_customer),
    db: Session = Depends(require_db),
):
    return booking_to_dict(get_owned_booking(booking_id, user, db), full_package=True)


@router.patch("/{booking_id}", response_model=Dict[str, Any])
@limiter.limit(BOOKING_LIMIT)
def cancel_my_booking(
    request: Request,
    booking_id: int,
    body: BookingStatusUpdate,
    user: User = Depends(get_customer),
    db: Session = Depends(require_db),
):
    """Customers may only move a pending or confirmed booking to cancelled."""
    booking = get_owned_booking(booking_id, user, db)
    if body.status != BookingStatus.CANCELLED.value:
        raise HTTPException(status_code=400, detail="Invalid booking status")
    if booking.status not in CANCELLABLE:
        raise HTTPException(status_code=400, detail=f"A {booking.status} booking cannot be cancelled")

    booking = BookingRepository(db).update(booking, {"status": BookingStatus.CANCELLED.value})
    logger.info(f"Booking {booking.id} cancelled by user {user.id}")
    return booking_to_dict(booking)
