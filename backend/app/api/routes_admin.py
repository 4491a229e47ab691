"""
Back-office management of packages, bookings and users.
Every route here requires an admin caller.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.api.deps import get_admin, page_request, require_db
from app.api.routes_bookings import BookingCreate, ContactInfo, booking_columns
from app.api.serializers import (
    booking_brief,
    booking_to_dict,
    package_to_dict,
    user_to_dict,
)
from app.core.monitoring import track_performance
from app.db.models import BookingStatus, PaymentStatus, as_naive_utc
from app.db.repositories import BookingRepository, PackageRepository, UserRepository
from app.services.filters import (
    BOOKING_STATUSES,
    PAYMENT_STATUSES,
    USER_ROLES,
    admin_package_filters,
    booking_filters,
    user_filters,
)
from app.services.pagination import PageRequest
from app.services.slugs import unique_slug
from app.services.sorting import NEWEST_FIRST, resolve_user_sort

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(get_admin)])

USER_DETAIL_BOOKINGS = 5


# ============================================================================
# REQUEST MODELS
# ============================================================================

class ItineraryDay(BaseModel):
    day: int = Field(..., ge=1)
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    image: Optional[str] = None


class PackageCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    shortDescription: str = Field(..., min_length=1)
    duration: int = Field(..., ge=1, description="Days")
    location: str = Field(..., min_length=1, max_length=120)
    price: float = Field(..., ge=0)
    discountedPrice: Optional[float] = Field(None, ge=0)
    images: List[str] = Field(..., min_length=1)
    inclusions: List[str] = Field(default_factory=list)
    exclusions: List[str] = Field(default_factory=list)
    itinerary: List[ItineraryDay] = Field(default_factory=list)
    featured: bool = False
    maxGroupSize: int = Field(1, ge=1)


class PackageUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    shortDescription: Optional[str] = Field(None, min_length=1)
    duration: Optional[int] = Field(None, ge=1)
    location: Optional[str] = Field(None, min_length=1, max_length=120)
    price: Optional[float] = Field(None, ge=0)
    discountedPrice: Optional[float] = Field(None, ge=0)
    images: Optional[List[str]] = Field(None, min_length=1)
    inclusions: Optional[List[str]] = None
    exclusions: Optional[List[str]] = None
    itinerary: Optional[List[ItineraryDay]] = None
    featured: Optional[bool] = None
    maxGroupSize: Optional[int] = Field(None, ge=1)


class AdminBookingCreate(BookingCreate):
    userId: int
    status: BookingStatus = BookingStatus.PENDING
    paymentStatus: PaymentStatus = PaymentStatus.PENDING
    paymentId: Optional[str] = Field(None, max_length=120)


class AdminBookingUpdate(BaseModel):
    # Enum fields stay plain strings so bad values get a 400 with a message
    status: Optional[str] = None
    paymentStatus: Optional[str] = None
    paymentId: Optional[str] = Field(None, max_length=120)
    startDate: Optional[datetime] = None
    numberOfPeople: Optional[int] = Field(None, ge=1, le=500)
    totalAmount: Optional[float] = Field(None, ge=0)
    contactInfo: Optional[ContactInfo] = None
    specialRequests: Optional[str] = Field(None, max_length=2000)


class RoleUpdate(BaseModel):
    role: str


_PACKAGE_COLUMNS = {
    "shortDescription": "short_description",
    "discountedPrice": "discounted_price",
    "maxGroupSize": "max_group_size",
}

# Columns a PATCH may clear by sending null
_NULLABLE_PACKAGE_FIELDS = {"discountedPrice"}


def _package_columns(data: Dict[str, Any]) -> Dict[str, Any]:
    return {_PACKAGE_COLUMNS.get(key, key): value for key, value in data.items()}


# ============================================================================
# PACKAGES
# ============================================================================

@router.get("/packages", response_model=Dict[str, Any])
@track_performance("admin_list_packages")
def list_packages(
    search: Optional[str] = Query(None, description="Search title, location and description"),
    featured: Optional[str] = Query(None, description="'true' or 'false'"),
    paging: PageRequest = Depends(page_request),
    db: Session = Depends(require_db),
):
    predicate = admin_package_filters({"search": search, "featured": featured})
    page = PackageRepository(db).list_page(predicate, NEWEST_FIRST, paging)
    return {
        "data": [package_to_dict(p) for p in page.items],
        "pagination": page.pagination.as_dict(),
    }


@router.post("/packages", status_code=201, response_model=Dict[str, Any])
def create_package(body: PackageCreate, db: Session = Depends(require_db)):
    repo = PackageRepository(db)
    values = _package_columns(body.model_dump())
    values["slug"] = unique_slug(body.title, repo.slug_exists)
    package = repo.create(values)
    logger.info(f"Package {package.id} created with slug {package.slug}")
    return {"message": "Package created successfully", "data": package_to_dict(package)}


@router.get("/packages/{package_id}", response_model=Dict[str, Any])
def get_package(package_id: int, db: Session = Depends(require_db)):
    package = PackageRepository(db).get_by_id(package_id)
    if not package:
        raise HTTPException(status_code=404, detail="Package not found")
    return {"data": package_to_dict(package)}


@router.patch("/packages/{package_id}", response_model=Dict[str, Any])
def update_package(package_id: int, body: PackageUpdate, db: Session = Depends(require_db)):
    repo = PackageRepository(db)
    package = repo.get_by_id(package_id)
    if not package:
        raise HTTPException(status_code=404, detail="Package not found")

    data = {
        key: value for key, value in body.model_dump(exclude_unset=True).items()
        if value is not None or key in _NULLABLE_PACKAGE_FIELDS
    }
    values = _package_columns(data)
    if "title" in data and data["title"] != package.title:
        values["slug"] = unique_slug(
            data["title"], lambda slug: slug != package.slug and repo.slug_exists(slug)
        )

    package = repo.update(package, values)
    return {"message": "Package updated successfully", "data": package_to_dict(package)}


@router.delete("/packages/{package_id}", response_model=Dict[str, Any])
def delete_package(package_id: int, db: Session = Depends(require_db)):
    repo = PackageRepository(db)
    package = repo.get_by_id(package_id)
    if not package:
        raise HTTPException(status_code=404, detail="Package not found")
    # Bookings keep a foreign key to the package, so it stays until they are removed
    if repo.has_bookings(package_id):
        raise HTTPException(status_code=409, detail="Package has bookings and cannot be deleted")
    repo.delete(package)
    logger.info(f"Package {package_id} deleted")
    return {"message": "Package deleted successfully"}


# ============================================================================
# BOOKINGS
# ============================================================================

@router.get("/bookings", response_model=Dict[str, Any])
@track_performance("admin_list_bookings")
def list_bookings(
    status: Optional[str] = Query(None, description="Booking status"),
    payment_status: Optional[str] = Query(None, alias="paymentStatus", description="Payment status"),
    search: Optional[str] = Query(None, description="Search contact name, email and phone"),
    paging: PageRequest = Depends(page_request),
    db: Session = Depends(require_db),
):
    predicate = booking_filters({"status": status, "paymentStatus": payment_status, "search": search})
    page = BookingRepository(db).list_page(predicate, paging)
    return {
        "data": [booking_to_dict(b) for b in page.items],
        "pagination": page.pagination.as_dict(),
    }


@router.post("/bookings", status_code=201, response_model=Dict[str, Any])
def create_booking(body: AdminBookingCreate, db: Session = Depends(require_db)):
    if UserRepository(db).get_by_id(body.userId) is None:
        raise HTTPException(status_code=404, detail="User not found")
    if PackageRepository(db).get_by_id(body.packageId) is None:
        raise HTTPException(status_code=404, detail="Package not found")

    values = booking_columns(body)
    values.update(
        user_id=body.userId,
        status=body.status.value,
        payment_status=body.paymentStatus.value,
        payment_id=body.paymentId,
    )
    booking = BookingRepository(db).create(values)
    return {"message": "Booking created successfully", "data": booking_to_dict(booking)}


@router.get("/bookings/{booking_id}", response_model=Dict[str, Any])
def get_booking(booking_id: int, db: Session = Depends(require_db)):
    booking = BookingRepository(db).get_by_id(booking_id)
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    return {"data": booking_to_dict(booking, full_package=True)}


@router.patch("/bookings/{booking_id}", response_model=Dict[str, Any])
def update_booking(booking_id: int, body: AdminBookingUpdate, db: Session = Depends(require_db)):
    repo = BookingRepository(db)
    booking = repo.get_by_id(booking_id)
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")

    data = body.model_dump(exclude_unset=True)
    if "status" in data and data["status"] not in BOOKING_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid booking status")
    if "paymentStatus" in data and data["paymentStatus"] not in PAYMENT_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid payment status")

    values: Dict[str, Any] = {}
    if data.get("status"):
        values["status"] = data["status"]
    if data.get("paymentStatus"):
        values["payment_status"] = data["paymentStatus"]
    if "paymentId" in data:
        values["payment_id"] = data["paymentId"] or None
    if body.startDate is not None:
        values["start_date"] = as_naive_utc(body.startDate)
    if body.numberOfPeople is not None:
        values["number_of_people"] = body.numberOfPeople
    if body.totalAmount is not None:
        values["total_amount"] = body.totalAmount
    if body.contactInfo is not None:
        values.update(
            contact_name=body.contactInfo.name.strip(),
            contact_email=str(body.contactInfo.email),
            contact_phone=body.contactInfo.phone.strip(),
        )
    if "specialRequests" in data:
        values["special_requests"] = data["specialRequests"] or ""

    booking = repo.update(booking, values)
    logger.info(f"Booking {booking_id} updated: {sorted(values)}")
    return {"message": "Booking updated successfully", "data": booking_to_dict(booking)}


@router.delete("/bookings/{booking_id}", response_model=Dict[str, Any])
def delete_booking(booking_id: int, db: Session = Depends(require_db)):
    repo = BookingRepository(db)
    booking = repo.get_by_id(booking_id)
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    repo.delete(booking)
    logger.info(f"Booking {booking_id} deleted")
    return {"message": "Booking deleted successfully"}


# ============================================================================
# USERS
# ============================================================================

@router.get("/users", response_model=Dict[str, Any])
@track_performance("admin_list_users")
def list_users(
    search: Optional[str] = Query(None, description="Search name and email"),
    role: Optional[str] = Query(None, description="user | admin | all"),
    sort: Optional[str] = Query(None, description="Field to sort by; createdAt sorts newest first"),
    paging: PageRequest = Depends(page_request),
    db: Session = Depends(require_db),
):
    predicate = user_filters({"search": search, "role": role})
    page = UserRepository(db).list_page(predicate, resolve_user_sort(sort), paging)
    counts = BookingRepository(db).count_for_users(u.id for u in page.items)

    users = []
    for user in page.items:
        row = user_to_dict(user)
        row["bookingCount"] = counts.get(user.id, 0)
        users.append(row)
    return {"data": users, "pagination": page.pagination.as_dict()}


@router.get("/users/{user_id}", response_model=Dict[str, Any])
def get_user(
    user_id: int,
    all_bookings: bool = Query(False, alias="allBookings", description="Return every booking instead of the latest five"),
    db: Session = Depends(require_db),
):
    user = UserRepository(db).get_by_id(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    bookings = BookingRepository(db)
    limit = None if all_bookings else USER_DETAIL_BOOKINGS
    row = user_to_dict(user)
    row["bookings"] = [booking_brief(b) for b in bookings.list_for_user(user.id, limit=limit)]
    row["bookingCount"] = bookings.count_for_users([user.id]).get(user.id, 0)
    return {"data": row}


@router.patch("/users/{user_id}", response_model=Dict[str, Any])
def update_user_role(user_id: int, body: RoleUpdate, db: Session = Depends(require_db)):
    if body.role not in USER_ROLES:
        raise HTTPException(status_code=400, detail="Invalid role")
    repo = UserRepository(db)
    user = repo.get_by_id(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    user = repo.update(user, {"role": body.role})
    logger.info(f"User {user_id} role set to {body.role}")
    return {"message": f"User role updated to {body.role}", "data": user_to_dict(user)}


@router.delete("/users/{user_id}", response_model=Dict[str, Any])
def delete_user(user_id: int, db: Session = Depends(require_db)):
    repo = UserRepository(db)
    user = repo.get_by_id(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    # Bookings keep a foreign key to the user, so it stays until they are removed
    if repo.has_bookings(user_id):
        raise HTTPException(status_code=409, detail="User has bookings and cannot be deleted")
    repo.delete(user)
    logger.info(f"User {user_id} deleted")
    return {"message": "User deleted successfully"}
