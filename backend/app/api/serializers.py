"""
ORM rows -> API dictionaries.
Keys use the camelCase names the web client expects.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from app.db.models import Booking, HomeConfig, Package, User
from app.services.home_config import SECTION_COLUMNS


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def package_to_dict(package: Package) -> Dict[str, Any]:
    return {
        "id": package.id,
        "title": package.title,
        "slug": package.slug,
        "description": package.description,
        "shortDescription": package.short_description,
        "duration": package.duration,
        "location": package.location,
        "price": package.price,
        "discountedPrice": package.discounted_price,
        "images": list(package.images or []),
        "inclusions": list(package.inclusions or []),
        "exclusions": list(package.exclusions or []),
        "itinerary": list(package.itinerary or []),
        "featured": bool(package.featured),
        "maxGroupSize": package.max_group_size,
        "createdAt": _iso(package.created_at),
        "updatedAt": _iso(package.updated_at),
    }


def package_summary(package: Optional[Package]) -> Optional[Dict[str, Any]]:
    if package is None:
        return None
    return {
        "id": package.id,
        "title": package.title,
        "slug": package.slug,
        "location": package.location,
        "duration": package.duration,
        "price": package.price,
        "images": list(package.images or []),
    }


def user_summary(user: Optional[User]) -> Optional[Dict[str, Any]]:
    if user is None:
        return None
    return {"id": user.id, "name": user.name, "email": user.email, "phone": user.phone}


def admin_to_dict(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "phone": user.phone or "",
        "permissions": list(user.permissions or []),
        "lastLogin": _iso(user.last_login),
    }


def booking_to_dict(booking: Booking, full_package: bool = False) -> Dict[str, Any]:
    package = booking.package
    return {
        "id": booking.id,
        "userId": booking.user_id,
        "packageId": booking.package_id,
        "user": user_summary(booking.user),
        "package": package_to_dict(package) if full_package and package else package_summary(package),
        "startDate": _iso(booking.start_date),
        "numberOfPeople": booking.number_of_people,
        "totalAmount": booking.total_amount,
        "status": booking.status,
        "paymentId": booking.payment_id,
        "paymentStatus": booking.payment_status,
        "contactInfo": {
            "name": booking.contact_name,
            "email": booking.contact_email,
            "phone": booking.contact_phone,
        },
        "specialRequests": booking.special_requests or "",
        "createdAt": _iso(booking.created_at),
        "updatedAt": _iso(booking.updated_at),
    }


def booking_brief(booking: Booking) -> Dict[str, Any]:
    """Row used in user detail pages."""
    return {
        "id": booking.id,
        "packageName": booking.package.title if booking.package else "Unknown Package",
        "startDate": _iso(booking.start_date),
        "status": booking.status,
        "totalAmount": booking.total_amount,
        "createdAt": _iso(booking.created_at),
    }


def recent_booking(booking: Booking) -> Dict[str, Any]:
    """Row used in the dashboard's recent bookings table."""
    return {
        "id": booking.id,
        "packageName": booking.package.title if booking.package else "Unknown Package",
        "customerName": booking.user.name if booking.user else booking.contact_name,
        "date": _iso(booking.created_at),
        "amount": booking.total_amount,
        "status": booking.status,
    }


def payment_record(booking: Booking) -> Dict[str, Any]:
    return {
        "id": booking.payment_id or f"PAY-{booking.id}",
        "bookingId": booking.id,
        "packageName": booking.package.title if booking.package else "Package",
        "amount": booking.total_amount,
        "status": booking.payment_status,
        "date": _iso(booking.updated_at or booking.created_at),
        "paymentMethod": "Online Payment" if booking.payment_id else "Direct Payment",
    }


def user_to_dict(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "externalId": user.external_id,
        "name": user.name,
        "email": user.email,
        "phone": user.phone or "",
        "profileImage": user.profile_image,
        "role": user.role,
        "permissions": list(user.permissions or []),
        "lastLogin": _iso(user.last_login),
        "createdAt": _iso(user.created_at),
        "updatedAt": _iso(user.updated_at),
    }


def home_config_sections(config: HomeConfig) -> Dict[str, Dict[str, Any]]:
    return {name: dict(getattr(config, column) or {}) for name, column in SECTION_COLUMNS.items()}


def home_config_to_dict(config: HomeConfig) -> Dict[str, Any]:
    return {
        "id": config.id,
        **home_config_sections(config),
        "createdAt": _iso(config.created_at),
        "updatedAt": _iso(config.updated_at),
    }
