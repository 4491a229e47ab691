"""
Database models -- SQLAlchemy ORM definitions.
Packages, bookings, users and the single home-page configuration record.
Nested document parts are stored as JSON columns.
Compatible with both PostgreSQL and SQLite.
"""

from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class TimestampMixin:
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class Package(TimestampMixin, Base):
    """
    A bookable travel package.
    Slug is unique and regenerated whenever the title changes.
    """
    __tablename__ = "packages"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    slug = Column(String(220), unique=True, index=True, nullable=False)
    description = Column(Text, nullable=False)
    short_description = Column(Text, nullable=False)
    duration = Column(Integer, nullable=False, index=True)  # days
    location = Column(String(120), nullable=False, index=True)
    price = Column(Float, nullable=False, index=True)
    discounted_price = Column(Float, nullable=True)
    images = Column(JSON, nullable=False, default=list)
    inclusions = Column(JSON, nullable=False, default=list)
    exclusions = Column(JSON, nullable=False, default=list)
    itinerary = Column(JSON, nullable=False, default=list)  # [{day, title, description, image?}]
    featured = Column(Boolean, nullable=False, default=False, index=True)
    max_group_size = Column(Integer, nullable=False, default=1)

    bookings = relationship("Booking", back_populates="package")


class User(TimestampMixin, Base):
    """
    Local profile of an identity-provider account.
    Permissions are stored but not enforced: every admin has full access.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    # Empty for an admin added by email until that person first signs in
    external_id = Column(String(120), unique=True, index=True, nullable=True)
    email = Column(String(254), unique=True, index=True, nullable=False)
    name = Column(String(200), nullable=False)
    phone = Column(String(40), nullable=True)
    profile_image = Column(Text, nullable=True)
    role = Column(String(20), nullable=False, default=UserRole.USER.value, index=True)
    permissions = Column(JSON, nullable=False, default=list)
    last_login = Column(DateTime, nullable=True)

    bookings = relationship("Booking", back_populates="user")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


class Booking(TimestampMixin, Base):
    """A user's reservation of a package. contactInfo is flattened to contact_* columns."""
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    package_id = Column(Integer, ForeignKey("packages.id"), nullable=False, index=True)
    start_date = Column(DateTime, nullable=False)
    number_of_people = Column(Integer, nullable=False)
    total_amount = Column(Float, nullable=False, default=0)
    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value, index=True)
    payment_id = Column(String(120), nullable=True)
    payment_status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value, index=True)
    contact_name = Column(String(200), nullable=False)
    contact_email = Column(String(254), nullable=False)
    contact_phone = Column(String(40), nullable=False)
    special_requests = Column(Text, nullable=True)

    user = relationship("User", back_populates="bookings")
    package = relationship("Package", back_populates="bookings")


class HomeConfig(TimestampMixin, Base):
    """Editable home-page content. The application keeps a single row."""
    __tablename__ = "home_config"

    id = Column(Integer, primary_key=True)
    site_settings = Column(JSON, nullable=False, default=dict)
    hero_section = Column(JSON, nullable=False, default=dict)
    featured_packages_section = Column(JSON, nullable=False, default=dict)
    testimonials_section = Column(JSON, nullable=False, default=dict)
    about_section = Column(JSON, nullable=False, default=dict)
    contact_section = Column(JSON, nullable=False, default=dict)
    seo = Column(JSON, nullable=False, default=dict)
