"""
Repository pattern for data access.
Every listing runs through paginate(): one filtered query, counted and
then sliced, so the page and its total always share the same predicate.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple
import logging

from sqlalchemy import extract, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, joinedload

from app.db.models import (
    Booking,
    BookingStatus,
    HomeConfig,
    Package,
    PaymentStatus,
    User,
    UserRole,
    utcnow,
)
from app.db.query import (
    BOOKING_FIELDS,
    PACKAGE_FIELDS,
    USER_FIELDS,
    FieldMap,
    apply_ordering,
    compile_predicate,
)
from app.services.pagination import Page, PageRequest, PaginationSummary
from app.services.predicates import EMPTY, Equals, Ordering, Predicate
from app.services.sorting import NEWEST_FIRST
from app.services.stats import MonthRow, year_bounds

logger = logging.getLogger(__name__)

REVENUE_STATUSES = (BookingStatus.CONFIRMED.value, BookingStatus.COMPLETED.value)
PENDING_BOOKINGS = Predicate((Equals("status", BookingStatus.PENDING.value),))


def paginate(
    query: Query,
    fields: FieldMap,
    predicate: Predicate,
    ordering: Ordering,
    request: PageRequest,
    tiebreaker: Any = None,
) -> Page:
    """Count and slice one filtered query."""
    filtered = query.filter(*compile_predicate(fields, predicate))
    total = filtered.order_by(None).count()
    items = (
        apply_ordering(filtered, fields, ordering, tiebreaker)
        .offset(request.skip)
        .limit(request.limit)
        .all()
    )
    logger.debug(f"Page {request.page} returned {len(items)} of {total} rows")
    return Page(items=items, pagination=PaginationSummary.build(total, request))


class BaseRepository:
    def __init__(self, db: Session):
        self.db = db

    def _commit(self, instance: Any = None) -> Any:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Commit failed: {e}")
            raise
        if instance is not None:
            self.db.refresh(instance)
        return instance

    def _apply(self, instance: Any, values: Dict[str, Any]) -> None:
        for key, value in values.items():
            setattr(instance, key, value)


class PackageRepository(BaseRepository):
    """Package catalogue (packages table)."""

    def get_by_id(self, package_id: int) -> Optional[Package]:
        return self.db.get(Package, package_id)

    def get_by_slug(self, slug: str) -> Optional[Package]:
        return self.db.query(Package).filter(Package.slug == slug).first()

    def slug_exists(self, slug: str) -> bool:
        return self.db.query(Package.id).filter(Package.slug == slug).first() is not None

    def list_page(self, predicate: Predicate, ordering: Ordering, request: PageRequest) -> Page:
        return paginate(self.db.query(Package), PACKAGE_FIELDS, predicate, ordering, request, Package.id)

    def count(self) -> int:
        return self.db.query(func.count(Package.id)).scalar() or 0

    def get_unique_locations(self) -> List[str]:
        rows = self.db.query(Package.location).distinct().all()
        return sorted(r[0] for r in rows if r[0])

    def has_bookings(self, package_id: int) -> bool:
        return self.db.query(Booking.id).filter(Booking.package_id == package_id).first() is not None

    def create(self, values: Dict[str, Any]) -> Package:
        package = Package(**values)
        self.db.add(package)
        return self._commit(package)

    def update(self, package: Package, values: Dict[str, Any]) -> Package:
        self._apply(package, values)
        return self._commit(package)

    def delete(self, package: Package) -> None:
        self.db.delete(package)
        self._commit()


class BookingRepository(BaseRepository):
    """Bookings, payment history and dashboard aggregates."""

    def _with_relations(self) -> Query:
        return self.db.query(Booking).options(
            joinedload(Booking.package), joinedload(Booking.user)
        )

    def get_by_id(self, booking_id: int) -> Optional[Booking]:
        return self._with_relations().filter(Booking.id == booking_id).first()

    def list_page(self, predicate: Predicate, request: PageRequest, ordering: Ordering = NEWEST_FIRST) -> Page:
        return paginate(self._with_relations(), BOOKING_FIELDS, predicate, ordering, request, Booking.id)

    def list_for_user(self, user_id: int, limit: Optional[int] = None) -> List[Booking]:
        query = apply_ordering(
            self._with_relations().filter(Booking.user_id == user_id),
            BOOKING_FIELDS, NEWEST_FIRST, Booking.id,
        )
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def payments_for_user(self, user_id: int) -> List[Booking]:
        """Bookings that carry payment information: settled, refunded or with a gateway reference."""
        query = self._with_relations().filter(
            Booking.user_id == user_id,
            or_(
                Booking.payment_status.in_([PaymentStatus.COMPLETED.value, PaymentStatus.REFUNDED.value]),
                Booking.payment_id.isnot(None),
            ),
        )
        return apply_ordering(query, BOOKING_FIELDS, NEWEST_FIRST, Booking.id).all()

    def count(self, predicate: Predicate = EMPTY) -> int:
        return (
            self.db.query(func.count(Booking.id))
            .filter(*compile_predicate(BOOKING_FIELDS, predicate))
            .scalar()
            or 0
        )

    def count_for_users(self, user_ids: Iterable[int]) -> Dict[int, int]:
        ids = list(user_ids)
        if not ids:
            return {}
        rows = (
            self.db.query(Booking.user_id, func.count(Booking.id))
            .filter(Booking.user_id.in_(ids))
            .group_by(Booking.user_id)
            .all()
        )
        return {user_id: count for user_id, count in rows}

    def total_revenue(self) -> float:
        total = (
            self.db.query(func.coalesce(func.sum(Booking.total_amount), 0))
            .filter(Booking.status.in_(REVENUE_STATUSES))
            .scalar()
        )
        return total or 0

    def recent(self, limit: int) -> List[Booking]:
        return apply_ordering(self._with_relations(), BOOKING_FIELDS, NEWEST_FIRST, Booking.id).limit(limit).all()

    def monthly_totals(self, year: int) -> List[MonthRow]:
        """(month, count, revenue) for each month of the year that has bookings."""
        start, end = year_bounds(year)
        month = extract("month", Booking.created_at)
        rows = (
            self.db.query(month, func.count(Booking.id), func.coalesce(func.sum(Booking.total_amount), 0))
            .filter(Booking.created_at >= start, Booking.created_at < end)
            .group_by(month)
            .all()
        )
        return [tuple(row) for row in rows]

    def create(self, values: Dict[str, Any]) -> Booking:
        booking = Booking(**values)
        self.db.add(booking)
        self._commit(booking)
        return self.get_by_id(booking.id)

    def update(self, booking: Booking, values: Dict[str, Any]) -> Booking:
        self._apply(booking, values)
        self._commit(booking)
        return self.get_by_id(booking.id)

    def delete(self, booking: Booking) -> None:
        self.db.delete(booking)
        self._commit()


class UserRepository(BaseRepository):
    """Local user profiles keyed by identity-provider subject."""

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_by_external_id(self, external_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.external_id == external_id).first()

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email.strip().lower()).first()

    def list_admins(self) -> List[User]:
        return (
            self.db.query(User)
            .filter(User.role == UserRole.ADMIN.value)
            .order_by(User.name.asc(), User.id.asc())
            .all()
        )

    def list_page(self, predicate: Predicate, ordering: Ordering, request: PageRequest) -> Page:
        return paginate(self.db.query(User), USER_FIELDS, predicate, ordering, request, User.id)

    def count(self, role: Optional[str] = None) -> int:
        query = self.db.query(func.count(User.id))
        if role:
            query = query.filter(User.role == role)
        return query.scalar() or 0

    def has_bookings(self, user_id: int) -> bool:
        return self.db.query(Booking.id).filter(Booking.user_id == user_id).first() is not None

    def create(self, values: Dict[str, Any]) -> User:
        if values.get("email"):
            values = {**values, "email": values["email"].strip().lower()}
        user = User(**values)
        self.db.add(user)
        return self._commit(user)

    def update(self, user: User, values: Dict[str, Any]) -> User:
        self._apply(user, values)
        return self._commit(user)

    def touch_login(self, user: User, when: Optional[datetime] = None) -> User:
        user.last_login = when or utcnow()
        return self._commit(user)

    def delete(self, user: User) -> None:
        self.db.delete(user)
        self._commit()


class HomeConfigRepository(BaseRepository):
    """The single home-page configuration row."""

    def get(self) -> Optional[HomeConfig]:
        return self.db.query(HomeConfig).order_by(HomeConfig.id.asc()).first()

    def create(self, columns: Dict[str, Any]) -> HomeConfig:
        config = HomeConfig(**columns)
        self.db.add(config)
        return self._commit(config)

    def save(self, config: HomeConfig, columns: Dict[str, Any]) -> HomeConfig:
        self._apply(config, columns)
        return self._commit(config)


def dashboard_counts(db: Session) -> Tuple[int, int, int, int]:
    """(packages, bookings, customers, pending bookings)."""
    bookings = BookingRepository(db)
    return (
        PackageRepository(db).count(),
        bookings.count(),
        UserRepository(db).count(role="user"),
        bookings.count(PENDING_BOOKINGS),
    )
