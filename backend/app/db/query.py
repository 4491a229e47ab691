"""
Compile storage-neutral predicates and orderings into SQLAlchemy.

Each model publishes a FIELD_MAP from document paths ("createdAt",
"contactInfo.email") to its columns. Clauses on paths a model does not
map are dropped with a warning rather than failing the request.
"""

from typing import Any, Dict, List

from sqlalchemy import or_
from sqlalchemy.orm import Query
import logging

from app.db.models import Booking, Package, User
from app.services.predicates import Between, Direction, Equals, Ordering, Predicate, TextSearch

logger = logging.getLogger(__name__)

FieldMap = Dict[str, Any]

PACKAGE_FIELDS: FieldMap = {
    "title": Package.title,
    "slug": Package.slug,
    "description": Package.description,
    "shortDescription": Package.short_description,
    "location": Package.location,
    "duration": Package.duration,
    "price": Package.price,
    "featured": Package.featured,
    "createdAt": Package.created_at,
    "updatedAt": Package.updated_at,
}

BOOKING_FIELDS: FieldMap = {
    "status": Booking.status,
    "paymentStatus": Booking.payment_status,
    "contactInfo.name": Booking.contact_name,
    "contactInfo.email": Booking.contact_email,
    "contactInfo.phone": Booking.contact_phone,
    "userId": Booking.user_id,
    "packageId": Booking.package_id,
    "totalAmount": Booking.total_amount,
    "createdAt": Booking.created_at,
    "updatedAt": Booking.updated_at,
}

USER_FIELDS: FieldMap = {
    "name": User.name,
    "email": User.email,
    "phone": User.phone,
    "role": User.role,
    "createdAt": User.created_at,
    "updatedAt": User.updated_at,
    "lastLogin": User.last_login,
}


def escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def compile_predicate(fields: FieldMap, predicate: Predicate) -> List[Any]:
    """SQLAlchemy filter conditions (ANDed by the caller) for a predicate."""
    conditions = []
    for clause in predicate.clauses:
        if isinstance(clause, TextSearch):
            columns = [fields[f] for f in clause.fields if f in fields]
            if not columns:
                logger.warning(f"Search on unmapped fields ignored: {clause.fields}")
                continue
            pattern = f"%{escape_like(clause.text)}%"
            conditions.append(or_(*(c.ilike(pattern, escape="\\") for c in columns)))
            continue

        column = fields.get(clause.field)
        if column is None:
            logger.warning(f"Filter on unmapped field ignored: {clause.field}")
            continue

        if isinstance(clause, Equals):
            conditions.append(column == clause.value)
        elif isinstance(clause, Between):
            if clause.minimum is not None:
                conditions.append(column >= clause.minimum)
            if clause.maximum is not None:
                conditions.append(column <= clause.maximum)
    return conditions


def apply_ordering(query: Query, fields: FieldMap, ordering: Ordering, tiebreaker: Any = None) -> Query:
    """
    ORDER BY the mapped fields. The tiebreaker (normally the primary key)
    keeps page boundaries stable when sort keys repeat.
    """
    clauses = []
    for name, direction in ordering:
        column = fields.get(name)
        if column is None:
            logger.warning(f"Sort on unmapped field ignored: {name}")
            continue
        clauses.append(column.desc() if direction == Direction.DESC else column.asc())
    if tiebreaker is not None:
        clauses.append(tiebreaker.asc())
    return query.order_by(*clauses)
