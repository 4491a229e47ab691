"""
Shared FastAPI dependencies: database session, caller identity, roles
and pagination parameters.
"""

from typing import Optional
import logging

from fastapi import Depends, HTTPException, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.security import Identity, InvalidTokenError, decode_identity_token
from app.db.database import get_db
from app.db.models import User, UserRole
from app.db.repositories import UserRepository
from app.services.pagination import PageRequest

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def require_db(db: Optional[Session] = Depends(get_db)) -> Session:
    if db is None:
        raise HTTPException(status_code=503, detail="Service unavailable: database not connected")
    return db


def get_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Identity:
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=401, detail="Unauthorized")
    try:
        return decode_identity_token(credentials.credentials)
    except InvalidTokenError:
        raise HTTPException(status_code=401, detail="Unauthorized")


def get_current_user(
    identity: Identity = Depends(get_identity),
    db: Session = Depends(require_db),
) -> User:
    user = UserRepository(db).get_by_external_id(identity.subject)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def get_customer(user: User = Depends(get_current_user)) -> User:
    """Bookings and payments belong to customers; admins use the back-office routes."""
    if user.role != UserRole.USER.value:
        raise HTTPException(status_code=403, detail="Only users can access bookings")
    return user


def get_admin(
    identity: Identity = Depends(get_identity),
    db: Session = Depends(require_db),
) -> User:
    repo = UserRepository(db)
    user = repo.get_by_external_id(identity.subject)
    if user is None or not user.is_admin:
        logger.warning(f"Admin access denied for subject {identity.subject}")
        raise HTTPException(status_code=403, detail="Forbidden: Admin access required")
    return repo.touch_login(user)


def page_request(
    page: Optional[str] = Query(None, description="1-based page number"),
    limit: Optional[str] = Query(None, description="Page size"),
) -> PageRequest:
    # Raw strings: malformed values fall back to defaults instead of a 422
    return PageRequest.from_params(
        page, limit,
        default_limit=settings.default_page_size,
        max_limit=settings.max_page_size,
    )
