"""
Identity-facing user routes: sign-in sync and the caller's own profile.
"""

from typing import Any, Dict, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.deps import get_identity, require_db
from app.api.serializers import user_to_dict
from app.core.rate_limiting import limiter, BROWSE_LIMIT
from app.core.security import Identity
from app.db.models import UserRole
from app.db.repositories import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users"])


class ProfileUpdate(BaseModel):
    firstName: Optional[str] = Field(None, max_length=100)
    lastName: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=40)


def _claims_profile(identity: Identity) -> Dict[str, Any]:
    """Profile shape for a signed-in account that has no local record yet."""
    return {
        "id": None,
        "externalId": identity.subject,
        "name": identity.display_name,
        "email": identity.email,
        "phone": "",
        "profileImage": identity.picture,
        "role": UserRole.USER.value,
        "permissions": [],
    }


@router.get("/auth/me", response_model=Dict[str, Any])
@limiter.limit(BROWSE_LIMIT)
def sync_current_user(
    request: Request,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(require_db),
):
    """Find or create the local profile for the signed-in account."""
    repo = UserRepository(db)
    user = repo.get_by_external_id(identity.subject)
    if user is None and identity.email:
        # Admins added by email are linked to the account on first sign-in
        invited = repo.get_by_email(identity.email)
        if invited is not None and invited.external_id is None:
            user = repo.update(invited, {"external_id": identity.subject})
            logger.info(f"Linked profile {user.id} to subject {identity.subject}")
    if user is None:
        if not identity.email:
            return _claims_profile(identity)
        try:
            user = repo.create({
                "external_id": identity.subject,
                "email": identity.email,
                "name": identity.display_name or identity.email,
                "profile_image": identity.picture,
                "role": UserRole.USER.value,
            })
        except IntegrityError:
            logger.warning(f"Email {identity.email} already belongs to another account")
            raise HTTPException(status_code=409, detail="Email already registered to another account")
        logger.info(f"Created local profile {user.id} for subject {identity.subject}")
    return user_to_dict(repo.touch_login(user))


@router.get("/users/me", response_model=Dict[str, Any])
@limiter.limit(BROWSE_LIMIT)
def get_my_profile(
    request: Request,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(require_db),
):
    user = UserRepository(db).get_by_external_id(identity.subject)
    if user is None:
        return _claims_profile(identity)
    return user_to_dict(user)


@router.post("/users/update-profile", response_model=Dict[str, Any])
@limiter.limit(BROWSE_LIMIT)
def update_my_profile(
    request: Request,
    body: ProfileUpdate,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(require_db),
):
    repo = UserRepository(db)
    user = repo.get_by_external_id(identity.subject)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")

    values: Dict[str, Any] = {}
    if body.firstName is not None or body.lastName is not None:
        first = body.firstName if body.firstName is not None else identity.first_name
        last = body.lastName if body.lastName is not None else identity.last_name
        name = f"{first.strip()} {last.strip()}".strip()
        if name:
            values["name"] = name
    if body.phone is not None:
        values["phone"] = body.phone.strip()

    user = repo.update(user, values)
    return {"success": True, "user": user_to_dict(user)}
