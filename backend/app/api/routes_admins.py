"""
Back-office administrators: list, add by email, edit permissions, demote.
Permissions are stored for the client to display; every admin has full access.
"""

from typing import Any, Dict, List, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.deps import get_admin, require_db
from app.api.serializers import admin_to_dict, user_to_dict
from app.db.models import User, UserRole
from app.db.repositories import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/admins", tags=["admin"], dependencies=[Depends(get_admin)])
session_router = APIRouter(prefix="/admin-auth", tags=["admin"])


class AdminCreate(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=40)
    permissions: List[str] = Field(default_factory=list)


class AdminUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=40)
    permissions: Optional[List[str]] = None


def _get_admin_or_404(repo: UserRepository, user_id: int) -> User:
    user = repo.get_by_id(user_id)
    if user is None or not user.is_admin:
        raise HTTPException(status_code=404, detail="Admin not found")
    return user


@session_router.get("/me", response_model=Dict[str, Any])
def get_admin_session(admin: User = Depends(get_admin)):
    """Admin session check for the back-office client."""
    return {**user_to_dict(admin), "isAdmin": True}


@router.get("", response_model=Dict[str, Any])
def list_admins(db: Session = Depends(require_db)):
    return {"data": [admin_to_dict(u) for u in UserRepository(db).list_admins()]}


@router.post("", response_model=Dict[str, Any])
def add_admin(body: AdminCreate, response: Response, db: Session = Depends(require_db)):
    """Promote the user with this email, or create an admin profile for it."""
    repo = UserRepository(db)
    existing = repo.get_by_email(body.email)

    if existing is not None:
        if existing.is_admin:
            raise HTTPException(status_code=400, detail="Admin with this email already exists")
        user = repo.update(existing, {"role": UserRole.ADMIN.value, "permissions": body.permissions})
        logger.info(f"User {user.id} promoted to admin")
        return {"message": "User promoted to admin successfully", "data": admin_to_dict(user)}

    user = repo.create({
        "email": str(body.email),
        "name": body.name.strip(),
        "phone": body.phone,
        "role": UserRole.ADMIN.value,
        "permissions": body.permissions,
    })
    logger.info(f"Admin {user.id} created for {user.email}")
    response.status_code = 201
    return {"message": "Admin created successfully", "data": admin_to_dict(user)}


@router.get("/{user_id}", response_model=Dict[str, Any])
def get_admin_user(user_id: int, db: Session = Depends(require_db)):
    return {"data": admin_to_dict(_get_admin_or_404(UserRepository(db), user_id))}


@router.patch("/{user_id}", response_model=Dict[str, Any])
def update_admin(user_id: int, body: AdminUpdate, db: Session = Depends(require_db)):
    repo = UserRepository(db)
    user = _get_admin_or_404(repo, user_id)

    values: Dict[str, Any] = {}
    if body.name:
        values["name"] = body.name.strip()
    if body.email:
        values["email"] = str(body.email).strip().lower()
    if body.phone:
        values["phone"] = body.phone.strip()
    if body.permissions is not None:
        values["permissions"] = body.permissions

    try:
        user = repo.update(user, values)
    except IntegrityError:
        raise HTTPException(status_code=409, detail="Email already registered to another account")
    return {"message": "Admin updated successfully", "data": admin_to_dict(user)}


@router.delete("/{user_id}", response_model=Dict[str, Any])
def remove_admin(
    user_id: int,
    current: User = Depends(get_admin),
    db: Session = Depends(require_db),
):
    """Demote to a regular user; the account and its bookings are kept."""
    repo = UserRepository(db)
    user = _get_admin_or_404(repo, user_id)
    if user.id == current.id:
        raise HTTPException(status_code=400, detail="Cannot delete your own admin account")
    repo.update(user, {"role": UserRole.USER.value, "permissions": []})
    logger.info(f"Admin {user_id} demoted by {current.id}")
    return {"message": "Admin removed successfully"}
