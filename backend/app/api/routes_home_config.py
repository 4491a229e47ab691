"""
Home-page configuration: public read, admin read/update.
The admin routes create the default record on first access.
"""

from typing import Any, Dict
import logging

from fastapi import APIRouter, Body, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.api.deps import get_admin, require_db
from app.api.serializers import home_config_sections, home_config_to_dict
from app.core.rate_limiting import limiter, BROWSE_LIMIT
from app.db.models import HomeConfig
from app.db.repositories import HomeConfigRepository
from app.services.home_config import SECTION_COLUMNS, default_sections, merge_sections

logger = logging.getLogger(__name__)

router = APIRouter(tags=["home-config"])
admin_router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(get_admin)])


def _to_columns(sections: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
    return {SECTION_COLUMNS[name]: value for name, value in sections.items()}


def _get_or_create(repo: HomeConfigRepository) -> HomeConfig:
    config = repo.get()
    if config is None:
        config = repo.create(_to_columns(default_sections()))
        logger.info("Created default home page configuration")
    return config


@router.get("/home-config", response_model=Dict[str, Any])
@limiter.limit(BROWSE_LIMIT)
def get_public_home_config(request: Request, db: Session = Depends(require_db)):
    config = HomeConfigRepository(db).get()
    if config is None:
        raise HTTPException(status_code=404, detail="Home configuration not found")
    return home_config_to_dict(config)


@admin_router.get("/home-config", response_model=Dict[str, Any])
def get_home_config(db: Session = Depends(require_db)):
    return {"data": home_config_to_dict(_get_or_create(HomeConfigRepository(db)))}


@admin_router.patch("/home-config", response_model=Dict[str, Any])
def update_home_config(
    body: Dict[str, Any] = Body(..., description="Sections to update, keyed by section name"),
    db: Session = Depends(require_db),
):
    """Each provided section is merged into the stored one; omitted sections are untouched."""
    repo = HomeConfigRepository(db)
    config = _get_or_create(repo)
    merged = merge_sections(home_config_sections(config), body)
    config = repo.save(config, _to_columns(merged))
    return {"message": "Home configuration updated successfully", "data": home_config_to_dict(config)}
