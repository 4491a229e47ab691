from fastapi import APIRouter, Depends, HTTPException, Query, Request
from typing import Optional, List, Dict, Any
from sqlalchemy.orm import Session
import logging

from app.api.deps import page_request, require_db
from app.api.serializers import package_to_dict
from app.core.monitoring import track_performance
from app.core.rate_limiting import limiter, BROWSE_LIMIT
from app.db.repositories import PackageRepository
from app.services.filters import package_filters
from app.services.pagination import PageRequest
from app.services.sorting import resolve_package_sort

logger = logging.getLogger(__name__)

router = APIRouter(tags=["packages"])


# ============================================================================
# PUBLIC CATALOGUE
# ============================================================================

@router.get("/packages", response_model=Dict[str, Any])
@limiter.limit(BROWSE_LIMIT)
@track_performance("list_packages")
def list_packages(
    request: Request,
    search: Optional[str] = Query(None, description="Text search on title and descriptions"),
    location: Optional[str] = Query(None, description="Exact location, or 'All Locations'"),
    duration: Optional[str] = Query(None, description="Range such as '4-7 Days' or '7+ Days'"),
    price_range: Optional[str] = Query(None, alias="priceRange", description="Range such as '$0-$500' or '$1000+'"),
    sort_by: Optional[str] = Query(None, alias="sortBy", description="price-low-high | price-high-low | newest | popular"),
    featured: Optional[str] = Query(None, description="'true' for featured packages only"),
    paging: PageRequest = Depends(page_request),
    db: Session = Depends(require_db),
):
    """
    Browse the catalogue.
    Unparseable filters are ignored; an unknown sortBy falls back to 'popular'.
    """
    predicate = package_filters({
        "search": search,
        "location": location,
        "duration": duration,
        "priceRange": price_range,
        "featured": featured,
    })
    page = PackageRepository(db).list_page(predicate, resolve_package_sort(sort_by), paging)
    return {
        "data": [package_to_dict(p) for p in page.items],
        "pagination": page.pagination.as_dict(),
    }


@router.get("/packages/meta/locations", response_model=List[str])
@limiter.limit(BROWSE_LIMIT)
def get_unique_locations(request: Request, db: Session = Depends(require_db)):
    """Distinct package locations for the location dropdown."""
    return PackageRepository(db).get_unique_locations()


@router.get("/packages/{slug}", response_model=Dict[str, Any])
@limiter.limit(BROWSE_LIMIT)
def get_package_details(request: Request, slug: str, db: Session = Depends(require_db)):
    package = PackageRepository(db).get_by_slug(slug)
    if not package:
        raise HTTPException(status_code=404, detail="Package not found")
    return {"data": package_to_dict(package)}
