"""
Admin dashboard: headline counts, revenue, recent bookings and a
twelve-month booking histogram for the selected year.
"""

from typing import Any, Dict, Optional
import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_admin, require_db
from app.api.serializers import recent_booking
from app.core.config import settings
from app.core.monitoring import track_performance
from app.db.repositories import BookingRepository, dashboard_counts
from app.services.stats import fill_monthly_gaps, resolve_year

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(get_admin)])


@router.get("/dashboard", response_model=Dict[str, Any])
@track_performance("admin_dashboard")
def get_dashboard(
    year: Optional[str] = Query(None, description="Calendar year for monthlyStats; defaults to the current year"),
    db: Session = Depends(require_db),
):
    selected_year = resolve_year(year)
    packages, bookings_total, users, pending = dashboard_counts(db)
    bookings = BookingRepository(db)

    return {
        "data": {
            "totalPackages": packages,
            "totalBookings": bookings_total,
            "totalUsers": users,
            "pendingBookings": pending,
            "totalRevenue": bookings.total_revenue(),
            "recentBookings": [recent_booking(b) for b in bookings.recent(settings.dashboard_recent_limit)],
            "monthlyStats": fill_monthly_gaps(bookings.monthly_totals(selected_year)),
            "year": selected_year,
        }
    }
