"""Analytics endpoints."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from leadflow.db.base import get_db
from leadflow.models.enums import LeadStatus
from leadflow.models.user import User
from leadflow.repositories.lead_repo import LeadRepository
from leadflow.schemas.lead import AnalyticsResponse
from leadflow.api.deps import get_current_user

router = APIRouter()


@router.get("", response_model=AnalyticsResponse)
async def get_analytics(
    days: int = Query(30, ge=1, le=3650),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    counts = LeadRepository(db).status_counts()
    total = sum(counts.values())
    converted = counts.get(LeadStatus.converted, 0)
    return AnalyticsResponse(
        total_leads=total,
        converted_leads=converted,
        hot_leads=counts.get(LeadStatus.hot, 0),
        conversion_rate=round(converted / total * 100, 2) if total else 0.0,
        time_range=days,
    )
