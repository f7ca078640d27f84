"""Lead management endpoints."""
from fastapi import APIRouter, Depends, HTTPException, status, BackgroundTasks, Query, Response
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
import logging

from leadflow.db.base import get_db
from leadflow.models.enums import CustomerCategory, LeadStatus
from leadflow.models.user import User
from leadflow.repositories.lead_repo import LeadRepository
from leadflow.repositories.user_repo import UserRepository
from leadflow.schemas.lead import LeadCreate, LeadUpdate, LeadResponse, LeadStatsResponse
from leadflow.services.lead_export import export_filename, leads_to_csv
from leadflow.services.lead_notifications import LeadSnapshot, notify_lead_changed, notify_lead_created
from leadflow.services.messaging import NotificationService
from leadflow.app.dependencies import get_notification_service
from leadflow.api.deps import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()


def _recipients(db: Session) -> List[str]:
    return [u.email for u in UserRepository(db).active_users()]


def _get_lead_or_404(repo: LeadRepository, lead_id: UUID):
    lead = repo.get(lead_id)
    if not lead:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Lead not found"
        )
    return lead


@router.get("", response_model=List[LeadResponse])
async def list_leads(
    search: Optional[str] = Query(None, description="Case-insensitive search across lead fields"),
    status_filter: Optional[LeadStatus] = Query(None, alias="status"),
    category: Optional[CustomerCategory] = Query(None),
    city: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    List leads.

    - `search` takes precedence over the filters
    - Most recently contacted first, never-contacted leads last
    """
    leads = LeadRepository(db).find(search=search, status=status_filter, category=category, city=city)
    return [LeadResponse.model_validate(lead) for lead in leads]


@router.get("/export")
async def export_leads(
    search: Optional[str] = Query(None),
    status_filter: Optional[LeadStatus] = Query(None, alias="status"),
    category: Optional[CustomerCategory] = Query(None),
    city: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Download the (filtered) leads as CSV."""
    leads = LeadRepository(db).find(search=search, status=status_filter, category=category, city=city)
    filename = export_filename()
    logger.info(f"{current_user.email} exported {len(leads)} leads")
    return Response(
        content=leads_to_csv(leads),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/stats/summary", response_model=LeadStatsResponse)
async def lead_stats(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Dashboard summary: totals and conversion rate."""
    counts = LeadRepository(db).status_counts()
    total = sum(counts.values())
    converted = counts.get(LeadStatus.converted, 0)
    rate = f"{converted / total * 100:.1f}" if total else "0.0"
    return LeadStatsResponse(
        total_leads=total,
        hot_leads=counts.get(LeadStatus.hot, 0),
        converted=converted,
        conversion_rate=rate,
    )


@router.get("/{lead_id}", response_model=LeadResponse)
async def get_lead(
    lead_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return LeadResponse.model_validate(_get_lead_or_404(LeadRepository(db), lead_id))


@router.post("", response_model=LeadResponse, status_code=status.HTTP_201_CREATED)
async def create_lead(
    request: LeadCreate,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notification_service),
):
    """Create a lead and announce it to every active user."""
    lead = LeadRepository(db).create_lead(request, created_by_id=current_user.id)
    logger.info(f"Lead {lead.id} created by {current_user.email}")

    background_tasks.add_task(notify_lead_created, notifier, _recipients(db), LeadSnapshot.of(lead))
    return LeadResponse.model_validate(lead)


@router.put("/{lead_id}", response_model=LeadResponse)
async def update_lead(
    lead_id: UUID,
    request: LeadUpdate,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notification_service),
):
    """Partially update a lead; status and follow-up changes are emailed."""
    repo = LeadRepository(db)
    before = LeadSnapshot.of(_get_lead_or_404(repo, lead_id))

    lead = repo.update(lead_id, request.model_dump(exclude_unset=True))
    after = LeadSnapshot.of(lead)

    background_tasks.add_task(notify_lead_changed, notifier, _recipients(db), before, after)
    return LeadResponse.model_validate(lead)


@router.delete("/{lead_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_lead(
    lead_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    if not LeadRepository(db).delete(lead_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Lead not found"
        )
    logger.info(f"Lead {lead_id} deleted by {current_user.email}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
