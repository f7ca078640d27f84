"""Lead repository extending base repository."""
from typing import Dict, List, Optional

from sqlalchemy import String, cast, desc, func, or_
from sqlalchemy.orm import Session

from leadflow.models.enums import LeadStatus
from leadflow.models.lead import Lead
from leadflow.repositories.base import BaseRepository
from leadflow.schemas.lead import LeadCreate


# Columns matched by free-text search
SEARCHABLE_COLUMNS = (
    Lead.name,
    Lead.email,
    Lead.phone_number,
    Lead.city,
    Lead.state,
    Lead.country,
    Lead.pincode,
    Lead.company_name,
    Lead.designation,
    Lead.last_contacted_by,
    Lead.customer_interested_in,
    Lead.additional_notes,
    Lead.lead_status,
    Lead.customer_category,
    Lead.preferred_communication_channel,
    Lead.date_of_birth,
    Lead.last_contacted_date,
    Lead.next_followup_date,
)


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class LeadRepository(BaseRepository[Lead]):
    """Repository for lead database operations."""

    def __init__(self, db: Session):
        super().__init__(Lead, db)

    def _ordered(self, query):
        # most recently contacted first, never-contacted leads last
        return query.order_by(
            Lead.last_contacted_date.is_(None),
            desc(Lead.last_contacted_date),
            desc(Lead.created_at),
        )

    def create_lead(self, lead_data: LeadCreate, created_by_id=None) -> Lead:
        lead_dict = lead_data.model_dump()
        lead_dict['created_by_id'] = created_by_id
        return self.create(lead_dict)

    def list_leads(self) -> List[Lead]:
        return self._ordered(self.db.query(Lead)).all()

    def search(self, term: str) -> List[Lead]:
        """
        Case-insensitive substring search across text, enum and date columns.

        Args:
            term: Search term (an empty term matches every lead)
        """
        pattern = f"%{_escape_like(term.strip())}%"
        conditions = [cast(column, String).ilike(pattern, escape="\\") for column in SEARCHABLE_COLUMNS]
        return self._ordered(self.db.query(Lead).filter(or_(*conditions))).all()

    def filter_leads(
        self,
        status: Optional[str] = None,
        category: Optional[str] = None,
        city: Optional[str] = None,
    ) -> List[Lead]:
        """Exact match on status and category, case-insensitive on city."""
        query = self.db.query(Lead)
        if status:
            query = query.filter(Lead.lead_status == status)
        if category:
            query = query.filter(Lead.customer_category == category)
        if city:
            query = query.filter(func.lower(Lead.city) == city.strip().lower())
        return self._ordered(query).all()

    def find(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        category: Optional[str] = None,
        city: Optional[str] = None,
    ) -> List[Lead]:
        """Search takes precedence over filters; no criteria lists everything."""
        if search:
            return self.search(search)
        if status or category or city:
            return self.filter_leads(status=status, category=category, city=city)
        return self.list_leads()

    def status_counts(self) -> Dict[LeadStatus, int]:
        rows = self.db.query(Lead.lead_status, func.count(Lead.id)).group_by(Lead.lead_status).all()
        return {status: count for status, count in rows}
