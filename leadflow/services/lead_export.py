"""CSV export of leads."""
import csv
import io
from datetime import date
from typing import Iterable, Optional

from leadflow.models.lead import Lead

CSV_HEADERS = [
    "Name",
    "Phone Number",
    "Email",
    "Date of Birth",
    "City",
    "State",
    "Country",
    "Pincode",
    "Company Name",
    "Designation",
    "Customer Category",
    "Last Contacted Date",
    "Last Contacted By",
    "Next Followup Date",
    "Customer Interested In",
    "Preferred Communication Channel",
    "Lead Status",
    "Additional Notes",
]


def _text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, date):
        return value.isoformat()
    return str(getattr(value, "value", value))


def lead_row(lead: Lead) -> list:
    return [
        _text(lead.name),
        _text(lead.phone_number),
        _text(lead.email),
        _text(lead.date_of_birth),
        _text(lead.city),
        _text(lead.state),
        _text(lead.country),
        _text(lead.pincode),
        _text(lead.company_name),
        _text(lead.designation),
        lead.customer_category.label,
        _text(lead.last_contacted_date),
        _text(lead.last_contacted_by),
        _text(lead.next_followup_date),
        _text(lead.customer_interested_in),
        _text(lead.preferred_communication_channel),
        lead.lead_status.label,
        _text(lead.additional_notes),
    ]


def leads_to_csv(leads: Iterable[Lead]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for lead in leads:
        writer.writerow(lead_row(lead))
    return buffer.getvalue()


def export_filename(today: Optional[date] = None) -> str:
    return f"leads_export_{(today or date.today()).isoformat()}.csv"
