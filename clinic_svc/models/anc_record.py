"""
Domain model for ANC records.

ANC documents are loosely typed nested maps. PatientSummary is the flat
view derived from one document that the patient lists, broadcasts, tips
and dashboard all work from.
"""
from dataclasses import dataclass, asdict
from datetime import date
from typing import Any, Dict, Optional

from core.datetime_utils import parse_document_date, format_date
from core.pregnancy import (
    current_gestational_age,
    trimester_for,
    estimated_due_date,
    initials,
)
from repositories.anc_record_repository import VISIT_KEYS, DELIVERY_KEY

STATUS_ACTIVE = "Active"
STATUS_DELIVERED = "Delivered"
DEFAULT_RISK_LEVEL = "Low"


def _as_map(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _is_filled(value: Any) -> bool:
    """A visit counts when it is a non-empty map."""
    return isinstance(value, dict) and len(value) > 0


def _to_int(value: Any) -> Optional[int]:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def basic_info(document: Dict[str, Any]) -> Dict[str, Any]:
    """basicInfo from the top level, falling back to visit1."""
    top = _as_map(document.get("basicInfo"))
    if top:
        return top
    return _as_map(_as_map(document.get("visit1")).get("basicInfo"))


def present_pregnancy(document: Dict[str, Any]) -> Dict[str, Any]:
    return _as_map(_as_map(document.get("visit1")).get("presentPregnancy"))


def vitals(document: Dict[str, Any]) -> Dict[str, Any]:
    return _as_map(_as_map(document.get("visit1")).get("vitals"))


def filled_visits(document: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    """visit1..visit8 maps that carry data, in visit order."""
    return {key: document[key] for key in VISIT_KEYS if _is_filled(document.get(key))}


@dataclass
class PatientSummary:
    """Flat patient view derived from an ANC record."""

    id: str
    name: str
    initials: str
    age: Optional[int]
    phone: str
    email: str
    address: str
    emergency_contact: str
    blood_group: str
    risk_level: str
    weeks: int
    trimester: str
    visit_count: int
    has_delivered: bool
    status: str
    due_date: Optional[date]
    last_visit: Optional[date]
    next_appointment: Optional[date]

    @property
    def is_active(self) -> bool:
        return self.status == STATUS_ACTIVE

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dictionary for API responses (dates as YYYY-MM-DD)."""
        data = asdict(self)
        data["due_date"] = format_date(self.due_date)
        data["last_visit"] = format_date(self.last_visit)
        data["next_appointment"] = format_date(self.next_appointment)
        return data

    @classmethod
    def from_document(cls, document: Dict[str, Any], today: date) -> 'PatientSummary':
        """
        Derive the summary for one ANC record.

        Args:
            document: Stored ANC record including its "id".
            today: Reference date for gestational age.

        Returns:
            PatientSummary instance.
        """
        info = basic_info(document)
        pregnancy = present_pregnancy(document)
        visits = filled_visits(document)
        has_delivered = _is_filled(document.get(DELIVERY_KEY))

        initial_weeks = _to_int(pregnancy.get("gestationalAge"))
        first_contact = parse_document_date(pregnancy.get("dateOfAncContact"))
        weeks = current_gestational_age(initial_weeks, first_contact, today)

        due_date = parse_document_date(pregnancy.get("edd"))
        if due_date is None:
            due_date = estimated_due_date(first_contact, initial_weeks)

        contact_dates = [
            parse_document_date(_as_map(visit.get("presentPregnancy")).get("dateOfAncContact"))
            for visit in visits.values()
        ]
        contact_dates = [d for d in contact_dates if d is not None]

        next_appointment = None
        if visits:
            latest_visit = list(visits.values())[-1]
            next_appointment = parse_document_date(latest_visit.get("nextVisitDate"))

        name = _text(info.get("clientName")).strip()
        return cls(
            id=document["id"],
            name=name,
            initials=initials(name),
            age=_to_int(info.get("age")),
            phone=_text(info.get("phoneNumber")),
            email=_text(info.get("email")),
            address=_text(info.get("address")),
            emergency_contact=_text(info.get("emergencyContact")),
            blood_group=_text(info.get("bloodGroup")),
            risk_level=_text(info.get("riskLevel")) or DEFAULT_RISK_LEVEL,
            weeks=weeks,
            trimester=trimester_for(weeks, has_delivered),
            visit_count=len(visits),
            has_delivered=has_delivered,
            status=STATUS_DELIVERED if has_delivered else STATUS_ACTIVE,
            due_date=due_date,
            last_visit=max(contact_dates) if contact_dates else None,
            next_appointment=next_appointment,
        )


def flatten_detail(document: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge basicInfo, visit1 presentPregnancy and visit1 vitals into one map.

    Later sections win on key clashes.
    """
    merged: Dict[str, Any] = {}
    merged.update(basic_info(document))
    merged.update(present_pregnancy(document))
    merged.update(vitals(document))
    return merged
