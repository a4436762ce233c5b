"""
Service layer for patient (ANC record) operations.

This service derives patient summaries from ANC documents and applies
the list filters, sorting and statistics shown on the patient screens.

Architecture:
    API Layer (routers) → PatientService → AncRecordRepository → Database

Dependency Injection:
    PatientService receives its repository via constructor injection.
    Use core.dependencies.get_patient_service() in routers with Depends().
"""
import logging
import sqlite3
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Dict, List, Optional, Tuple

from core.config import DUE_SOON_DAYS
from core.content_catalog import get_catalog, broadcast_category_name
from core.datetime_utils import format_iso, utc_now, utc_today
from core.exceptions import PatientNotFoundError, InvalidDocumentError, DatabaseError
from core.pregnancy import (
    TRIMESTER_LABELS,
    TRIMESTER_FIRST,
    TRIMESTER_SECOND,
    TRIMESTER_THIRD,
    days_until,
    is_due_within,
    weeks_remaining,
)
from models.anc_record import PatientSummary, basic_info, flatten_detail, STATUS_ACTIVE, STATUS_DELIVERED
from repositories import AncRecordRepository, VISIT_KEYS, DELIVERY_KEY
from schemas import (
    PatientCreate,
    BasicInfoUpdate,
    PatientSummaryResponse,
    PatientDetailResponse,
    PatientStats,
    PatientListResponse,
    TrimesterGroup,
    CategoryRecipients,
)

logger = logging.getLogger(__name__)

DEFAULT_AGE_RANGE = (18, 45)
NO_TRIMESTER_FILTER = ("", "All")

# API field name -> basicInfo key
_BASIC_INFO_FIELDS = {
    "name": "clientName",
    "age": "age",
    "phone": "phoneNumber",
    "email": "email",
    "address": "address",
    "emergency_contact": "emergencyContact",
    "blood_group": "bloodGroup",
    "risk_level": "riskLevel",
}

_SORT_KEYS: Dict[str, Callable[[PatientSummary], object]] = {
    "name": lambda p: p.name.lower() or None,
    "age": lambda p: p.age,
    "weeks": lambda p: p.weeks,
    "visit_count": lambda p: p.visit_count,
    "last_visit": lambda p: p.last_visit,
    "due_date": lambda p: p.due_date,
}

_CATEGORY_TRIMESTERS = {
    "first_trimester": TRIMESTER_FIRST,
    "second_trimester": TRIMESTER_SECOND,
    "third_trimester": TRIMESTER_THIRD,
}


@dataclass
class PatientFilters:
    """Filter and sort options for the patient list. Defaults filter nothing."""
    search: str = ""
    trimester: str = ""
    visit_operator: str = "gte"
    visit_count: int = 0
    risk_levels: List[str] = field(default_factory=list)
    statuses: List[str] = field(default_factory=list)
    age_range: Tuple[int, int] = DEFAULT_AGE_RANGE
    due_within_days: Optional[int] = None
    sort_by: str = "name"
    sort_order: str = "asc"

    def active_count(self) -> int:
        """Number of filters that differ from their defaults."""
        count = 0
        if self.trimester not in NO_TRIMESTER_FILTER:
            count += 1
        if self.visit_count > 0:
            count += 1
        if self.risk_levels:
            count += 1
        if self.statuses:
            count += 1
        if tuple(self.age_range) != DEFAULT_AGE_RANGE:
            count += 1
        if self.due_within_days is not None:
            count += 1
        if self.search.strip():
            count += 1
        return count


def _matches_visit_count(count: int, operator: str, value: int) -> bool:
    if value <= 0:
        return True
    if operator == "lt":
        return count < value
    if operator == "eq":
        return count == value
    if operator == "gt":
        return count > value
    return count >= value


def sort_patients(patients: List[PatientSummary], sort_by: str, sort_order: str) -> List[PatientSummary]:
    """Sort by one field; patients without a value always come last."""
    key = _SORT_KEYS.get(sort_by)
    if key is None:
        raise InvalidDocumentError(f"Unknown sort field: {sort_by}")
    present = [p for p in patients if key(p) is not None]
    missing = [p for p in patients if key(p) is None]
    present.sort(key=key, reverse=(sort_order == "desc"))
    return present + missing


def to_response(summary: PatientSummary) -> PatientSummaryResponse:
    return PatientSummaryResponse(**summary.to_dict())


class PatientService:
    """
    Service layer for patient operations.

    Handles summary derivation, filtering, sorting and the category
    resolution used by broadcasts and the dashboard.
    """

    def __init__(
        self,
        anc_record_repository: AncRecordRepository,
        due_soon_days: int = DUE_SOON_DAYS,
        today: Callable[[], date] = utc_today,
    ):
        """
        Initialize the patient service.

        Args:
            anc_record_repository: Repository for ANC record documents.
                                   Injected via core.dependencies.get_patient_service().
            due_soon_days: Window used for the "due soon" stat and category.
            today: Returns the reference date for gestational age.
        """
        self._repo = anc_record_repository
        self._due_soon_days = due_soon_days
        self._today = today

    # =========================================================================
    # DERIVATION
    # =========================================================================

    def summaries(self) -> List[PatientSummary]:
        """Summaries for every ANC record, in storage order."""
        today = self._today()
        return [PatientSummary.from_document(doc, today) for doc in self._repo.list_all()]

    def count(self) -> int:
        return self._repo.count()

    def is_due_soon(self, patient: PatientSummary, today: date) -> bool:
        return patient.is_active and is_due_within(patient.due_date, today, self._due_soon_days)

    def compute_stats(self, patients: List[PatientSummary]) -> PatientStats:
        today = self._today()
        return PatientStats(
            active=sum(1 for p in patients if p.status == STATUS_ACTIVE),
            delivered=sum(1 for p in patients if p.status == STATUS_DELIVERED),
            high_risk=sum(1 for p in patients if p.risk_level == "High"),
            due_soon=sum(1 for p in patients if self.is_due_soon(p, today)),
        )

    # =========================================================================
    # LIST
    # =========================================================================

    def filter_patients(self, patients: List[PatientSummary], filters: PatientFilters) -> List[PatientSummary]:
        """Apply every list filter to already derived summaries."""
        today = self._today()
        term = filters.search.strip()
        term_lower = term.lower()
        min_age, max_age = filters.age_range

        def matches(p: PatientSummary) -> bool:
            if term and not (
                term_lower in p.name.lower()
                or term_lower in p.email.lower()
                or term in p.phone
            ):
                return False
            if filters.trimester not in NO_TRIMESTER_FILTER and p.trimester != filters.trimester:
                return False
            if not _matches_visit_count(p.visit_count, filters.visit_operator, filters.visit_count):
                return False
            if filters.risk_levels and p.risk_level not in filters.risk_levels:
                return False
            if filters.statuses and p.status not in filters.statuses:
                return False
            if p.age is not None and not (min_age <= p.age <= max_age):
                return False
            if filters.due_within_days is not None and p.is_active:
                if not is_due_within(p.due_date, today, filters.due_within_days):
                    return False
            return True

        return [p for p in patients if matches(p)]

    def list_patients(self, filters: PatientFilters, limit: int) -> PatientListResponse:
        """
        Filtered, sorted and limited patient list with stats.

        Stats are computed over the full filtered list, before the limit.
        """
        min_age, max_age = filters.age_range
        if min_age > max_age:
            raise InvalidDocumentError("min_age must not exceed max_age")

        all_patients = self.summaries()
        filtered = self.filter_patients(all_patients, filters)
        ordered = sort_patients(filtered, filters.sort_by, filters.sort_order)
        shown = ordered[:limit]

        logger.info(
            "Patient list served",
            extra={"total": len(all_patients), "matched": len(filtered), "showing": len(shown)}
        )
        return PatientListResponse(
            patients=[to_response(p) for p in shown],
            total=len(all_patients),
            showing=len(shown),
            stats=self.compute_stats(filtered),
            active_filters=filters.active_count(),
        )

    def trimester_groups(self) -> List[TrimesterGroup]:
        """Patients grouped by trimester label, every label present."""
        groups: Dict[str, List[PatientSummary]] = {label: [] for label in TRIMESTER_LABELS}
        for patient in sort_patients(self.summaries(), "name", "asc"):
            groups[patient.trimester].append(patient)
        return [
            TrimesterGroup(
                trimester=label,
                count=len(members),
                patients=[to_response(p) for p in members],
            )
            for label, members in groups.items()
        ]

    # =========================================================================
    # BROADCAST CATEGORIES
    # =========================================================================

    def _in_category(self, patient: PatientSummary, category: str, today: date) -> bool:
        if category == "all":
            return True
        if category in _CATEGORY_TRIMESTERS:
            return patient.is_active and patient.trimester == _CATEGORY_TRIMESTERS[category]
        if category == "postpartum":
            return patient.has_delivered
        if category == "high_risk":
            return patient.risk_level == "High"
        if category == "due_soon":
            return self.is_due_soon(patient, today)
        return False

    def _check_categories(self, categories: List[str]) -> None:
        known = get_catalog().broadcast_category_ids
        unknown = [c for c in categories if c not in known]
        if unknown:
            raise InvalidDocumentError(
                f"Unknown broadcast categories: {', '.join(unknown)}",
                categories=unknown,
            )

    def resolve_categories(
        self,
        categories: List[str],
        patients: Optional[List[PatientSummary]] = None,
    ) -> List[PatientSummary]:
        """
        Patients matching any of the categories, each patient once.

        Raises:
            InvalidDocumentError: If a category id is unknown.
        """
        self._check_categories(categories)
        today = self._today()
        if patients is None:
            patients = self.summaries()
        return [p for p in patients if any(self._in_category(p, c, today) for c in categories)]

    def category_recipients(self, category: str) -> CategoryRecipients:
        members = sort_patients(self.resolve_categories([category]), "name", "asc")
        return CategoryRecipients(
            category=category,
            name=broadcast_category_name(category),
            count=len(members),
            patients=[to_response(p) for p in members],
        )

    def category_counts(self) -> Dict[str, int]:
        """Live patient count per broadcast category id."""
        patients = self.summaries()
        today = self._today()
        return {
            category_id: sum(1 for p in patients if self._in_category(p, category_id, today))
            for category_id in get_catalog().broadcast_category_ids
        }

    # =========================================================================
    # CRUD
    # =========================================================================

    def _get_document(self, patient_id: str) -> dict:
        document = self._repo.get(patient_id)
        if document is None:
            raise PatientNotFoundError(patient_id=patient_id)
        return document

    def get_patient(self, patient_id: str) -> PatientDetailResponse:
        """
        Patient detail view.

        Raises:
            PatientNotFoundError: If no ANC record has this id.
        """
        document = self._get_document(patient_id)
        today = self._today()
        summary = PatientSummary.from_document(document, today)

        visits = {key: document[key] for key in VISIT_KEYS + (DELIVERY_KEY,) if document.get(key)}
        due_in = None
        remaining = None
        if summary.due_date is not None:
            due_in = days_until(summary.due_date, today)
            remaining = weeks_remaining(summary.due_date, today)

        return PatientDetailResponse(
            id=summary.id,
            summary=to_response(summary),
            details=flatten_detail(document),
            visits=visits,
            days_until_due=due_in,
            weeks_remaining=remaining,
        )

    def create_patient(self, patient: PatientCreate) -> PatientDetailResponse:
        """
        Register a patient from the simple "Add Patient" form.

        The first visit records today's contact and the gestational age given.
        """
        info = {
            _BASIC_INFO_FIELDS[name]: value
            for name, value in patient.model_dump(include=set(_BASIC_INFO_FIELDS)).items()
            if value is not None
        }
        pregnancy = {
            "gestationalAge": patient.weeks if patient.weeks is not None else 0,
            "dateOfAncContact": self._today().isoformat(),
        }
        if patient.due_date is not None:
            pregnancy["edd"] = patient.due_date.isoformat()

        document = {
            "basicInfo": info,
            "visit1": {"basicInfo": dict(info), "presentPregnancy": pregnancy},
            "createdAt": format_iso(utc_now()),
        }
        try:
            created = self._repo.add(document)
        except sqlite3.Error as e:
            logger.error(f"Database error creating patient: {e}", exc_info=True)
            raise DatabaseError(operation="create_patient") from e
        if created is None:
            raise InvalidDocumentError("Could not allocate a patient id, please retry")

        logger.info("Patient created", extra={"patient_id": created["id"]})
        return self.get_patient(created["id"])

    def update_basic_info(self, patient_id: str, update: BasicInfoUpdate) -> PatientDetailResponse:
        """Merge changed fields into the top-level basicInfo."""
        document = self._get_document(patient_id)
        changes = {
            _BASIC_INFO_FIELDS[name]: value
            for name, value in update.model_dump(exclude_unset=True).items()
            if value is not None
        }
        if not changes:
            raise InvalidDocumentError("No fields to update")

        merged = {**basic_info(document), **changes}
        self._repo.update(patient_id, {"basicInfo": merged})
        logger.info("Patient basic info updated", extra={"patient_id": patient_id, "fields": sorted(changes)})
        return self.get_patient(patient_id)

    def record_visit(self, patient_id: str, visit_key: str, visit: dict) -> PatientDetailResponse:
        """
        Write a scheduled visit or the delivery visit.

        Raises:
            InvalidDocumentError: If visit_key is not visit1..visit8 or visitdelivery.
            PatientNotFoundError: If the record does not exist.
        """
        if visit_key not in VISIT_KEYS and visit_key != DELIVERY_KEY:
            raise InvalidDocumentError(
                f"Unknown visit '{visit_key}'. Use visit1..visit8 or visitdelivery."
            )
        try:
            updated = self._repo.set_visit(patient_id, visit_key, visit)
        except sqlite3.Error as e:
            logger.error(f"Database error recording visit: {e}", exc_info=True)
            raise DatabaseError(operation="record_visit") from e
        if updated is None:
            raise PatientNotFoundError(patient_id=patient_id)
        return self.get_patient(patient_id)

    def delete_patient(self, patient_id: str) -> None:
        if not self._repo.delete(patient_id):
            raise PatientNotFoundError(patient_id=patient_id)
        logger.info("Patient deleted", extra={"patient_id": patient_id})
