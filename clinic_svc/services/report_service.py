"""
Service layer for whistleblower reports.

Architecture:
    API Layer (routers) → ReportService → ReportRepository → Database
"""
import logging
import sqlite3
from datetime import datetime
from typing import Any, Callable, Dict, List

from core.datetime_utils import utc_now, format_iso, format_for_display, parse_document_datetime
from core.exceptions import DocumentNotFoundError, InvalidDocumentError, DatabaseError
from repositories import ReportRepository
from schemas import ReportCreate, ReportResponse, ReportListResponse

logger = logging.getLogger(__name__)

PLACEHOLDER = "-"
TEXT_FIELDS = ("clientName", "clientNumber", "phoneNumber", "facilityName", "reportType", "description")
SEARCH_FIELDS = ("clientName", "facilityName", "reportType", "createdAt", "description")
# "all" additionally matches the client number
ALL_FIELDS = ("clientName", "clientNumber", "facilityName", "reportType", "description", "createdAt")


def to_report_response(document: Dict[str, Any]) -> ReportResponse:
    """Report with empty text fields shown as "-"."""
    created = parse_document_datetime(document.get("createdAt"))
    is_anonymous = document.get("isAnonymous")
    return ReportResponse(
        id=document["id"],
        **{name: str(document.get(name) or PLACEHOLDER) for name in TEXT_FIELDS},
        isAnonymous=True if is_anonymous is None else bool(is_anonymous),
        createdAt=format_iso(created) if created else None,
        createdAtDisplay=format_for_display(created) if created else None,
    )


def _field_matches(report: ReportResponse, field: str, term: str) -> bool:
    if field == "createdAt":
        return any(term in (value or "").lower() for value in (report.createdAt, report.createdAtDisplay))
    return term in getattr(report, field).lower()


class ReportService:
    """
    Service layer for whistleblower report intake and review.
    """

    def __init__(self, report_repository: ReportRepository, now: Callable[[], datetime] = utc_now):
        self._repo = report_repository
        self._now = now

    def create_report(self, report: ReportCreate) -> ReportResponse:
        document = report.model_dump()
        for name in TEXT_FIELDS:
            document[name] = (document[name] or "").strip() or PLACEHOLDER
        document["createdAt"] = format_iso(self._now())
        try:
            created = self._repo.add(document)
        except sqlite3.Error as e:
            logger.error(f"Database error saving report: {e}", exc_info=True)
            raise DatabaseError(operation="create_report") from e
        logger.info("Report submitted", extra={"report_id": created["id"], "anonymous": document["isAnonymous"]})
        return to_report_response(created)

    def get_report(self, report_id: str) -> ReportResponse:
        document = self._repo.get(report_id)
        if document is None:
            raise DocumentNotFoundError(ReportRepository.COLLECTION, report_id)
        return to_report_response(document)

    def list_reports(self, search: str = "", field: str = "all") -> ReportListResponse:
        """
        Reports matching the search term, newest first.

        A blank term matches every report. The anonymous count and the
        latest report are taken from the filtered list.
        """
        if field != "all" and field not in SEARCH_FIELDS:
            raise InvalidDocumentError(f"Unknown search field: {field}")

        reports = [to_report_response(d) for d in self._repo.list_all()]
        dated = sorted((r for r in reports if r.createdAt), key=lambda r: r.createdAt, reverse=True)
        reports = dated + [r for r in reports if not r.createdAt]

        term = search.strip().lower()
        if term:
            fields = ALL_FIELDS if field == "all" else (field,)
            reports = [r for r in reports if any(_field_matches(r, f, term) for f in fields)]

        latest = reports[0] if reports else None
        return ReportListResponse(
            reports=reports,
            total=self._repo.count(),
            showing=len(reports),
            anonymous=sum(1 for r in reports if r.isAnonymous),
            latest_date=latest.createdAt if latest else None,
            latest_description=latest.description if latest else None,
        )

    def count(self) -> int:
        return self._repo.count()

    def delete_report(self, report_id: str) -> None:
        if not self._repo.delete(report_id):
            raise DocumentNotFoundError(ReportRepository.COLLECTION, report_id)
