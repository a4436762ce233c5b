"""
Repository for whistleblower report documents.
"""
from repositories.document_repository import DocumentRepository


class ReportRepository(DocumentRepository):
    """Data access for the report collection."""

    COLLECTION = "report"
