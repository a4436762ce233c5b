"""
Repository for dashboard chart documents.
"""
from repositories.document_repository import DocumentRepository


class ChartRepository(DocumentRepository):
    """Data access for the charts collection."""

    COLLECTION = "charts"
