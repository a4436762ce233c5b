"""
Repository for ANC (antenatal care) record documents.

An ANC record is a nested document: optional top-level `basicInfo`, one
map per scheduled visit (`visit1`..`visit8`) and `visitdelivery`.
"""
import logging
from typing import Any, Dict, Optional

from repositories.document_repository import DocumentRepository

logger = logging.getLogger(__name__)

VISIT_SLOTS = 8
VISIT_KEYS = tuple(f"visit{i}" for i in range(1, VISIT_SLOTS + 1))
DELIVERY_KEY = "visitdelivery"


class AncRecordRepository(DocumentRepository):
    """Data access for the ancRecords collection."""

    COLLECTION = "ancRecords"

    def set_visit(self, record_id: str, visit_key: str, visit: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Write one visit map, replacing any previous data for that visit.

        Args:
            record_id: ANC record id.
            visit_key: One of visit1..visit8 or visitdelivery.
            visit: The visit map (basicInfo, presentPregnancy, vitals, ...).

        Returns:
            The updated record, or None if the record does not exist.
        """
        if visit_key not in VISIT_KEYS and visit_key != DELIVERY_KEY:
            raise ValueError(f"Unknown visit key: {visit_key}")
        logger.info("Recording visit", extra={"record_id": record_id, "visit": visit_key})
        return self.update(record_id, {visit_key: visit})
