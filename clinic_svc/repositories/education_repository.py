"""
Repositories for health-education content: tips and videos.
"""
import json
import logging
from typing import Any, Dict, Optional

from repositories.document_repository import DocumentRepository
from core.datetime_utils import utc_now, format_iso

logger = logging.getLogger(__name__)


class HealthTipRepository(DocumentRepository):
    """Data access for health and nutrition tips."""

    COLLECTION = "healthTips"

    def increment_sent_count(self, tip_id: str, amount: int) -> Optional[Dict[str, Any]]:
        """
        Add `amount` to a tip's sentCount in a single transaction.

        Returns:
            The updated tip, or None if it does not exist.
        """
        conn = self._db.get_connection()
        try:
            conn.execute("BEGIN IMMEDIATE")
            row = conn.execute(
                "SELECT data FROM documents WHERE collection = ? AND id = ?",
                (self.collection, tip_id),
            ).fetchone()
            if row is None:
                conn.rollback()
                return None

            data = json.loads(row[0])
            data["sentCount"] = int(data.get("sentCount") or 0) + amount
            conn.execute(
                "UPDATE documents SET data = ?, updated_at = ? WHERE collection = ? AND id = ?",
                (self._serialize(data), format_iso(utc_now()), self.collection, tip_id),
            )
            conn.commit()
        finally:
            conn.close()

        logger.info("Tip sent count updated", extra={"tip_id": tip_id, "sent_count": data["sentCount"]})
        return {"id": tip_id, **data}


class HealthVideoRepository(DocumentRepository):
    """Data access for health-education videos."""

    COLLECTION = "healthVideos"
