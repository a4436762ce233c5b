"""
Generic repository for JSON documents stored per collection.

Architecture:
    Each collection repository (ANC records, notifications, tips, ...)
    subclasses DocumentRepository and sets COLLECTION. Services receive
    those subclasses via core.dependencies.

All SQL is encapsulated in this module - no SQL in service or API layers.
Returned documents are plain dicts: the stored body plus an "id" key.
"""
import json
import sqlite3
import logging
import uuid
from typing import Any, Dict, List, Optional

from repositories.base import Database
from core.datetime_utils import utc_now, format_iso

logger = logging.getLogger(__name__)


def new_document_id() -> str:
    """Random 20 character document id."""
    return uuid.uuid4().hex[:20]


class DocumentRepository:
    """
    CRUD operations for one document collection.

    Subclasses set COLLECTION; the constructor also accepts an explicit
    collection name for ad-hoc use.
    """

    COLLECTION: str = ""

    def __init__(self, db: Database, collection: Optional[str] = None):
        """
        Initialize the repository.

        Args:
            db: Database instance for data access.
            collection: Collection name, defaults to the class COLLECTION.
        """
        self._db = db
        self.collection = collection or self.COLLECTION
        if not self.collection:
            raise ValueError(f"{type(self).__name__} has no collection name")

    @staticmethod
    def _to_document(document_id: str, raw: str) -> Dict[str, Any]:
        data = json.loads(raw)
        data.pop("id", None)
        return {"id": document_id, **data}

    @staticmethod
    def _serialize(data: Dict[str, Any]) -> str:
        body = {k: v for k, v in data.items() if k != "id"}
        return json.dumps(body, default=str, ensure_ascii=False)

    def add(self, data: Dict[str, Any], document_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """
        Insert a new document.

        Args:
            data: Document body. An "id" key in the body is ignored.
            document_id: Explicit id; a random one is generated when omitted.

        Returns:
            The stored document, or None if the id already exists.
        """
        document_id = document_id or new_document_id()
        now = format_iso(utc_now())

        conn = self._db.get_connection()
        try:
            conn.execute(
                """
                INSERT INTO documents (collection, id, data, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (self.collection, document_id, self._serialize(data), now, now),
            )
            conn.commit()
        except sqlite3.IntegrityError:
            logger.warning(
                "Document id already exists",
                extra={"collection": self.collection, "document_id": document_id}
            )
            return None
        finally:
            conn.close()

        return self.get(document_id)

    def get(self, document_id: str) -> Optional[Dict[str, Any]]:
        """Fetch a document by id, or None if it does not exist."""
        conn = self._db.get_connection()
        try:
            row = conn.execute(
                "SELECT id, data FROM documents WHERE collection = ? AND id = ?",
                (self.collection, document_id),
            ).fetchone()
        finally:
            conn.close()

        return self._to_document(row[0], row[1]) if row else None

    def list_all(self) -> List[Dict[str, Any]]:
        """All documents in the collection, oldest first."""
        conn = self._db.get_connection()
        try:
            rows = conn.execute(
                """
                SELECT id, data FROM documents
                WHERE collection = ?
                ORDER BY created_at ASC, rowid ASC
                """,
                (self.collection,),
            ).fetchall()
        finally:
            conn.close()

        return [self._to_document(row[0], row[1]) for row in rows]

    def count(self) -> int:
        """Number of documents in the collection."""
        conn = self._db.get_connection()
        try:
            row = conn.execute(
                "SELECT COUNT(*) FROM documents WHERE collection = ?",
                (self.collection,),
            ).fetchone()
        finally:
            conn.close()
        return row[0]

    def update(self, document_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Merge top-level fields into an existing document.

        Read and write happen in one transaction so concurrent updates to
        different fields are not lost.

        Returns:
            The updated document, or None if it does not exist.
        """
        conn = self._db.get_connection()
        try:
            conn.execute("BEGIN IMMEDIATE")
            row = conn.execute(
                "SELECT data FROM documents WHERE collection = ? AND id = ?",
                (self.collection, document_id),
            ).fetchone()
            if row is None:
                conn.rollback()
                return None

            data = json.loads(row[0])
            data.update({k: v for k, v in changes.items() if k != "id"})
            conn.execute(
                "UPDATE documents SET data = ?, updated_at = ? WHERE collection = ? AND id = ?",
                (self._serialize(data), format_iso(utc_now()), self.collection, document_id),
            )
            conn.commit()
        finally:
            conn.close()

        return {"id": document_id, **data}

    def set(self, document_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Create or fully replace a document with a known id."""
        now = format_iso(utc_now())
        conn = self._db.get_connection()
        try:
            conn.execute(
                """
                INSERT INTO documents (collection, id, data, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT (collection, id)
                DO UPDATE SET data = excluded.data, updated_at = excluded.updated_at
                """,
                (self.collection, document_id, self._serialize(data), now, now),
            )
            conn.commit()
        finally:
            conn.close()

        return {"id": document_id, **{k: v for k, v in data.items() if k != "id"}}

    def delete(self, document_id: str) -> bool:
        """Delete a document. Returns False if it did not exist."""
        conn = self._db.get_connection()
        try:
            cursor = conn.execute(
                "DELETE FROM documents WHERE collection = ? AND id = ?",
                (self.collection, document_id),
            )
            conn.commit()
            deleted = cursor.rowcount > 0
        finally:
            conn.close()

        if deleted:
            logger.info(
                "Document deleted",
                extra={"collection": self.collection, "document_id": document_id}
            )
        return deleted
