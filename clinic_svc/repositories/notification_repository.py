"""
Repositories for notifications, message templates and notification settings.
"""
from typing import Any, Dict, Optional

from repositories.document_repository import DocumentRepository


class NotificationRepository(DocumentRepository):
    """Data access for the notifications collection."""

    COLLECTION = "notifications"


class TemplateRepository(DocumentRepository):
    """Data access for broadcast message templates."""

    COLLECTION = "notificationTemplates"


class SettingsRepository(DocumentRepository):
    """
    Notification settings are a single document with a fixed id.
    """

    COLLECTION = "notificationSettings"
    SETTINGS_ID = "default"

    def load(self) -> Optional[Dict[str, Any]]:
        """Stored settings without the id key, or None if never saved."""
        document = self.get(self.SETTINGS_ID)
        if document is None:
            return None
        document.pop("id", None)
        return document

    def save(self, settings: Dict[str, Any]) -> Dict[str, Any]:
        """Replace the stored settings."""
        document = self.set(self.SETTINGS_ID, settings)
        document.pop("id", None)
        return document
