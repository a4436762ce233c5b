"""
Domain models for the clinic service.

This module contains internal domain models derived from stored documents.
"""
from models.anc_record import (
    PatientSummary,
    flatten_detail,
    STATUS_ACTIVE,
    STATUS_DELIVERED,
)

__all__ = ["PatientSummary", "flatten_detail", "STATUS_ACTIVE", "STATUS_DELIVERED"]
