"""
Pydantic schemas for whistleblower reports.
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

SearchField = Literal["all", "clientName", "facilityName", "reportType", "createdAt", "description"]


class ReportCreate(BaseModel):
    """Whistleblower report. Unset text fields are stored as "-"."""
    clientName: Optional[str] = Field(None, max_length=200)
    clientNumber: Optional[str] = Field(None, max_length=100)
    phoneNumber: Optional[str] = Field(None, max_length=50)
    facilityName: Optional[str] = Field(None, max_length=200)
    reportType: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=5000)
    isAnonymous: bool = True


class ReportResponse(BaseModel):
    id: str
    clientName: str = "-"
    clientNumber: str = "-"
    phoneNumber: str = "-"
    facilityName: str = "-"
    reportType: str = "-"
    description: str = "-"
    isAnonymous: bool = True
    createdAt: Optional[str] = None
    createdAtDisplay: Optional[str] = None


class ReportListResponse(BaseModel):
    reports: List[ReportResponse]
    total: int
    showing: int
    anonymous: int
    latest_date: Optional[str] = None
    latest_description: Optional[str] = None
