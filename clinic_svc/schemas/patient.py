"""
Pydantic schemas for patient (ANC record) API operations.
"""
from datetime import date
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

RiskLevel = Literal["Low", "Medium", "High"]
VisitOperator = Literal["lt", "eq", "gte", "gt"]
SortField = Literal["name", "age", "weeks", "visit_count", "last_visit", "due_date"]
SortOrder = Literal["asc", "desc"]


class PatientCreate(BaseModel):
    """Schema for the "Add Patient" form.

    Creates a new ANC record with basicInfo and a first visit holding
    the gestational age at registration.
    """
    name: str = Field(..., min_length=1, max_length=200, description="Client full name")
    age: Optional[int] = Field(None, ge=10, le=70, description="Age in years")
    phone: str = Field("", max_length=50, description="Phone number")
    email: str = Field("", max_length=200, description="Email address")
    address: str = Field("", max_length=500)
    emergency_contact: str = Field("", max_length=200)
    blood_group: str = Field("", max_length=10)
    risk_level: RiskLevel = Field("Low", description="Low, Medium or High")
    weeks: Optional[int] = Field(None, ge=0, le=45, description="Gestational age in weeks today")
    due_date: Optional[date] = Field(None, description="Expected delivery date (YYYY-MM-DD)")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Ama Mensah",
                "age": 28,
                "phone": "0244000000",
                "email": "ama@example.com",
                "risk_level": "Low",
                "weeks": 14,
                "due_date": "2025-03-01"
            }
        }


class BasicInfoUpdate(BaseModel):
    """Partial update of a patient's basicInfo. Omitted fields are kept."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    age: Optional[int] = Field(None, ge=10, le=70)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=200)
    address: Optional[str] = Field(None, max_length=500)
    emergency_contact: Optional[str] = Field(None, max_length=200)
    blood_group: Optional[str] = Field(None, max_length=10)
    risk_level: Optional[RiskLevel] = None


class VisitRecord(BaseModel):
    """A visit map written as-is into visit1..visit8 or visitdelivery."""
    data: Dict[str, Any] = Field(
        ...,
        description="Visit sections such as presentPregnancy, vitals, nextVisitDate"
    )

    @field_validator("data")
    @classmethod
    def not_empty(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        if not v:
            raise ValueError("visit data must not be empty")
        return v


class PatientSummaryResponse(BaseModel):
    """Flat patient row shown in lists."""
    id: str
    name: str
    initials: str
    age: Optional[int] = None
    phone: str = ""
    email: str = ""
    address: str = ""
    emergency_contact: str = ""
    blood_group: str = ""
    risk_level: str = "Low"
    weeks: int = 0
    trimester: str
    visit_count: int = 0
    has_delivered: bool = False
    status: str
    due_date: Optional[str] = Field(None, description="YYYY-MM-DD")
    last_visit: Optional[str] = None
    next_appointment: Optional[str] = None


class PatientDetailResponse(BaseModel):
    """Patient detail: summary plus the flattened registration data and raw visits."""
    id: str
    summary: PatientSummaryResponse
    details: Dict[str, Any] = Field(
        default_factory=dict,
        description="basicInfo, visit1 presentPregnancy and visit1 vitals merged"
    )
    visits: Dict[str, Any] = Field(default_factory=dict, description="Recorded visit maps by key")
    days_until_due: Optional[int] = None
    weeks_remaining: Optional[int] = None


class PatientStats(BaseModel):
    """Counts over the filtered patient list."""
    active: int
    delivered: int
    high_risk: int
    due_soon: int


class PatientListResponse(BaseModel):
    patients: List[PatientSummaryResponse]
    total: int = Field(..., description="All patients, before filtering")
    showing: int = Field(..., description="Patients returned after filtering and limit")
    stats: PatientStats
    active_filters: int


class TrimesterGroup(BaseModel):
    trimester: str
    count: int
    patients: List[PatientSummaryResponse]


class CategoryRecipients(BaseModel):
    """Patients matched by one broadcast category."""
    category: str
    name: str
    count: int
    patients: List[PatientSummaryResponse]
