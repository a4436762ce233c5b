"""
Pydantic schemas for health tips and videos.
"""
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

TipCategory = Literal["health", "nutrition"]
TipStage = Literal["first-trimester", "second-trimester", "third-trimester", "delivery"]


def parse_int_list(value: Union[str, List[int], None]) -> Optional[List[int]]:
    """
    Accept "1, 12, 20" or [1, 12, 20]; blank input means no restriction.

    Raises:
        ValueError: If an entry is not an integer.
    """
    if value is None:
        return None
    if isinstance(value, str):
        parts = [p.strip() for p in value.split(",") if p.strip()]
        if not parts:
            return None
        try:
            return [int(p) for p in parts]
        except ValueError:
            raise ValueError(f"Expected a comma separated list of integers, got '{value}'")
    return [int(v) for v in value]


class TipCreate(BaseModel):
    """Schema for creating a health or nutrition tip."""
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1, max_length=5000)
    category: TipCategory = "health"
    target_stage: TipStage = "first-trimester"
    target_weeks: Optional[List[int]] = Field(None, description="Gestational weeks; list or comma separated string")
    target_visits: Optional[List[int]] = Field(None, description="Visit counts; list or comma separated string")
    is_active: bool = True

    @field_validator("target_weeks", "target_visits", mode="before")
    @classmethod
    def split_lists(cls, v):
        return parse_int_list(v)

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Folic acid",
                "content": "Take folic acid daily during the first trimester.",
                "category": "nutrition",
                "target_stage": "first-trimester",
                "target_weeks": "4, 8, 12"
            }
        }


class TipUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    content: Optional[str] = Field(None, min_length=1, max_length=5000)
    category: Optional[TipCategory] = None
    target_stage: Optional[TipStage] = None
    target_weeks: Optional[List[int]] = None
    target_visits: Optional[List[int]] = None
    is_active: Optional[bool] = None

    @field_validator("target_weeks", "target_visits", mode="before")
    @classmethod
    def split_lists(cls, v):
        return parse_int_list(v)


class TipResponse(BaseModel):
    id: str
    title: str
    content: str
    category: str
    targetStage: str
    targetWeeks: Optional[List[int]] = None
    targetVisits: Optional[List[int]] = None
    createdAt: Optional[str] = None
    sentCount: int = 0
    isActive: bool = True


class TipStats(BaseModel):
    total_tips: int
    active_tips: int
    total_sent: int
    eligible_patients: int = Field(..., description="Patients who have not delivered")


class TipSendResponse(BaseModel):
    tip_id: str
    sent_to: int
    sent_count: int
    notification_id: str


class VideoCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    url: str = Field(..., min_length=1, max_length=1000)
    description: str = Field("", max_length=2000)
    category: TipCategory = "health"
    target_stage: TipStage = "first-trimester"

    @field_validator("url")
    @classmethod
    def check_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("url must start with http:// or https://")
        return v


class VideoResponse(BaseModel):
    id: str
    title: str
    url: str
    description: str = ""
    category: str = "health"
    targetStage: str = ""
    createdAt: Optional[str] = None
