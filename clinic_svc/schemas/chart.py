"""
Pydantic schemas for dashboard charts.
"""
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

ChartType = Literal["bar", "line", "pie", "area"]


class ChartCreate(BaseModel):
    title: str = Field("Untitled Chart", max_length=200)
    type: ChartType = "bar"
    data: List[Dict[str, Any]] = Field(default_factory=list, description="Rows with a name and series values")
    description: str = Field("", max_length=2000)
    category: str = Field("", max_length=100)
    isActive: bool = True
    colorScheme: Optional[List[str]] = None

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Visits per month",
                "type": "bar",
                "data": [{"name": "Jan", "visits": 40}, {"name": "Feb", "visits": 52}],
                "category": "attendance"
            }
        }


class ChartUpdate(BaseModel):
    title: Optional[str] = Field(None, max_length=200)
    type: Optional[ChartType] = None
    data: Optional[List[Dict[str, Any]]] = None
    description: Optional[str] = Field(None, max_length=2000)
    category: Optional[str] = Field(None, max_length=100)
    isActive: Optional[bool] = None
    colorScheme: Optional[List[str]] = None


class ChartResponse(BaseModel):
    id: str
    title: str
    type: str
    data: List[Dict[str, Any]]
    description: str = ""
    category: str = ""
    isActive: bool = True
    colorScheme: List[str]
    createdAt: Optional[str] = None
    lastUpdated: Optional[str] = None


class ChartStats(BaseModel):
    total: int
    active: int
    by_type: Dict[str, int]
    latest_update: Optional[str] = None
