"""
Pydantic schemas for dashboard overview and sidebar badges.
"""
from typing import Dict

from pydantic import BaseModel


class DashboardOverview(BaseModel):
    total_patients: int
    active_patients: int
    delivered_patients: int
    high_risk_patients: int
    due_soon: int
    trimesters: Dict[str, int]
    notifications: int
    reports: int
    active_tips: int


class SidebarCounts(BaseModel):
    patients: int
    notifications: int
