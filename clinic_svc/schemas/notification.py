"""
Pydantic schemas for notifications, broadcasts, templates and settings.
"""
from datetime import date, time
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

NotificationStatus = Literal["sent", "delivered", "pending", "failed"]
NotificationType = Literal["appointment_reminder", "broadcast", "health_tip"]
TemplateCategory = Literal["appointment", "health", "education"]


class BroadcastCreate(BaseModel):
    """Schema for sending a broadcast to patient categories.

    Either `message` or `template_id` must be given. Scheduled broadcasts
    need both a date and a time.
    """
    title: str = Field(..., min_length=1, max_length=200)
    message: Optional[str] = Field(None, max_length=2000)
    template_id: Optional[str] = Field(None, description="Template whose message is used when message is empty")
    template_values: Dict[str, str] = Field(default_factory=dict, description="Placeholder values for the template")
    categories: List[str] = Field(..., min_length=1, description="Broadcast category ids")
    schedule_type: Literal["now", "later"] = "now"
    schedule_date: Optional[date] = None
    schedule_time: Optional[time] = None

    @model_validator(mode="after")
    def check_schedule_and_body(self) -> "BroadcastCreate":
        if self.schedule_type == "later" and (self.schedule_date is None or self.schedule_time is None):
            raise ValueError("schedule_date and schedule_time are required when schedule_type is 'later'")
        if not (self.message and self.message.strip()) and not self.template_id:
            raise ValueError("Either message or template_id is required")
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Clinic closed Friday",
                "message": "The clinic is closed this Friday. Visits move to Monday.",
                "categories": ["all"],
                "schedule_type": "now"
            }
        }


class ReminderCreate(BaseModel):
    """Single-recipient appointment reminder."""
    recipient: str = Field(..., min_length=1, max_length=200, description="Patient name")
    patient_id: Optional[str] = Field(None, description="ANC record id, when known")
    title: str = Field("Appointment Reminder", max_length=200)
    message: str = Field(..., min_length=1, max_length=2000)
    scheduled_for: Optional[str] = Field(None, description="When the appointment takes place")


class NotificationResponse(BaseModel):
    id: str
    type: str
    title: str = ""
    message: str = ""
    recipient: str = ""
    categories: List[str] = Field(default_factory=list)
    recipientCount: int = 0
    status: str
    sentAt: Optional[str] = None
    scheduledFor: Optional[str] = None
    createdAt: Optional[str] = None
    patientId: Optional[str] = None
    tipId: Optional[str] = None


class NotificationListResponse(BaseModel):
    notifications: List[NotificationResponse]
    total: int
    showing: int


class NotificationStatusUpdate(BaseModel):
    status: NotificationStatus


class NotificationCount(BaseModel):
    count: int


class NotificationStats(BaseModel):
    total: int
    by_status: Dict[str, int]
    by_type: Dict[str, int]


class BroadcastCategoryResponse(BaseModel):
    id: str
    name: str
    count: int = Field(..., description="Patients currently in this category")


class TemplateCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    category: TemplateCategory
    message: str = Field(..., min_length=1, max_length=2000)


class TemplateUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    category: Optional[TemplateCategory] = None
    message: Optional[str] = Field(None, min_length=1, max_length=2000)


class TemplateResponse(BaseModel):
    id: str
    name: str
    category: str
    message: str
    placeholders: List[str] = Field(default_factory=list)


class TemplateRenderRequest(BaseModel):
    values: Dict[str, str] = Field(default_factory=dict)


class TemplateRenderResponse(BaseModel):
    id: str
    message: str


class NotificationSettings(BaseModel):
    appointmentReminders: bool = True
    reminderTiming: int = Field(24, description="Hours before the appointment")
    smsEnabled: bool = True
    emailEnabled: bool = True
    autoReminders: bool = True
    broadcastEnabled: bool = True


class NotificationSettingsUpdate(BaseModel):
    """Partial settings update. Omitted fields keep their stored value."""
    appointmentReminders: Optional[bool] = None
    reminderTiming: Optional[int] = None
    smsEnabled: Optional[bool] = None
    emailEnabled: Optional[bool] = None
    autoReminders: Optional[bool] = None
    broadcastEnabled: Optional[bool] = None
