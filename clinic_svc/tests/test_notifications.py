"""
Tests for notification endpoints: broadcasts, reminders, the notification
log, templates and settings.
"""
import pytest

from core.exceptions import DocumentNotFoundError
from services.notification_service import render_message, template_placeholders


@pytest.fixture
def patients(add_anc_record):
    add_anc_record(name="Ama Mensah", weeks_at_contact=8)
    add_anc_record(name="Abena Kyei", weeks_at_contact=30, risk_level="High")
    add_anc_record(name="Comfort Asante", weeks_at_contact=38, delivered=True)


@pytest.fixture
def logged(notification_repo):
    """Three notifications with distinct creation times."""
    rows = [
        {"type": "broadcast", "title": "Clinic hours", "message": "Open until 6pm", "recipient": "All Patients",
         "status": "sent", "createdAt": "2024-05-01T08:00:00Z", "sentAt": "2024-05-01T08:00:00Z"},
        {"type": "appointment_reminder", "title": "Appointment", "message": "See you Monday", "recipient": "Ama Mensah",
         "status": "pending", "createdAt": "2024-05-20T08:00:00Z"},
        {"type": "broadcast", "title": "Vaccines", "message": "Tetanus shots available", "recipient": "High Risk",
         "status": "failed", "createdAt": "2024-05-10T08:00:00Z"},
    ]
    return [notification_repo.add(row) for row in rows]


def test_render_message_leaves_unknown_placeholders():
    assert render_message("On {date} at {time}", {"date": "Monday"}) == "On Monday at {time}"


def test_template_placeholders_in_order():
    assert template_placeholders("{time} then {date} then {time}") == ["time", "date"]


# =============================================================================
# BROADCASTS
# =============================================================================

class TestBroadcasts:

    def test_send_now(self, client, patients):
        response = client.post("/api/v1/notifications/broadcasts", json={
            "title": "Iron supplements",
            "message": "Collect your iron tablets at the pharmacy.",
            "categories": ["high_risk", "postpartum"],
        })
        assert response.status_code == 201
        data = response.json()
        assert data["type"] == "broadcast"
        assert data["status"] == "sent"
        assert data["sentAt"] == "2024-06-01T09:00:00Z"
        assert data["scheduledFor"] is None
        assert data["recipient"] == "High Risk, Postpartum"
        assert data["recipientCount"] == 2

    def test_schedule_later(self, client, patients):
        response = client.post("/api/v1/notifications/broadcasts", json={
            "title": "Reminder",
            "message": "Antenatal class tomorrow.",
            "categories": ["all"],
            "schedule_type": "later",
            "schedule_date": "2024-06-02",
            "schedule_time": "10:00",
        })
        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending"
        assert data["sentAt"] is None
        assert data["scheduledFor"] == "2024-06-02T10:00:00Z"
        assert data["recipientCount"] == 3

    def test_schedule_in_past_rejected(self, client, patients):
        response = client.post("/api/v1/notifications/broadcasts", json={
            "title": "Late",
            "message": "Too late.",
            "categories": ["all"],
            "schedule_type": "later",
            "schedule_date": "2024-06-01",
            "schedule_time": "08:00",
        })
        assert response.status_code == 400

    def test_later_requires_date_and_time(self, client):
        response = client.post("/api/v1/notifications/broadcasts", json={
            "title": "x", "message": "y", "categories": ["all"], "schedule_type": "later",
        })
        assert response.status_code == 422

    def test_requires_categories(self, client):
        response = client.post("/api/v1/notifications/broadcasts", json={
            "title": "x", "message": "y", "categories": [],
        })
        assert response.status_code == 422

    def test_unknown_category(self, client):
        response = client.post("/api/v1/notifications/broadcasts", json={
            "title": "x", "message": "y", "categories": ["vip"],
        })
        assert response.status_code == 400

    def test_message_from_template(self, client, notification_service, patients):
        notification_service.seed_default_templates()
        template = next(t for t in client.get("/api/v1/notifications/templates").json()
                        if t["name"] == "Appointment Reminder")

        response = client.post("/api/v1/notifications/broadcasts", json={
            "title": "Appointments",
            "template_id": template["id"],
            "template_values": {"date": "2024-06-10", "time": "9am"},
            "categories": ["first_trimester"],
        })
        assert response.status_code == 201
        assert response.json()["message"].startswith("Reminder: You have an appointment on 2024-06-10 at 9am.")

    def test_disabled_broadcasts(self, client, patients):
        client.patch("/api/v1/notifications/settings", json={"broadcastEnabled": False})
        response = client.post("/api/v1/notifications/broadcasts", json={
            "title": "x", "message": "y", "categories": ["all"],
        })
        assert response.status_code == 409


# =============================================================================
# REMINDERS
# =============================================================================

class TestReminders:

    def test_send_reminder(self, client, add_anc_record):
        patient = add_anc_record()
        response = client.post("/api/v1/notifications/reminders", json={
            "recipient": "Ama Mensah",
            "patient_id": patient["id"],
            "message": "Your appointment is on Monday.",
            "scheduled_for": "2024-06-03 10:00",
        })
        assert response.status_code == 201
        data = response.json()
        assert data["type"] == "appointment_reminder"
        assert data["status"] == "sent"
        assert data["recipientCount"] == 1
        assert data["patientId"] == patient["id"]
        assert data["scheduledFor"] == "2024-06-03T10:00:00Z"

    def test_unknown_patient(self, client):
        response = client.post("/api/v1/notifications/reminders", json={
            "recipient": "Nobody", "patient_id": "missing", "message": "Hi",
        })
        assert response.status_code == 404

    def test_disabled_reminders(self, client):
        client.patch("/api/v1/notifications/settings", json={"appointmentReminders": False})
        response = client.post("/api/v1/notifications/reminders", json={"recipient": "Ama", "message": "Hi"})
        assert response.status_code == 409


# =============================================================================
# NOTIFICATION LOG
# =============================================================================

class TestNotificationLog:

    def test_newest_first(self, client, logged):
        data = client.get("/api/v1/notifications").json()
        assert [n["title"] for n in data["notifications"]] == ["Appointment", "Vaccines", "Clinic hours"]
        assert data["total"] == 3
        assert data["showing"] == 3

    def test_search_recipient_and_message(self, client, logged):
        by_recipient = client.get("/api/v1/notifications", params={"search": "ama"}).json()
        assert [n["title"] for n in by_recipient["notifications"]] == ["Appointment"]
        by_message = client.get("/api/v1/notifications", params={"search": "TETANUS"}).json()
        assert [n["title"] for n in by_message["notifications"]] == ["Vaccines"]

    def test_status_filter(self, client, logged):
        data = client.get("/api/v1/notifications", params={"status": "failed"}).json()
        assert [n["title"] for n in data["notifications"]] == ["Vaccines"]

    def test_recent_and_count(self, client, logged):
        assert len(client.get("/api/v1/notifications/recent").json()) == 3
        assert client.get("/api/v1/notifications/count").json() == {"count": 3}

    def test_stats(self, client, logged):
        data = client.get("/api/v1/notifications/stats").json()
        assert data["total"] == 3
        assert data["by_status"] == {"sent": 1, "delivered": 0, "pending": 1, "failed": 1}
        assert data["by_type"] == {"appointment_reminder": 1, "broadcast": 2, "health_tip": 0}

    def test_mark_sent_stamps_sent_at(self, client, logged):
        pending = logged[1]
        data = client.patch(f"/api/v1/notifications/{pending['id']}/status", json={"status": "sent"}).json()
        assert data["status"] == "sent"
        assert data["sentAt"] == "2024-06-01T09:00:00Z"

    def test_mark_delivered_keeps_sent_at(self, client, logged):
        sent = logged[0]
        data = client.patch(f"/api/v1/notifications/{sent['id']}/status", json={"status": "delivered"}).json()
        assert data["sentAt"] == "2024-05-01T08:00:00Z"

    def test_invalid_status(self, client, logged):
        response = client.patch(f"/api/v1/notifications/{logged[0]['id']}/status", json={"status": "read"})
        assert response.status_code == 422

    def test_status_change_on_vanished_notification(self, notification_service, notification_repo, logged, monkeypatch):
        monkeypatch.setattr(notification_repo, "update", lambda notification_id, changes: None)
        with pytest.raises(DocumentNotFoundError):
            notification_service.update_status(logged[1]["id"], "sent")

    def test_get_and_delete(self, client, logged):
        notification_id = logged[0]["id"]
        assert client.get(f"/api/v1/notifications/{notification_id}").json()["title"] == "Clinic hours"
        assert client.delete(f"/api/v1/notifications/{notification_id}").status_code == 204
        assert client.get(f"/api/v1/notifications/{notification_id}").status_code == 404

    def test_categories_with_counts(self, client, patients):
        counts = {c["id"]: c["count"] for c in client.get("/api/v1/notifications/categories").json()}
        assert counts["all"] == 3
        assert counts["first_trimester"] == 1
        assert counts["third_trimester"] == 1
        assert counts["postpartum"] == 1
        assert counts["high_risk"] == 1


# =============================================================================
# TEMPLATES
# =============================================================================

class TestTemplates:

    def test_seed_only_once(self, notification_service):
        assert notification_service.seed_default_templates() == 3
        assert notification_service.seed_default_templates() == 0

    def test_crud(self, client):
        created = client.post("/api/v1/notifications/templates", json={
            "name": "Lab results",
            "category": "health",
            "message": "Hello {name}, your {test} results are ready.",
        })
        assert created.status_code == 201
        template = created.json()
        assert template["placeholders"] == ["name", "test"]

        updated = client.patch(f"/api/v1/notifications/templates/{template['id']}", json={"name": "Results"})
        assert updated.json()["name"] == "Results"
        assert updated.json()["message"] == template["message"]

        assert client.delete(f"/api/v1/notifications/templates/{template['id']}").status_code == 204
        assert client.get("/api/v1/notifications/templates").json() == []

    def test_render(self, client):
        template = client.post("/api/v1/notifications/templates", json={
            "name": "Lab", "category": "health", "message": "Hello {name}",
        }).json()
        response = client.post(f"/api/v1/notifications/templates/{template['id']}/render",
                               json={"values": {"name": "Ama"}})
        assert response.json() == {"id": template["id"], "message": "Hello Ama"}

    def test_render_missing_template(self, client):
        assert client.post("/api/v1/notifications/templates/nope/render", json={}).status_code == 404


# =============================================================================
# SETTINGS
# =============================================================================

class TestSettings:

    def test_defaults(self, client):
        data = client.get("/api/v1/notifications/settings").json()
        assert data["reminderTiming"] == 24
        assert data["broadcastEnabled"] is True

    def test_partial_update_persists(self, client, settings_repo):
        response = client.patch("/api/v1/notifications/settings", json={"reminderTiming": 48, "smsEnabled": False})
        assert response.status_code == 200
        assert response.json()["reminderTiming"] == 48
        assert settings_repo.load()["smsEnabled"] is False
        assert client.get("/api/v1/notifications/settings").json()["emailEnabled"] is True

    def test_unsupported_timing(self, client):
        assert client.patch("/api/v1/notifications/settings", json={"reminderTiming": 5}).status_code == 400
