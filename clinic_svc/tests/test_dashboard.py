"""
Tests for dashboard overview and sidebar badge counts.
"""
from datetime import timedelta

from conftest import TODAY


def test_empty_overview(client):
    data = client.get("/api/v1/dashboard/overview").json()
    assert data["total_patients"] == 0
    assert data["trimesters"] == {
        "1st Trimester": 0, "2nd Trimester": 0, "3rd Trimester": 0, "Delivered": 0, "Unknown": 0,
    }
    assert data["notifications"] == 0


def test_overview(client, add_anc_record, notification_repo, report_repo, tip_repo):
    add_anc_record(weeks_at_contact=6)
    add_anc_record(weeks_at_contact=35, risk_level="High", edd=TODAY + timedelta(days=10))
    add_anc_record(weeks_at_contact=38, days_ago=21, delivered=True)
    notification_repo.add({"type": "broadcast", "status": "sent"})
    report_repo.add({"description": "x"})
    tip_repo.add({"title": "a", "isActive": True})
    tip_repo.add({"title": "b", "isActive": False})

    data = client.get("/api/v1/dashboard/overview").json()
    assert data["total_patients"] == 3
    assert data["active_patients"] == 2
    assert data["delivered_patients"] == 1
    assert data["high_risk_patients"] == 1
    assert data["due_soon"] == 1
    assert data["trimesters"]["1st Trimester"] == 1
    assert data["trimesters"]["3rd Trimester"] == 1
    assert data["trimesters"]["Delivered"] == 1
    assert data["notifications"] == 1
    assert data["reports"] == 1
    assert data["active_tips"] == 1


def test_sidebar_counts(client, add_anc_record, notification_repo):
    add_anc_record()
    add_anc_record()
    notification_repo.add({"type": "broadcast"})
    assert client.get("/api/v1/dashboard/sidebar").json() == {"patients": 2, "notifications": 1}
