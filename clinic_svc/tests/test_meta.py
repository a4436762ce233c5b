"""
Tests for the public catalog endpoints.
"""


def test_catalog(client):
    response = client.get("/api/v1/meta/catalog")
    assert response.status_code == 200
    data = response.json()
    assert [c["id"] for c in data["broadcast_categories"]][0] == "all"
    assert "due_soon" in [c["id"] for c in data["broadcast_categories"]]
    assert [s["id"] for s in data["tip_stages"]] == ["first-trimester", "second-trimester", "third-trimester", "delivery"]
    assert data["reminder_timings"] == [2, 24, 48, 72]
    assert data["default_settings"]["reminderTiming"] == 24
    assert len(data["default_templates"]) == 3
    assert data["trimesters"][-1] == "Unknown"


def test_trimester_bounds(client):
    data = client.get("/api/v1/meta/trimesters").json()
    assert data["bounds"] == {"1st Trimester": 12, "2nd Trimester": 27, "3rd Trimester": 40}
