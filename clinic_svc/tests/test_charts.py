"""
Tests for chart CRUD, statistics and Plotly figure rendering.
"""
import pytest

from services.charts.plotly_builder import ChartFigureBuilder, series_keys

ROWS = [
    {"name": "Jan", "visits": 40, "deliveries": 6},
    {"name": "Feb", "visits": 52, "deliveries": 9},
]


@pytest.fixture
def stored(chart_repo):
    """Charts written by other clients, some with fields missing."""
    return [
        chart_repo.add({"title": "Visits", "type": "line", "data": ROWS, "category": "attendance",
                        "lastUpdated": "2024-05-01T10:00:00Z"}),
        chart_repo.add({"data": [], "isActive": False}),
        chart_repo.add({"title": "Risk mix", "type": "pie", "category": "risk",
                        "data": [{"name": "Low", "value": 10}, {"name": "High", "value": 3}],
                        "lastUpdated": "2024-05-20T10:00:00Z"}),
    ]


def test_series_keys():
    assert series_keys(ROWS) == ["visits", "deliveries"]
    assert series_keys([]) == []


def test_builder_adds_one_trace_per_series():
    builder = ChartFigureBuilder()
    fig = builder.create_figure()
    builder.add_traces(fig, "area", ROWS, ["#3b82f6"])
    assert [t.name for t in fig.data] == ["visits", "deliveries"]
    assert all(t.fill == "tozeroy" for t in fig.data)


class TestCharts:

    def test_defaults_applied(self, client, stored):
        data = client.get(f"/api/v1/charts/{stored[1]['id']}").json()
        assert data["title"] == "Untitled Chart"
        assert data["type"] == "bar"
        assert data["isActive"] is False
        assert data["colorScheme"] == ["#3b82f6", "#10b981", "#f59e0b", "#ef4444", "#8b5cf6"]

    def test_list_most_recent_first(self, client, stored):
        titles = [c["title"] for c in client.get("/api/v1/charts").json()]
        assert titles == ["Risk mix", "Visits", "Untitled Chart"]

    def test_filter_by_category(self, client, stored):
        assert [c["title"] for c in client.get("/api/v1/charts", params={"category": "risk"}).json()] == ["Risk mix"]

    def test_categories(self, client, stored):
        assert client.get("/api/v1/charts/categories").json() == ["attendance", "risk"]

    def test_stats(self, client, stored):
        data = client.get("/api/v1/charts/stats").json()
        assert data["total"] == 3
        assert data["active"] == 2
        assert data["by_type"] == {"bar": 1, "line": 1, "pie": 1, "area": 0}
        assert data["latest_update"] == "2024-05-20T10:00:00Z"

    def test_stats_empty(self, client):
        assert client.get("/api/v1/charts/stats").json()["latest_update"] is None

    def test_create_and_update_touches_timestamp(self, client, chart_repo):
        created = client.post("/api/v1/charts", json={"title": "Deliveries", "data": ROWS})
        assert created.status_code == 201
        chart = created.json()
        assert chart["type"] == "bar"
        assert chart["lastUpdated"] == "2024-06-01T09:00:00Z"

        chart_repo.update(chart["id"], {"lastUpdated": "2024-01-01T00:00:00Z"})
        updated = client.patch(f"/api/v1/charts/{chart['id']}", json={"type": "line"}).json()
        assert updated["type"] == "line"
        assert updated["title"] == "Deliveries"
        assert updated["lastUpdated"] == "2024-06-01T09:00:00Z"

    def test_rejects_unknown_type(self, client):
        assert client.post("/api/v1/charts", json={"type": "radar"}).status_code == 422

    def test_rejects_empty_palette(self, client):
        assert client.post("/api/v1/charts", json={"colorScheme": []}).status_code == 400

    def test_delete(self, client, stored):
        chart_id = stored[0]["id"]
        assert client.delete(f"/api/v1/charts/{chart_id}").status_code == 204
        assert client.get(f"/api/v1/charts/{chart_id}").status_code == 404


class TestFigures:

    def test_line_figure_json(self, client, stored):
        response = client.get(f"/api/v1/charts/{stored[0]['id']}/figure")
        assert response.status_code == 200
        figure = response.json()
        assert [t["type"] for t in figure["data"]] == ["scatter", "scatter"]
        assert [t["name"] for t in figure["data"]] == ["visits", "deliveries"]
        assert "Visits" in figure["layout"]["title"]["text"]

    def test_pie_figure(self, client, stored):
        figure = client.get(f"/api/v1/charts/{stored[2]['id']}/figure").json()
        assert len(figure["data"]) == 1
        assert figure["data"][0]["type"] == "pie"
        assert list(figure["data"][0]["labels"]) == ["Low", "High"]

    def test_empty_chart_placeholder(self, client, stored):
        figure = client.get(f"/api/v1/charts/{stored[1]['id']}/figure").json()
        assert figure["data"] == []
        assert "No data yet" in figure["layout"]["annotations"][0]["text"]

    def test_html_output(self, client, stored):
        response = client.get(f"/api/v1/charts/{stored[0]['id']}/figure", params={"output": "html"})
        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert "clinic-chart" in response.text

    def test_missing_chart(self, client):
        assert client.get("/api/v1/charts/nope/figure").status_code == 404
