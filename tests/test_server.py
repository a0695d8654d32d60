"""
HTTP surface: folder listing, summary JSON, CSV report download.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from backend.firebase_dashboard import server
from backend.firebase_dashboard.config import DashboardConfig
from conftest import OVERVIEW_CSV


@pytest.fixture()
def client(data_dir: Path, export_folder: Path, monkeypatch) -> TestClient:
    monkeypatch.setattr(server, "config", DashboardConfig(data_dir=str(data_dir)))
    return TestClient(server.app)


def test_health(client: TestClient):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_folders_lists_complete_exports(client: TestClient, make_export_folder):
    make_export_folder("project1")
    make_export_folder("incomplete", events=None)

    r = client.get("/analytics/folders")
    assert r.status_code == 200
    assert r.json() == {"folders": ["default", "project1"]}


def test_summary_for_default_folder(client: TestClient):
    r = client.get("/analytics")
    assert r.status_code == 200
    body = r.json()
    assert body["folder"] == "default"
    assert body["data"]["totalActiveUsers"] == 300
    assert body["data"]["dateRange"] == {"startDate": "2024-01-01", "endDate": "2024-01-03"}
    assert len(body["data"]["dailyData"]) == 3


def test_unknown_folder_is_404(client: TestClient):
    r = client.get("/analytics", params={"folder": "nope"})
    assert r.status_code == 404


def test_folder_with_path_parts_is_400(client: TestClient, data_dir: Path):
    for folder in ("../default", "..", str(data_dir / "default"), "a\\b"):
        r = client.get("/analytics", params={"folder": folder})
        assert r.status_code == 400, folder
        assert r.json()["detail"] == "Invalid folder name"


def test_report_refuses_path_folder(client: TestClient, data_dir: Path):
    r = client.get("/analytics/report", params={"folder": str(data_dir / "default")})
    assert r.status_code == 400
    assert "content-disposition" not in r.headers


def test_incomplete_folder_is_404(client: TestClient, make_export_folder):
    make_export_folder("noscreens", screens=None)
    r = client.get("/analytics", params={"folder": "noscreens"})
    assert r.status_code == 404
    assert "Pages_and_screens" in r.json()["detail"]


def test_overview_without_dates_is_422(client: TestClient, make_export_folder):
    overview = "\n".join(line for line in OVERVIEW_CSV.splitlines() if "date:" not in line)
    make_export_folder("nodates", overview=overview)
    r = client.get("/analytics", params={"folder": "nodates"})
    assert r.status_code == 422


def test_screens_and_events_endpoints(client: TestClient):
    screens = client.get("/analytics/screens", params={"limit": 1}).json()["data"]
    assert [s["screenClass"] for s in screens["topScreens"]] == ["HomeScreen"]

    events = client.get("/analytics/events").json()["data"]
    assert {e["eventName"] for e in events["systemEvents"]} == {"screen_view", "user_engagement", "session_start"}


def test_csv_report_download(client: TestClient, make_export_folder):
    make_export_folder("project1")
    r = client.get("/analytics/report", params={"folder": "project1"})

    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    disposition = r.headers["content-disposition"]
    assert disposition.startswith('attachment; filename="analytics-report-project1-')
    assert r.text.startswith("Firebase Analytics Report - project1\nPeriod,2024-01-01 ~ 2024-01-03\n")


def test_unsupported_report_format(client: TestClient):
    r = client.get("/analytics/report", params={"format": "html"})
    assert r.status_code == 422
