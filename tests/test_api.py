from datetime import date
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from api import crud
from api.deps import get_session, parse_period
from api.main import app
from api.routers import collectors as collectors_router
from core.config import get_settings


@pytest.fixture
def client(session):
    def override():
        yield session

    app.dependency_overrides[get_session] = override
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def stored(session, make_report):
    crud.save_reports(
        session,
        [
            make_report(id="1", resource="AWS", service_type="ec2", account_number="111", cost=3.0),
            make_report(id="2", resource="Azure", service_type="vm", account_number="222", cost=2.0),
            make_report(id="3", resource="Azure", service_type="vm", account_number="333", cost=1.5),
        ],
    )


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_total(client, stored):
    response = client.get("/reports/total", params={"year": 2016, "month": 10, "resource": "azure"})

    assert response.status_code == 200
    assert response.json() == {"year": 2016, "month": "October", "resource": "Azure", "total_cost": 3.5}


def test_by_resource(client, stored):
    response = client.get("/reports/by-resource", params={"year": 2016, "month": 10})

    assert response.json() == [
        {"key": "Azure", "total_cost": 3.5, "usage_quantity": 2.0},
        {"key": "AWS", "total_cost": 3.0, "usage_quantity": 1.0},
    ]


def test_by_account_with_limit(client, stored):
    response = client.get("/reports/by-account", params={"year": 2016, "resource": "Azure", "limit": 1})

    assert [row["key"] for row in response.json()] == ["222"]


def test_list_reports(client, stored):
    response = client.get("/reports", params={"year": 2016, "resource": "AWS"})

    rows = response.json()
    assert len(rows) == 1
    assert rows[0]["service_type"] == "ec2"
    assert rows[0]["month"] == "October"


def test_invalid_month_and_resource(client):
    assert client.get("/reports/total", params={"year": 2016, "month": 13}).status_code == 400
    assert client.get("/reports/total", params={"year": 2016, "resource": "oracle"}).status_code == 400


def test_run_collection_records_status(client):
    def fake_run(selected_providers, status):
        status["sources"]["gcp"] = {"state": "error", "entries": 0, "error": "[GCP] empty"}
        status["sources"]["aws"] = {"state": "success", "entries": 4, "error": None}
        return 4

    with patch.object(collectors_router, "run_collectors", side_effect=fake_run):
        response = client.post("/collectors/run", params={"providers": "aws,gcp"})
        run_id = response.json()["run_id"]
        status = client.get(f"/collectors/status/{run_id}").json()

    assert status["state"] == "partial"
    assert status["inserted"] == 4
    assert status["providers"] == ["aws", "gcp"]


def test_run_collection_rejects_unknown_provider(client):
    response = client.post("/collectors/run", params={"providers": "oracle"})
    assert response.status_code == 400


def test_unknown_run(client):
    assert client.get("/collectors/status/missing").status_code == 404


def test_default_year_follows_configured_time_zone():
    with patch("api.deps.dates.today", return_value=date(2031, 1, 1)) as today:
        assert parse_period(None, 2) == (2031, "February")
    today.assert_called_once_with(get_settings().time_zone)
