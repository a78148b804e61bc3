from __future__ import annotations

import sys
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

sys.path.append(str(Path(__file__).resolve().parents[1]))

from seqera_flow.infrastructure.platform import configure_client_factory


@pytest.fixture()
def client(platform, monkeypatch):
    monkeypatch.setenv("SEQERA_BASE_URL", "https://seqera.test")
    monkeypatch.setenv("SEQERA_ACCESS_TOKEN", "tok")
    monkeypatch.delenv("SEQERA_WORKSPACE_ID", raising=False)
    configure_client_factory(platform.factory)
    from seqera_flow.app import create_app

    app = create_app()
    with TestClient(app) as test_client:
        yield test_client


def test_root_landing(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["docs"] == "/docs"


def test_pipeline_choices(client, platform):
    platform.add("GET", "/pipelines", {"pipelines": [{"name": "rnaseq"}, {"name": "sarek"}]})

    response = client.get("/api/admin/pipelines", params={"search": "r", "workspaceId": "ws-9"})

    assert response.json() == [{"value": "rnaseq", "label": "rnaseq"}, {"value": "sarek", "label": "sarek"}]
    request = platform.calls("GET", "/pipelines")[0]
    assert request.url.params["workspaceId"] == "ws-9"
    assert request.url.params["search"] == "r"
    assert request.headers["Authorization"] == "Bearer tok"


def test_pipeline_choices_empty_without_workspace_or_on_error(client, platform):
    assert client.get("/api/admin/pipelines").json() == []

    platform.add("GET", "/pipelines", httpx.Response(500))
    assert client.get("/api/admin/pipelines", params={"workspaceId": "ws-9"}).json() == []


def test_connectivity_check_success(client, platform):
    platform.add("GET", "/user-info", {"user": {"userName": "ada", "email": "ada@example.org", "id": 1}})

    response = client.get("/api/config/connectivity-check", params={"baseUrl": "https://seqera.test/", "token": "t"})

    assert response.json() == {"success": True, "user": {"userName": "ada", "email": "ada@example.org"}}
    assert platform.requests[0].headers["Authorization"] == "Bearer t"


@pytest.mark.parametrize(
    ("params", "message"),
    [
        ({"baseUrl": "https://seqera.test"}, "No API token provided"),
        ({"token": "t"}, "No base URL provided"),
    ],
)
def test_connectivity_check_missing_inputs(client, platform, params, message):
    body = client.get("/api/config/connectivity-check", params=params).json()
    assert body["success"] is False
    assert body["message"] == message
    assert platform.requests == []


def test_connectivity_check_invalid_token(client, platform):
    platform.add("GET", "/user-info", httpx.Response(401, json={"message": "Unauthorized"}))

    body = client.get("/api/config/connectivity-check", params={"baseUrl": "https://seqera.test", "token": "bad"}).json()

    assert body == {"success": False, "message": "Invalid API token"}


def test_workspaces_grouped_by_organisation(client, platform):
    platform.add(
        "GET",
        "/orgs",
        {
            "organizations": [
                {"orgId": 3, "name": "zeta", "fullName": "Zeta Lab"},
                {"orgId": 1, "name": "community", "fullName": "Community"},
                {"orgId": 2, "name": "alpha", "fullName": "Alpha Inc"},
                {"orgId": 4, "name": "beta", "fullName": "Beta"},
                {"orgId": 5, "name": "empty", "fullName": "Empty"},
            ]
        },
    )
    platform.add("GET", "/orgs/2/workspaces", {"workspaces": [{"id": 21, "name": "prod"}, {"id": 20, "name": "dev"}]})
    platform.add("GET", "/orgs/3/workspaces", {"workspaces": [{"id": 30, "name": "main"}]})
    platform.add("GET", "/orgs/4/workspaces", httpx.Response(500))
    platform.add("GET", "/orgs/5/workspaces", {"workspaces": []})

    body = client.get("/api/config/workspaces", params={"baseUrl": "https://seqera.test", "token": "t"}).json()

    assert body["success"] is True
    assert [org["orgName"] for org in body["organizations"]] == ["alpha", "zeta"]
    assert [ws["name"] for ws in body["organizations"][0]["workspaces"]] == ["dev", "prod"]
    assert body["organizations"][1]["orgFullName"] == "Zeta Lab"
    assert platform.calls("GET", "/orgs/1/workspaces") == []


def test_workspaces_invalid_token(client, platform):
    platform.add("GET", "/orgs", httpx.Response(403))

    body = client.get("/api/config/workspaces", params={"baseUrl": "https://seqera.test", "token": "t"}).json()

    assert body == {"success": False, "message": "Invalid API token"}
