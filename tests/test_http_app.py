import pytest
from fastapi.testclient import TestClient

from manifest_mcp.http_app import build_http_app


@pytest.fixture
def client(plugin):
    return TestClient(build_http_app(plugin))


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "service": "test-server", "version": "9.9.9"}


def test_listings(client, manifest_data):
    assert client.get("/tools").json() == {"tools": manifest_data["tools"]}
    assert client.get("/resources").json() == {"resources": manifest_data["resources"]}
    assert client.get("/prompts").json() == {"prompts": manifest_data["prompts"]}


def test_call_tool(client):
    r = client.post("/tools/needs_x", json={"x": 7})
    assert r.status_code == 200
    body = r.json()
    assert body["isError"] is False
    assert body["content"][0]["type"] == "text"
    assert '"x": 7' in body["content"][0]["text"]


def test_tool_failure_stays_in_band(client):
    r = client.post("/tools/boom", json={})
    assert r.status_code == 200
    assert r.json()["isError"] is True


def test_invalid_arguments_are_400(client, calls):
    r = client.post("/tools/needs_x", json={})
    assert r.status_code == 400
    assert "required property" in r.json()["error"]
    assert calls.get("needs_x", 0) == 0


def test_unknown_capabilities_are_404(client):
    assert client.post("/tools/nope", json={}).status_code == 404
    assert client.get("/resources/read", params={"uri": "config://nope"}).status_code == 404
    assert client.post("/prompts/nope", json={}).status_code == 404


def test_read_resource_and_prompt(client):
    r = client.get("/resources/read", params={"uri": "config://settings"})
    assert r.status_code == 200
    assert r.json()["contents"][0]["mimeType"] == "application/json"

    r = client.post("/prompts/greet", json={"who": "Linus"})
    assert r.status_code == 200
    assert r.json()["messages"][0]["content"]["text"] == "Say hello to Linus"
