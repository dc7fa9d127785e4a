import pytest
from fastapi.testclient import TestClient

from helpdesk import main


@pytest.fixture
def client(make_settings, monkeypatch):
    settings = make_settings()
    monkeypatch.setattr(main, "get_settings", lambda: settings)
    main.get_orchestrator.cache_clear()
    main.get_swarm.cache_clear()
    with TestClient(main.app) as client:
        yield client
    main.get_orchestrator.cache_clear()
    main.get_swarm.cache_clear()


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "config_problems": []}


def test_agents(client):
    agents = client.get("/agents").json()["agents"]

    assert {a["name"] for a in agents} == {
        "TriageAgent",
        "IntentDetectionAgent",
        "SummarizationAgent",
        "AutoReplyAgent",
    }
    assert all(a["policies"][0]["id"] == "human-review" for a in agents)


def test_analyze(client):
    response = client.post("/support/analyze", json={
        "subject": "Urgent: Critical bug in production",
        "body": "The system is broken",
        "from": "ops@example.com",
        "issue_number": 7,
    })

    assert response.status_code == 200
    data = response.json()
    assert [d["action"] for d in data["decisions"]] == ["triage", "route", "summarize"]
    assert data["final_action"] == "escalate"
    assert data["requires_approval"] is True
    assert data["comment"].startswith("## 🤖 Automated Analysis")


def test_analyze_rejects_empty_subject(client):
    response = client.post("/support/analyze", json={"subject": "", "body": "Hi"})
    assert response.status_code == 422


def test_analyze_graph_releases_the_graph(client):
    response = client.post("/support/analyze/graph", json={
        "id": "req-api",
        "subject": "Vague issue",
        "body": "Something is wrong",
    })

    assert response.status_code == 200
    data = response.json()
    assert data["request_id"] == "req-api"
    assert len(data["nodes"]) == 9
    assert all(node["status"] == "completed" for node in data["nodes"])
    assert data["recommendation"].startswith("Low confidence")

    status = client.get("/swarm/status").json()
    assert status["active_graphs"] == 0
    assert status["initialized"] is True
