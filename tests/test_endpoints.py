import pytest
from fastapi.testclient import TestClient

from qbot.app import app, get_orchestrator
from qbot.generate.errors import UpstreamError
from qbot.generate.tiers import TierPolicy
from qbot.generate.types import ProviderId


@pytest.fixture
def client_for(make_client, make_orchestrator):
    def _make(*clients, tiers=None):
        orchestrator = make_orchestrator(*clients, tiers=tiers)
        app.dependency_overrides[get_orchestrator] = lambda: orchestrator
        return TestClient(app)

    yield _make
    app.dependency_overrides.clear()


def test_root_ok(client_for):
    r = client_for().get("/")
    assert r.status_code == 200
    assert "message" in r.json()


def test_health_ok(client_for):
    r = client_for().get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_healthz_ok(client_for):
    data = client_for().get("/healthz").json()
    assert data["ok"] is True
    assert "env" in data


def test_models_lists_configured_providers(client_for, make_client):
    client = client_for(
        make_client(ProviderId.OPENAI),
        make_client(ProviderId.GEMINI, configured=False),
        make_client(ProviderId.DEEPSEEK),
    )
    assert client.get("/models").json() == {"models": ["openai", "deepseek"]}


def test_chat_returns_generation_result(client_for, make_client):
    openai = make_client(ProviderId.OPENAI, ["• Bleed the fuel filter"])
    client = client_for(openai, tiers=TierPolicy(allowlist=["45016180"]))

    r = client.post("/chat", json={
        "message": "Engine won't start",
        "category": "Engine Room Machinery",
        "language": "tr",
        "requester": {"identity_key": "45016180", "rank": "Chief Engineer", "vessel": "MV Ocean Star"},
        "history": [{"role": "user", "content": "hi"}, {"role": "assistant", "content": "• hello"}],
    })

    assert r.status_code == 200
    body = r.json()
    assert body["content"] == "• Bleed the fuel filter"
    assert body["provider_id"] == "openai"
    assert body["tokens_used"] == 42
    assert body["tier"] == "unrestricted"

    prompt = openai.calls[0]["prompt"]
    assert "Respond in Turkish language only" in prompt.system
    assert "Chief Engineer aboard MV Ocean Star" in prompt.system
    assert [m.role for m in prompt.history] == ["user", "assistant"]


def test_chat_missing_message_is_422(client_for, make_client):
    r = client_for(make_client(ProviderId.OPENAI)).post("/chat", json={"category": "x"})
    assert r.status_code == 422


def test_chat_blank_message_is_422(client_for, make_client):
    openai = make_client(ProviderId.OPENAI)
    r = client_for(openai).post("/chat", json={"message": "   "})
    assert r.status_code == 422
    assert openai.calls == []


def test_chat_provider_outage_is_still_200(client_for, make_client):
    openai = make_client(ProviderId.OPENAI, [UpstreamError("openai", "down", 503)])
    r = client_for(openai).post("/chat", json={"message": "Why is the boiler tripping?"})
    assert r.status_code == 200
    body = r.json()
    assert body["provider_id"] == "fallback"
    assert body["latency_ms"] == 0
    assert body["content"]


def test_clear_chat_drops_conversation(client_for, make_client):
    openai = make_client(ProviderId.OPENAI, threads=True)
    client = client_for(openai)
    client.post("/chat", json={"message": "hi", "requester": {"identity_key": "u7"}})

    assert client.post("/chat/clear", json={"identity_key": "u7"}).json() == {"cleared": True}
    assert client.post("/chat/clear", json={"identity_key": "u7"}).json() == {"cleared": False}
    assert client.post("/chat/clear", json={}).status_code == 422
