"""Tests for the /api endpoints."""

import pytest
from fastapi.testclient import TestClient

from chef_froggy.app import create_app
from chef_froggy.config import load_settings

from conftest import StubLLM, provider_error


@pytest.fixture
def llm() -> StubLLM:
    return StubLLM()


@pytest.fixture
def client(llm: StubLLM) -> TestClient:
    return TestClient(create_app(load_settings({}), llm=llm))


def test_health(client: TestClient) -> None:
    assert client.get("/api/health").json() == {"status": "ok"}


def test_list_recipes(client: TestClient) -> None:
    recipes = client.get("/api/recipes").json()
    assert [r["name"] for r in recipes][:2] == ["Lily Pad Pancakes", "Fly-licious Fruit Salad"]
    assert recipes[3] == {"index": 3, "name": "Frog Legged Spaghetti", "steps": 6}


def test_session_starts_idle(client: TestClient) -> None:
    assert client.get("/api/session").json() == {"phase": "idle", "session": None}


def test_select_emits_first_instruction(client: TestClient) -> None:
    resp = client.post("/api/recipes/2/select")
    assert resp.status_code == 200
    body = resp.json()
    assert body["phase"] == "awaiting_input"
    assert body["events"] == [{
        "type": "instruction_ready",
        "text": "Which protein would you like for your tacos? (e.g., ground beef, vegetarian crumbles)",
    }]
    assert body["session"]["recipe"] == "Tadpole Tacos"
    assert body["session"]["step_index"] == 0


def test_select_unknown_recipe(client: TestClient) -> None:
    assert client.post("/api/recipes/42/select").status_code == 404


def test_respond_advances(client: TestClient, llm: StubLLM) -> None:
    llm.responses = ["Light as a lily pad!"]
    client.post("/api/recipes/0/select")
    body = client.post("/api/respond", json={"text": "lighter"}).json()
    assert body["events"] == [{
        "type": "instruction_ready",
        "text": "Would you like your pancakes sweet? How much sugar should we add?",
    }]
    assert [m["role"] for m in body["session"]["messages"]] == ["system", "user", "assistant"]
    assert body["session"]["choices"] == [{"step_index": 0, "player_text": "lighter"}]


def test_respond_before_select_conflicts(client: TestClient) -> None:
    resp = client.post("/api/respond", json={"text": "hello"})
    assert resp.status_code == 409


def test_provider_failure_then_retry(client: TestClient, llm: StubLLM) -> None:
    llm.responses = [provider_error("quota"), "Fine choice."]
    client.post("/api/recipes/0/select")

    resp = client.post("/api/respond", json={"text": "lighter"})
    assert resp.status_code == 502
    state = client.get("/api/session").json()
    assert state["phase"] == "generating"
    assert state["session"]["choices"] == []

    body = client.post("/api/retry").json()
    assert body["session"]["step_index"] == 1


def test_abandon_after_failure(client: TestClient, llm: StubLLM) -> None:
    llm.responses = [provider_error()]
    client.post("/api/recipes/0/select")
    client.post("/api/respond", json={"text": "lighter"})
    body = client.post("/api/abandon").json()
    assert body["phase"] == "awaiting_input"
    assert body["events"][0]["type"] == "instruction_ready"


def test_full_recipe_with_recap(client: TestClient, llm: StubLLM) -> None:
    llm.responses = ["ok"] * 5 + ["A splendid stack of pancakes!"]
    client.post("/api/recipes/0/select")
    for answer in ["lighter", "a little", "fluffy", "yes", "both"]:
        body = client.post("/api/respond", json={"text": answer}).json()
    assert body["events"] == [{"type": "recap_ready"}]

    body = client.post("/api/recap").json()
    assert body["phase"] == "done"
    assert body["events"] == [
        {"type": "recap_text", "text": "A splendid stack of pancakes!"},
        {"type": "session_complete"},
    ]
    assert "Player chose: both." in llm.prompts[-1]


def test_recap_too_early_conflicts(client: TestClient) -> None:
    client.post("/api/recipes/0/select")
    assert client.post("/api/recap").status_code == 409
