import json

import pytest
from fastapi.testclient import TestClient

from scholarai.config import Settings
from scholarai.gui.app import app
from scholarai.gui.state import init_state, state

from tests.conftest import FakeBackend


@pytest.fixture
def fake():
    return FakeBackend()


@pytest.fixture
def client(tmp_path, fake):
    settings = Settings.load(base_dir=tmp_path)
    init_state(settings, fake)
    with TestClient(app) as client:
        yield client


def test_list_and_search(client):
    assert client.get("/api/papers").json()["count"] == 3

    data = client.get("/api/papers", params={"q": "edge"}).json()
    assert [p["id"] for p in data["papers"]] == ["p2"]


def test_view_starts_in_library(client):
    assert client.get("/api/view").json()["view"] == {"name": "library", "paper_id": None}


def test_create_edit_save_flow(client):
    resp = client.post("/api/papers")
    assert resp.status_code == 201
    paper_id = resp.json()["paper"]["id"]
    assert resp.json()["view"] == {"name": "editing", "paper_id": paper_id}

    resp = client.put("/api/editor", json={"title": "Sparse Attention"})
    assert resp.json()["dirty"] is True

    resp = client.post("/api/editor/save")
    assert resp.json()["view"]["name"] == "library"

    titles = [p["title"] for p in client.get("/api/papers").json()["papers"]]
    assert titles[0] == "Sparse Attention"


def test_improve_endpoint(client, fake):
    client.post("/api/papers/p2/open")
    fake.queue("Polished.")

    data = client.post("/api/editor/improve", json={"mode": "academic"}).json()

    assert data["applied"] is True
    assert data["content"] == "Polished."


def test_improve_too_long_is_413(client, fake):
    client.post("/api/papers/p2/open")
    client.put("/api/editor", json={"content": "x" * 5001})

    resp = client.post("/api/editor/improve", json={"mode": "grammar"})

    assert resp.status_code == 413
    assert resp.json()["limit"] == 5000
    assert fake.calls == []


def test_improve_bad_mode_is_422(client):
    client.post("/api/papers/p2/open")
    assert client.post("/api/editor/improve", json={"mode": "poetry"}).status_code == 422


def test_reader_chat_review_and_back(client, fake):
    assert client.post("/api/papers/p1/open").json()["view"]["name"] == "reading"

    fake.queue("It simulates people.")
    resp = client.post("/api/reader/messages", json={"text": "What is this?"})
    assert resp.json()["reply"]["text"] == "It simulates people."
    assert len(client.get("/api/reader/messages").json()["messages"]) == 2

    fake.queue(json.dumps({"summary": "S", "strengths": [], "weaknesses": [], "score": 9}))
    first = client.post("/api/reader/review").json()
    second = client.post("/api/reader/review").json()
    assert first["review"]["score"] == 9
    assert second["cached"] is True
    assert len(fake.calls) == 2

    assert client.post("/api/reader/back").json()["view"]["name"] == "library"


def test_degraded_review_is_flagged(client, fake):
    client.post("/api/papers/p1/open")
    fake.queue(RuntimeError("down"))

    data = client.post("/api/reader/review").json()

    assert data["degraded"] is True
    assert data["cached"] is False


def test_blank_chat_is_422(client, fake):
    client.post("/api/papers/p1/open")
    assert client.post("/api/reader/messages", json={"text": "  "}).status_code == 422
    assert fake.calls == []


def test_invalid_transition_is_409(client):
    resp = client.post("/api/editor/save")
    assert resp.status_code == 409
    assert resp.json()["view"]["name"] == "library"


def test_unknown_paper_is_404(client):
    resp = client.post("/api/papers/nope/open")
    assert resp.status_code == 404
    assert "nope" in resp.json()["detail"]


def test_home_discards_editor(client):
    client.post("/api/papers/p2/open")
    client.put("/api/editor", json={"title": "unsaved"})

    assert client.post("/api/home").json()["view"]["name"] == "library"
    titles = [p["title"] for p in client.get("/api/papers").json()["papers"]]
    assert "unsaved" not in titles


def test_info(client):
    data = client.get("/api/info").json()
    assert data["user"]["id"] == "u1"
    assert data["model"] == "gemini-2.5-flash"


def test_shutdown_closes_backend(tmp_path, fake):
    init_state(Settings.load(base_dir=tmp_path), fake)
    with TestClient(app):
        pass
    assert fake.closed
    assert not state.ready


def test_send_to_closed_reader_is_discarded(client, fake):
    client.post("/api/papers/p1/open")
    state.controller.reader.close()

    resp = client.post("/api/reader/messages", json={"text": "What is this?"})

    assert resp.status_code == 409
    assert resp.json()["discarded"] is True
    assert resp.json()["view"] == {"name": "reading", "paper_id": "p1"}
    assert fake.calls == []


def test_init_state_seeds_from_library(tmp_path, fake):
    init_state(Settings.load(base_dir=tmp_path), fake)

    assert [p.id for p in state.repo.list()] == ["p1", "p2", "p3"]
    assert state.repo.get("p1").authors[0] == state.current_user
    assert state.controller.current_user is state.current_user
