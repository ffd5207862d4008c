"""
Journal endpoints: round trip, ownership boundary and validation.
"""
import pytest

from tests.helpers import register

JOURNAL = {"title": "T", "content": "C", "mood": 3}


def create_journal(client, **overrides):
    response = client.post("/api/journals", json={**JOURNAL, **overrides})
    assert response.status_code == 201, response.text
    return response.json()


def test_create_then_get_round_trip(alice):
    created = create_journal(alice)
    assert isinstance(created["id"], int)
    assert created["createdAt"]

    response = alice.get(f"/api/journals/{created['id']}")
    assert response.status_code == 200
    body = response.json()
    assert body["title"] == "T"
    assert body["content"] == "C"
    assert body["mood"] == 3
    assert body["id"] == created["id"]
    assert body["createdAt"] == created["createdAt"]


def test_list_returns_only_own_journals_newest_first(alice, bob, clock):
    first = create_journal(alice, title="first")
    clock.advance(minutes=5)
    second = create_journal(alice, title="second")
    create_journal(bob, title="bob's")

    response = alice.get("/api/journals")
    assert response.status_code == 200
    assert [j["id"] for j in response.json()] == [second["id"], first["id"]]


@pytest.mark.parametrize("method", ["get", "put", "delete"])
def test_other_users_journal_is_forbidden(alice, bob, method):
    journal = create_journal(alice)
    url = f"/api/journals/{journal['id']}"
    if method == "put":
        response = bob.put(url, json={"title": "hijacked"})
    else:
        response = getattr(bob, method)(url)
    assert response.status_code == 403
    assert "message" in response.json()

    # nothing changed for the owner
    assert alice.get(url).json()["title"] == "T"


@pytest.mark.parametrize("method", ["get", "put", "delete"])
def test_missing_journal_is_not_found(bob, method):
    url = "/api/journals/999"
    if method == "put":
        response = bob.put(url, json={"title": "x"})
    else:
        response = getattr(bob, method)(url)
    assert response.status_code == 404


@pytest.mark.parametrize(
    "method,url",
    [("get", "/api/journals"), ("get", "/api/journals/1"), ("post", "/api/journals"),
     ("put", "/api/journals/1"), ("delete", "/api/journals/1")],
)
def test_journal_routes_require_session(client, method, url):
    kwargs = {"json": JOURNAL} if method in ("post", "put") else {}
    response = getattr(client, method)(url, **kwargs)
    assert response.status_code == 401


def test_partial_update_merges_fields(alice):
    journal = create_journal(alice)
    response = alice.put(f"/api/journals/{journal['id']}", json={"mood": 5})
    assert response.status_code == 200
    body = response.json()
    assert body["mood"] == 5
    assert body["title"] == "T"
    assert body["content"] == "C"


def test_update_cannot_change_owner_or_id(alice, bob):
    journal = create_journal(alice)
    bob_id = bob.get("/api/user").json()["id"]
    response = alice.put(
        f"/api/journals/{journal['id']}",
        json={"title": "New", "userId": bob_id, "id": 12345},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["id"] == journal["id"]
    assert body["userId"] == journal["userId"]
    assert bob.get(f"/api/journals/{journal['id']}").status_code == 403


def test_delete_then_delete_again(alice):
    journal = create_journal(alice)
    url = f"/api/journals/{journal['id']}"
    response = alice.delete(url)
    assert response.status_code == 204
    assert response.content == b""
    assert alice.get(url).status_code == 404
    assert alice.delete(url).status_code == 404


def test_ids_are_not_reused_after_delete(alice):
    first = create_journal(alice)
    alice.delete(f"/api/journals/{first['id']}")
    second = create_journal(alice)
    assert second["id"] > first["id"]


@pytest.mark.parametrize(
    "payload",
    [
        {"title": "T", "content": "C", "mood": 0},
        {"title": "T", "content": "C", "mood": 6},
        {"title": "T", "content": "C", "mood": "3"},
        {"title": "T", "content": "C"},
        {"title": "", "content": "C", "mood": 3},
        {"content": "C", "mood": 3},
    ],
)
def test_invalid_journal_is_rejected(alice, payload):
    response = alice.post("/api/journals", json=payload)
    assert response.status_code == 400
    assert response.json()["message"].startswith("Validation error")
    assert alice.get("/api/journals").json() == []


def test_invalid_partial_update_is_rejected(alice):
    journal = create_journal(alice)
    url = f"/api/journals/{journal['id']}"
    assert alice.put(url, json={"mood": 9}).status_code == 400
    assert alice.put(url, json={"title": None}).status_code == 400
    assert alice.get(url).json()["mood"] == 3


def test_validation_message_names_field(alice):
    response = alice.post("/api/journals", json={"title": "T", "content": "C", "mood": 7})
    assert response.status_code == 400
    assert '"mood"' in response.json()["message"]


def test_journal_survives_session_of_new_client(client_factory):
    client = client_factory()
    register(client, "carol")
    journal = create_journal(client)

    other = client_factory()
    other.post("/api/login", json={"username": "carol", "password": "secret123"})
    assert other.get(f"/api/journals/{journal['id']}").status_code == 200


@pytest.mark.parametrize("payload", [{"mood": 9}, {"title": None}, ["not", "an", "object"]])
def test_foreign_journal_is_forbidden_whatever_the_body(alice, bob, payload):
    journal = create_journal(alice)
    response = bob.put(f"/api/journals/{journal['id']}", json=payload)
    assert response.status_code == 403
    assert alice.get(f"/api/journals/{journal['id']}").json()["mood"] == 3


@pytest.mark.parametrize("payload", [{"mood": 9}, {"title": None}])
def test_missing_journal_is_not_found_whatever_the_body(bob, payload):
    assert bob.put("/api/journals/999", json=payload).status_code == 404


def test_partial_update_accepts_camel_case_keys(alice):
    journal = create_journal(alice)
    response = alice.put(f"/api/journals/{journal['id']}", json={"content": "new", "userId": 77})
    assert response.status_code == 200
    assert response.json()["content"] == "new"
    assert response.json()["userId"] == journal["userId"]
