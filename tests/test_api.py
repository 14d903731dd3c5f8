"""
End-to-end tests through the HTTP API.
"""

import pytest

from conftest import ADMIN_PASSWORD, ADMIN_USERNAME, bearer, register_and_login


# =============================================================================
# Basics
# =============================================================================


def test_hello(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.text == "Hello Pancake!"


def test_health(client):
    r = client.get("/health")
    assert r.json()["database"] is True


def test_end_to_end(client):
    r = client.post("/api/users", json={"username": "a", "password": "p"})
    assert r.status_code == 200
    assert r.json()["id"]

    r = client.post("/api/users/login", auth=("a", "p"))
    assert r.status_code == 200
    token = r.json()["token"]
    assert token

    r = client.get("/api/questions/unknown-id", headers=bearer(token))
    assert r.status_code == 404

    r = client.post("/api/questions", json={"question": "q", "answer": "a"}, headers=bearer(token))
    assert r.status_code == 401

    r = client.post("/api/questions", json={"question": "q", "answer": "a"})
    assert r.status_code == 401


# =============================================================================
# Users
# =============================================================================


class TestUsers:
    def test_register_presents_safe_fields(self, client):
        r = client.post("/api/users", json={"username": "bob", "password": "builder"})

        assert r.status_code == 200
        assert set(r.json()) == {"id", "username", "token"}
        assert r.json()["token"] is None

    def test_duplicate_username(self, client, user):
        r = client.post("/api/users", json={"username": "alice", "password": "x"})
        assert r.status_code == 400

    def test_malformed_registration(self, client):
        r = client.post("/api/users", json={"username": "bob"})
        assert r.status_code == 400

    def test_login_failure_challenge(self, client, user):
        r = client.post("/api/users/login", auth=("alice", "wrong"))

        assert r.status_code == 401
        assert r.headers["WWW-Authenticate"] == 'Basic realm="testserver"'

    def test_login_unknown_user_same_answer(self, client, user):
        wrong_password = client.post("/api/users/login", auth=("alice", "wrong"))
        unknown_user = client.post("/api/users/login", auth=("nobody", "wrong"))

        assert wrong_password.status_code == unknown_user.status_code == 401
        assert wrong_password.json() == unknown_user.json()

    def test_login_without_credentials(self, client):
        r = client.post("/api/users/login")

        assert r.status_code == 401
        assert r.headers["WWW-Authenticate"].startswith("Basic")

    @pytest.mark.parametrize("header", ["Basic !!!notbase64", "Basic bm9jb2xvbg=="])
    def test_login_undecodable_header_challenge(self, client, header):
        r = client.post("/api/users/login", headers={"Authorization": header})

        assert r.status_code == 401
        assert r.headers["WWW-Authenticate"] == 'Basic realm="testserver"'

    def test_get_self(self, client, user):
        r = client.get(f"/api/users/{user['id']}", headers=bearer(user["token"]))

        assert r.status_code == 200
        assert r.json()["username"] == "alice"
        assert "salt" not in r.json() and "pwhash" not in r.json()

    def test_get_other_user_refused(self, client, user):
        bob = register_and_login(client, "bob", "builder")

        r = client.get(f"/api/users/{user['id']}", headers=bearer(bob["token"]))
        assert r.status_code == 401

    def test_admin_reads_and_lists(self, client, user, admin_token):
        r = client.get(f"/api/users/{user['id']}", headers=bearer(admin_token))
        assert r.status_code == 200

        r = client.get("/api/users", headers=bearer(admin_token))
        assert r.status_code == 200
        assert {u["username"] for u in r.json()} == {ADMIN_USERNAME, "alice"}

    def test_list_requires_admin(self, client, user):
        r = client.get("/api/users", headers=bearer(user["token"]))
        assert r.status_code == 401

    def test_delete_user(self, client, user, admin_token):
        r = client.delete(f"/api/users/{user['id']}", headers=bearer(admin_token))
        assert r.status_code == 204

        r = client.delete(f"/api/users/{user['id']}", headers=bearer(admin_token))
        assert r.status_code == 404

        # The deleted user's session is dead and the user can't log in again
        r = client.get("/api/questions", headers=bearer(user["token"]))
        assert r.status_code == 401
        r = client.post("/api/users/login", auth=("alice", "wonderland"))
        assert r.status_code == 401

    def test_logout(self, client, user):
        r = client.post("/api/users/logout", headers=bearer(user["token"]))
        assert r.status_code == 204

        r = client.get("/api/questions", headers=bearer(user["token"]))
        assert r.status_code == 401


# =============================================================================
# Questions
# =============================================================================


def create_question(client, admin_token, question="2 + 2", answer="4") -> dict:
    r = client.post(
        "/api/questions",
        json={"question": question, "answer": answer},
        headers=bearer(admin_token),
    )
    assert r.status_code == 200, r.text
    return r.json()


class TestQuestions:
    def test_create_and_read(self, client, user, admin_token):
        created = create_question(client, admin_token)
        assert created["question"] == "2 + 2"

        r = client.get(f"/api/questions/{created['id']}", headers=bearer(user["token"]))
        assert r.status_code == 200
        assert r.json()["answer"] == "4"

        r = client.get("/api/questions", headers=bearer(user["token"]))
        assert [q["id"] for q in r.json()] == [created["id"]]

    def test_list_requires_user(self, client):
        assert client.get("/api/questions").status_code == 401

    def test_update(self, client, admin_token):
        created = create_question(client, admin_token, answer="5")

        r = client.put(
            f"/api/questions/{created['id']}",
            json={"question": "2 + 2", "answer": "4"},
            headers=bearer(admin_token),
        )
        assert r.status_code == 200
        assert r.json()["answer"] == "4"

    def test_update_unknown(self, client, admin_token):
        r = client.put(
            "/api/questions/unknown-id",
            json={"question": "q", "answer": "a"},
            headers=bearer(admin_token),
        )
        assert r.status_code == 400

    def test_delete_twice(self, client, user, admin_token):
        created = create_question(client, admin_token)

        r = client.delete(f"/api/questions/{created['id']}", headers=bearer(admin_token))
        assert r.status_code == 204
        r = client.delete(f"/api/questions/{created['id']}", headers=bearer(admin_token))
        assert r.status_code == 404

        r = client.get(f"/api/questions/{created['id']}", headers=bearer(user["token"]))
        assert r.status_code == 404

    def test_user_cannot_delete(self, client, user, admin_token):
        created = create_question(client, admin_token)

        r = client.delete(f"/api/questions/{created['id']}", headers=bearer(user["token"]))
        assert r.status_code == 401

        r = client.get(f"/api/questions/{created['id']}", headers=bearer(user["token"]))
        assert r.status_code == 200

    def test_submit_and_stats(self, client, user, admin_token):
        created = create_question(client, admin_token)
        other = create_question(client, admin_token, "3 + 3", "6")
        url = f"/api/questions/{created['id']}/submit"

        for correct in (True, True, True, False):
            r = client.post(url, json={"correct": correct}, headers=bearer(user["token"]))
            assert r.status_code == 204

        r = client.get("/api/user/questions", headers=bearer(user["token"]))
        assert r.status_code == 200
        stats = {q["id"]: (q["nb_correct"], q["nb_wrong"]) for q in r.json()}
        assert stats == {created["id"]: (3, 1), other["id"]: (0, 0)}

    def test_submit_unknown_question(self, client, user):
        r = client.post(
            "/api/questions/unknown-id/submit",
            json={"correct": True},
            headers=bearer(user["token"]),
        )
        assert r.status_code == 404

    def test_submit_malformed(self, client, user, admin_token):
        created = create_question(client, admin_token)

        r = client.post(
            f"/api/questions/{created['id']}/submit",
            json={"correct": "perhaps"},
            headers=bearer(user["token"]),
        )
        assert r.status_code == 400


def test_bootstrap_admin_survives_restart(settings):
    from fastapi.testclient import TestClient
    from spaced.api.app import create_app

    for _ in range(2):
        with TestClient(create_app(settings)) as client:
            r = client.post("/api/users/login", auth=(ADMIN_USERNAME, ADMIN_PASSWORD))
            assert r.status_code == 200
