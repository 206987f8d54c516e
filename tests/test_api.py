"""
Tests for the HTTP contract.

Status codes and `{"error": ...}` bodies as seen by a client.
"""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from disregarded.auth import TokenService
from disregarded.core.utils import utc_now
from disregarded.services import essays as essays_module


def _create(client, headers, title="Hi", content="Body") -> dict:
    response = client.post("/documents", json={"title": title, "content": content}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["document"]


# =============================================================================
# End-to-end scenario
# =============================================================================


class TestScenario:
    def test_alice_publishes_bob_cannot_delete(self, client):
        # Alice registers
        response = client.post("/auth/register", json={"name": "alice", "password": "secret1"})
        assert response.status_code == 200
        alice = {"Authorization": f"Bearer {response.json()['token']}"}

        # Alice writes a draft
        response = client.post("/documents", json={"title": "Hi", "content": "Body"}, headers=alice)
        assert response.status_code == 201
        document = response.json()["document"]
        assert document["status"] == "draft"

        # Drafts aren't public
        response = client.get("/documents/public")
        assert response.status_code == 200
        assert response.json()["documents"] == []

        # Alice publishes
        response = client.put(f"/documents/{document['id']}/publish", headers=alice)
        assert response.status_code == 200
        assert response.json()["document"]["status"] == "published"

        # Now it's public, attributed to alice
        public = client.get("/documents/public").json()["documents"]
        assert [d["id"] for d in public] == [document["id"]]
        assert public[0]["author"] == "alice"

        # Bob shows up and tries to delete it
        client.post("/auth/register", json={"name": "bob", "password": "secret2"})
        response = client.post("/auth/login", json={"name": "bob", "password": "secret2"})
        assert response.status_code == 200
        bob = {"Authorization": f"Bearer {response.json()['token']}"}

        response = client.delete(f"/documents/{document['id']}", headers=bob)
        assert response.status_code == 403
        assert "error" in response.json()

        # Still there
        assert client.get(f"/documents/{document['id']}").status_code == 200


# =============================================================================
# Auth endpoints
# =============================================================================


class TestRegister:
    def test_success(self, client, secret):
        response = client.post("/auth/register", json={"name": "alice", "password": "secret1"})

        assert response.status_code == 200
        body = response.json()
        assert body["account"]["name"] == "alice"
        assert body["message"] == "Registration successful"
        claims = TokenService(secret).verify(body["token"])
        assert claims.account_name == "alice"
        assert claims.account_id == body["account"]["id"]

    def test_username_alias(self, client):
        response = client.post("/auth/register", json={"username": "alice", "password": "secret1"})

        assert response.status_code == 200
        assert response.json()["account"]["name"] == "alice"

    def test_duplicate(self, client, register):
        register("alice")
        response = client.post("/auth/register", json={"name": "alice", "password": "secret9"})

        assert response.status_code == 409
        assert response.json() == {"error": "Username already exists"}

    @pytest.mark.parametrize(
        "payload",
        [
            {"name": "a", "password": "secret1"},
            {"name": "alice", "password": "123"},
            {"name": "alice"},
            {},
            {"name": 5, "password": ["x"]},
        ],
    )
    def test_bad_input(self, client, payload):
        response = client.post("/auth/register", json=payload)

        assert response.status_code == 400
        assert set(response.json()) == {"error"}

    def test_disabled(self, make_client):
        client = make_client(registration_enabled=False)
        response = client.post("/auth/register", json={"name": "alice", "password": "secret1"})

        assert response.status_code == 403
        assert response.json() == {"error": "Registration is currently disabled"}


class TestLogin:
    def test_success(self, client, register):
        register("alice")
        response = client.post("/auth/login", json={"name": "alice", "password": "secret1"})

        assert response.status_code == 200
        assert response.json()["account"]["name"] == "alice"
        assert response.json()["token"]

    def test_wrong_password_and_unknown_user_match(self, client, register):
        register("alice")
        wrong = client.post("/auth/login", json={"name": "alice", "password": "nope123"})
        unknown = client.post("/auth/login", json={"name": "ghost", "password": "nope123"})

        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json() == unknown.json() == {"error": "Invalid username or password"}

    def test_missing_fields(self, client):
        response = client.post("/auth/login", json={"name": "alice"})

        assert response.status_code == 400
        assert response.json() == {"error": "Username and password are required"}

    def test_login_still_works_when_registration_disabled(self, tmp_path, make_client):
        open_client = make_client(database_path=str(tmp_path / "shared.db"))
        open_client.post("/auth/register", json={"name": "alice", "password": "secret1"})

        closed_client = make_client(
            database_path=str(tmp_path / "shared.db"), registration_enabled=False
        )
        response = closed_client.post("/auth/login", json={"name": "alice", "password": "secret1"})

        assert response.status_code == 200


class TestMe:
    def test_me(self, client, register):
        headers = register("alice")
        response = client.get("/auth/me", headers=headers)

        assert response.status_code == 200
        assert response.json()["name"] == "alice"

    def test_me_requires_token(self, client):
        assert client.get("/auth/me").status_code == 401

    def test_logout_is_client_side(self, client, register):
        headers = register("alice")

        assert client.post("/auth/logout", headers=headers).status_code == 200
        # No revocation: the token keeps working until it expires
        assert client.get("/auth/me", headers=headers).status_code == 200


# =============================================================================
# Access control
# =============================================================================


class TestAccessControl:
    def test_missing_header(self, client):
        response = client.get("/documents")

        assert response.status_code == 401
        assert response.json() == {"error": "Authentication required"}

    def test_non_bearer_scheme(self, client):
        response = client.get("/documents", headers={"Authorization": "Basic YWxpY2U6c2VjcmV0"})

        assert response.status_code == 401
        assert response.json() == {"error": "Authentication required"}

    def test_garbage_token(self, client):
        response = client.get("/documents", headers={"Authorization": "Bearer not.a.token"})

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid or expired token"}

    def test_expired_token(self, client, secret):
        stale = TokenService(secret, clock=lambda: utc_now() - timedelta(days=2)).issue(1, "alice")
        response = client.get("/documents", headers={"Authorization": f"Bearer {stale}"})

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid or expired token"}

    def test_token_signed_elsewhere(self, client):
        forged = TokenService("some-other-secret-0123456789abcdef").issue(1, "alice")
        response = client.get("/documents", headers={"Authorization": f"Bearer {forged}"})

        assert response.status_code == 401

    def test_optional_auth_ignores_bad_token(self, client, register):
        alice = register("alice")
        document = _create(client, alice)
        client.put(f"/documents/{document['id']}/publish", headers=alice)

        response = client.get(
            f"/documents/{document['id']}", headers={"Authorization": "Bearer junk"}
        )

        assert response.status_code == 200


# =============================================================================
# Documents
# =============================================================================


class TestDocuments:
    def test_round_trip(self, client, register):
        alice = register("alice")
        created = _create(client, alice, title="T", content="C")

        response = client.get(f"/documents/{created['id']}", headers=alice)

        assert response.status_code == 200
        document = response.json()["document"]
        assert (document["title"], document["content"], document["status"]) == ("T", "C", "draft")
        assert document["author"] == "alice"

    def test_draft_is_404_for_others(self, client, register):
        alice, bob = register("alice"), register("bob")
        document = _create(client, alice)

        assert client.get(f"/documents/{document['id']}").status_code == 404
        assert client.get(f"/documents/{document['id']}", headers=bob).status_code == 404
        assert client.get("/documents/zzzzz").json() == client.get(
            f"/documents/{document['id']}"
        ).json()

    def test_my_documents(self, client, register):
        alice, bob = register("alice"), register("bob")
        mine = _create(client, alice, title="Mine")
        _create(client, bob, title="Bob's")

        response = client.get("/documents", headers=alice)

        assert response.status_code == 200
        assert [d["id"] for d in response.json()["documents"]] == [mine["id"]]

    @pytest.mark.parametrize(
        "method,suffix,payload",
        [
            ("put", "", {"title": "Mine now"}),
            ("put", "", {"title": "  "}),
            ("put", "", {"content": "x" * 500_001}),
            ("put", "/publish", None),
            ("put", "/unpublish", None),
            ("delete", "", None),
        ],
    )
    def test_non_owner_writes(self, client, register, method, suffix, payload):
        alice, bob = register("alice"), register("bob")
        document = _create(client, alice)

        existing = client.request(
            method.upper(), f"/documents/{document['id']}{suffix}", json=payload, headers=bob
        )
        missing = client.request(method.upper(), f"/documents/zzzzz{suffix}", json=payload, headers=bob)

        assert existing.status_code == 403
        assert missing.status_code == 404
        assert "error" in existing.json() and "error" in missing.json()

    def test_never_issues_a_reserved_id(self, client, register, monkeypatch):
        ids = iter(["public", "fresh"])
        monkeypatch.setattr(essays_module, "generate_short_id", lambda length: next(ids))
        alice = register("alice")

        document = _create(client, alice)

        assert document["id"] == "fresh"
        assert client.get("/documents/fresh", headers=alice).json()["document"]["id"] == "fresh"

    def test_update(self, client, register):
        alice = register("alice")
        document = _create(client, alice)

        response = client.put(f"/documents/{document['id']}", json={"content": "New"}, headers=alice)

        assert response.status_code == 200
        assert response.json()["document"]["title"] == "Hi"
        assert response.json()["document"]["content"] == "New"

    def test_update_blank_title(self, client, register):
        alice = register("alice")
        document = _create(client, alice)

        response = client.put(f"/documents/{document['id']}", json={"title": "  "}, headers=alice)

        assert response.status_code == 400

    def test_publish_is_idempotent(self, client, register):
        alice = register("alice")
        document = _create(client, alice)

        for _ in range(2):
            response = client.put(f"/documents/{document['id']}/publish", headers=alice)
            assert response.status_code == 200
            assert response.json()["document"]["status"] == "published"

    def test_unpublish_is_idempotent(self, client, register):
        alice = register("alice")
        document = _create(client, alice)

        for _ in range(2):
            response = client.put(f"/documents/{document['id']}/unpublish", headers=alice)
            assert response.status_code == 200
            assert response.json()["document"]["status"] == "draft"

    def test_delete(self, client, register):
        alice = register("alice")
        document = _create(client, alice)

        response = client.delete(f"/documents/{document['id']}", headers=alice)

        assert response.status_code == 200
        assert client.get(f"/documents/{document['id']}", headers=alice).status_code == 404

    @pytest.mark.parametrize("payload", [{"title": "  ", "content": "Body"}, {"title": "Hi"}, {}])
    def test_create_validation(self, client, register, payload):
        response = client.post("/documents", json=payload, headers=register("alice"))

        assert response.status_code == 400

    def test_create_requires_auth(self, client):
        response = client.post("/documents", json={"title": "Hi", "content": "Body"})

        assert response.status_code == 401


class TestContentLength:
    @pytest.fixture
    def small_client(self, make_client):
        return make_client(max_essay_length=50)

    def _headers(self, client):
        token = client.post("/auth/register", json={"name": "alice", "password": "secret1"}).json()["token"]
        return {"Authorization": f"Bearer {token}"}

    def test_exactly_max(self, small_client):
        response = small_client.post(
            "/documents", json={"title": "Hi", "content": "x" * 50}, headers=self._headers(small_client)
        )

        assert response.status_code == 201

    def test_one_over_max(self, small_client):
        response = small_client.post(
            "/documents", json={"title": "Hi", "content": "x" * 51}, headers=self._headers(small_client)
        )

        assert response.status_code == 400
        assert "50" in response.json()["error"]

    def test_non_owner_over_max(self, small_client):
        alice = self._headers(small_client)
        document = _create(small_client, alice)
        token = small_client.post(
            "/auth/register", json={"name": "bob", "password": "secret2"}
        ).json()["token"]

        response = small_client.put(
            f"/documents/{document['id']}",
            json={"content": "x" * 51},
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 403

    def test_update_over_max(self, small_client):
        headers = self._headers(small_client)
        document = _create(small_client, headers)

        response = small_client.put(
            f"/documents/{document['id']}", json={"content": "x" * 51}, headers=headers
        )

        assert response.status_code == 400


# =============================================================================
# Error shape
# =============================================================================


class TestErrors:
    def test_unknown_route(self, client):
        response = client.get("/nowhere")

        assert response.status_code == 404
        assert "error" in response.json()

    def test_unexpected_exception_is_generic_500(self, app, monkeypatch):
        def explode():
            raise RuntimeError("database file is on fire")

        monkeypatch.setattr(app.state.essays, "list_public", explode)
        client = TestClient(app, raise_server_exceptions=False)

        response = client.get("/documents/public")

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}
        assert "fire" not in response.text

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"
