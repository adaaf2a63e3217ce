"""
Signup, login and logout tests
"""

import pytest
from fastapi.testclient import TestClient

from noteserver.core.errors import CredentialMismatchError, UsernameTakenError, ValidationError
from noteserver.core.security import verify_password
from noteserver.main import create_app
from noteserver.modules.users.repository import UsersRepository
from noteserver.modules.users.service import UsersService

from tests.helpers import preloaded_state


SESSION_COOKIE = "noteserver.sid"


class TestUsersService:
    def test_register_hashes_password(self, db):
        user = UsersService(db).register_user("bob", "builder")
        assert user.password_hash != "builder"
        assert verify_password("builder", user.password_hash)

    def test_register_rejects_taken_username(self, db, user):
        with pytest.raises(UsernameTakenError):
            UsersService(db).register_user("alice", "another")

    @pytest.mark.parametrize(
        "username,password",
        [("", "secret"), ("bob", ""), (None, None), ("bob", 12345), (["bob"], "secret")],
    )
    def test_register_requires_credentials(self, db, username, password):
        with pytest.raises(ValidationError):
            UsersService(db).register_user(username, password)

    def test_authenticate(self, db, user):
        svc = UsersService(db)
        assert svc.authenticate("alice", "wonderland").id == user.id
        with pytest.raises(CredentialMismatchError):
            svc.authenticate("alice", "wrong")
        with pytest.raises(CredentialMismatchError):
            svc.authenticate("nobody", "wonderland")

    @pytest.mark.parametrize("username,password", [(["alice"], "wonderland"), ("alice", 42), (None, "x")])
    def test_authenticate_rejects_non_string_credentials(self, db, user, username, password):
        with pytest.raises(CredentialMismatchError):
            UsersService(db).authenticate(username, password)

    def test_concurrent_signup_for_the_same_name_is_reported_as_taken(self, db, user, monkeypatch):
        # The lookup misses, as it would for a signup racing another one
        monkeypatch.setattr(UsersRepository, "get_by_username", lambda self, username: None)
        with pytest.raises(UsernameTakenError):
            UsersService(db).register_user("alice", "again")
        monkeypatch.undo()
        assert UsersService(db).authenticate("alice", "wonderland").id == user.id

    def test_hash_rounds_follow_the_service_configuration(self, db):
        user = UsersService(db, hash_rounds=5).register_user("bob", "builder")
        assert user.password_hash.startswith("$2b$05$")
        assert verify_password("builder", user.password_hash)


class TestSignup:
    @pytest.mark.parametrize(
        "form,prefill",
        [
            ({"username": "", "password": "secret"}, {}),
            ({"username": "bob", "password": ""}, {"username": "bob"}),
        ],
    )
    def test_missing_fields_render_inline_without_persisting(self, client, monkeypatch, form, prefill):
        def forbidden(*args, **kwargs):
            raise AssertionError("persistence layer must not be called")

        monkeypatch.setattr(UsersRepository, "create", forbidden)
        monkeypatch.setattr(UsersRepository, "get_by_username", forbidden)

        response = client.post("/signup", data=form, follow_redirects=False)

        assert response.status_code == 200
        assert "Please enter a username and a password." in response.text
        page = preloaded_state(response.text)["page"]
        assert page["errorMessage"] == "Please enter a username and a password."
        assert {key: value for key, value in page["prefill"].items() if value} == prefill
        assert "password" not in page["prefill"]
        if prefill:
            assert 'value="bob"' in response.text

    def test_submitted_password_is_not_echoed(self, client, user):
        response = client.post("/signup", data={"username": "alice", "password": "hunter2-secret"})
        assert response.status_code == 200
        assert "hunter2-secret" not in response.text
        assert 'value="alice"' in response.text

    def test_success_persists_and_redirects(self, client, db):
        response = client.post(
            "/signup", data={"username": "bob", "password": "builder"}, follow_redirects=False
        )
        assert response.status_code == 302
        assert response.headers["location"] == "/notes"
        assert UsersRepository(db).get_by_username("bob") is not None

    def test_json_body_is_accepted(self, client, db):
        response = client.post("/signup", json={"username": "carol", "password": "pw"}, follow_redirects=False)
        assert response.status_code == 302
        assert UsersRepository(db).get_by_username("carol") is not None

    def test_taken_username_renders_inline(self, client, user):
        response = client.post(
            "/signup", data={"username": "alice", "password": "again"}, follow_redirects=False
        )
        assert response.status_code == 200
        assert "This username is already taken." in response.text


class TestLogin:
    def test_correct_credentials_set_session_user(self, client, user):
        response = client.post(
            "/login", data={"username": "alice", "password": "wonderland"}, follow_redirects=False
        )
        assert response.status_code == 302
        assert response.headers["location"] == "/notes"

        general = preloaded_state(client.get("/").text)["general"]
        assert general["user"] == {"id": user.id, "username": "alice"}

    def test_wrong_password_leaves_session_untouched(self, client, user):
        response = client.post(
            "/login", data={"username": "alice", "password": "nope"}, follow_redirects=False
        )
        assert response.status_code == 200
        assert "Incorrect username or password." in response.text
        assert 'value="alice"' in response.text
        assert SESSION_COOKIE not in response.cookies
        assert SESSION_COOKIE not in client.cookies
        assert preloaded_state(client.get("/").text)["general"]["user"] is None

    def test_unknown_user(self, client):
        response = client.post("/login", data={"username": "ghost", "password": "boo"})
        assert response.status_code == 200
        assert "Incorrect username or password." in response.text


class TestLogout:
    def test_clears_session_and_redirects_home(self, logged_in):
        response = logged_in.get("/logout", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == "/"

        assert preloaded_state(logged_in.get("/").text)["general"]["user"] is None
        assert logged_in.get("/notes", follow_redirects=False).status_code == 302


class TestNonStringCredentials:
    def test_signup_with_non_string_password_renders_inline(self, client, db):
        response = client.post("/signup", json={"username": "bob", "password": 12345}, follow_redirects=False)
        assert response.status_code == 200
        assert "Please enter a username and a password." in response.text
        assert preloaded_state(response.text)["page"]["prefill"] == {"username": "bob"}
        assert UsersRepository(db).get_by_username("bob") is None

    def test_login_with_list_username_renders_inline(self, client, user):
        response = client.post("/login", json={"username": ["alice"], "password": "wonderland"}, follow_redirects=False)
        assert response.status_code == 200
        assert "Incorrect username or password." in response.text
        assert SESSION_COOKIE not in client.cookies


def test_signup_uses_hash_rounds_from_app_settings(test_settings, db):
    cfg = test_settings.model_copy(update={"PASSWORD_HASH_ROUNDS": 5})
    with TestClient(create_app(cfg)) as client:
        response = client.post("/signup", data={"username": "bob", "password": "builder"}, follow_redirects=False)
    assert response.status_code == 302
    assert UsersRepository(db).get_by_username("bob").password_hash.startswith("$2b$05$")
