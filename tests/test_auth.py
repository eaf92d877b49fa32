"""AuthContainer tests"""

import pytest

from skygear.errors import RequestFailed
from skygear.models import User
from skygear.persistent_store import PersistentStore

LOGIN_RESULT = {
    "user_id": "user-1",
    "access_token": "token-1",
    "profile": {"_id": "user/user-1", "username": "alice", "email": "alice@example.com"},
    "roles": ["member"],
}


def test_login_updates_store_and_token(container, transport, context, handler_factory):
    transport.respond("auth:login", LOGIN_RESULT)
    handler = handler_factory()

    container.auth().login_with_username("alice", "secret", handler).result(timeout=5)

    user = container.auth().get_current_user()
    assert user.user_id == "user-1"
    assert user.username == "alice"
    assert container.request_manager.access_token == "token-1"
    assert handler.results == [user]
    assert PersistentStore(context).current_user == user

    call = transport.calls_for("auth:login")[0]
    assert call.payload["auth_data"] == {"username": "alice"}
    assert call.access_token is None


def test_login_failure_keeps_logged_out(container, transport, handler_factory):
    transport.respond("auth:login", RequestFailed("invalid credentials", error_code=105))
    handler = handler_factory()

    container.auth().login_with_email("alice@example.com", "wrong", handler).exception(timeout=5)

    assert container.auth().current_user is None
    assert container.request_manager.access_token is None
    assert handler.errors[0].error_code == 105


def test_signup_logs_in(container, transport):
    transport.respond("auth:signup", LOGIN_RESULT)

    container.auth().signup_with_email("alice@example.com", "secret").result(timeout=5)

    assert container.request_manager.access_token == "token-1"


def test_logout_clears_user(container, transport, handler_factory):
    transport.respond("auth:login", LOGIN_RESULT)
    container.auth().login_with_username("alice", "secret").result(timeout=5)
    handler = handler_factory()

    container.auth().logout(handler).result(timeout=5)

    assert container.auth().get_current_user() is None
    assert container.request_manager.access_token is None
    assert transport.calls_for("auth:logout")[0].access_token == "token-1"
    assert len(handler.results) == 1


def test_failed_logout_keeps_user(container, transport):
    transport.respond("auth:login", LOGIN_RESULT)
    transport.respond("auth:logout", RequestFailed("server down"))
    container.auth().login_with_username("alice", "secret").result(timeout=5)

    container.auth().logout().exception(timeout=5)

    assert container.request_manager.access_token == "token-1"


def test_who_am_i_keeps_token(container, transport):
    transport.respond("auth:login", LOGIN_RESULT)
    transport.respond("auth:me", {"user_id": "user-1", "profile": {"username": "alice2"}})
    container.auth().login_with_username("alice", "secret").result(timeout=5)

    container.auth().who_am_i().result(timeout=5)

    user = container.auth().get_current_user()
    assert user.username == "alice2"
    assert user.access_token == "token-1"


def test_malformed_login_response_fails_handler(container, transport, handler_factory):
    transport.respond("auth:login", {})
    handler = handler_factory()

    error = container.auth().login_with_username("alice", "secret", handler).exception(timeout=5)

    assert isinstance(error, RequestFailed)
    assert handler.errors == [error]
    assert handler.results == []
    assert container.auth().get_current_user() is None
    assert container.request_manager.access_token is None


def test_malformed_who_am_i_response_keeps_user(container, transport, handler_factory):
    transport.respond("auth:login", LOGIN_RESULT)
    transport.respond("auth:me", ["not", "a", "user"])
    container.auth().login_with_username("alice", "secret").result(timeout=5)
    handler = handler_factory()

    error = container.auth().who_am_i(handler).exception(timeout=5)

    assert isinstance(error, RequestFailed)
    assert handler.errors == [error]
    assert container.auth().get_current_user().username == "alice"


def test_store_write_failure_fails_login(container, transport, handler_factory, monkeypatch):
    transport.respond("auth:login", LOGIN_RESULT)

    def failing_save():
        raise OSError("disk full")

    monkeypatch.setattr(container.persistent_store, "save", failing_save)
    handler = handler_factory()

    error = container.auth().login_with_username("alice", "secret", handler).exception(timeout=5)

    assert isinstance(error, RequestFailed)
    assert handler.errors == [error]
    assert container.auth().get_current_user() is None
    assert container.request_manager.access_token is None


def test_update_current_user_rolls_back_on_write_failure(container, transport, monkeypatch):
    transport.respond("auth:login", LOGIN_RESULT)
    container.auth().login_with_username("alice", "secret").result(timeout=5)

    def failing_save():
        raise OSError("disk full")

    monkeypatch.setattr(container.persistent_store, "save", failing_save)

    with pytest.raises(OSError):
        container.auth().update_current_user(User(user_id="user-2", access_token="token-2"))

    assert container.auth().get_current_user().user_id == "user-1"
    assert container.request_manager.access_token == "token-1"
