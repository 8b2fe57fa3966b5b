# asset_frontend/test_auth.py
# Unit tests for session auth state, using plain dicts as session state

from asset_frontend.api_client import ApiError
from asset_frontend.auth import (
    SessionAuth,
    clear_auth,
    init_auth_state,
    is_authenticated,
    refresh_session,
    set_auth,
    sign_in,
    sign_out,
)

SESSION = {
    "access_token": "access-1",
    "refresh_token": "refresh-1",
    "user": {"id": "user-1", "email": "ops@example.co.za"},
}


class FakeAuthClient:
    def __init__(self, session=None, error=None):
        self.session = session
        self.error = error
        self.calls = []

    def _answer(self, name, *args):
        self.calls.append((name, args))
        if self.error:
            raise self.error
        return self.session

    def sign_in(self, email, password):
        return self._answer("sign_in", email, password)

    def refresh_session(self, refresh_token):
        return self._answer("refresh_session", refresh_token)

    def sign_out(self):
        return self._answer("sign_out")


def test_init_auth_state_is_idempotent():
    ss = {}
    init_auth_state(ss)
    init_auth_state(ss)

    assert ss == {"access_token": None, "refresh_token": None, "current_user": None, "is_authenticated": False}


def test_init_auth_state_syncs_flag_with_token():
    ss = {"access_token": None, "is_authenticated": True}
    init_auth_state(ss)

    assert ss["is_authenticated"] is False


def test_set_and_clear_auth():
    ss = {}
    set_auth(SESSION, ss)

    assert is_authenticated(ss)
    assert ss["current_user"]["id"] == "user-1"

    clear_auth(ss)
    assert not is_authenticated(ss)
    assert ss["access_token"] is None
    assert ss["refresh_token"] is None
    assert ss["current_user"] is None


def test_set_auth_keeps_refresh_token_when_omitted():
    ss = {}
    set_auth(SESSION, ss)
    set_auth({"access_token": "access-2"}, ss)

    assert ss["access_token"] == "access-2"
    assert ss["refresh_token"] == "refresh-1"
    assert ss["current_user"]["id"] == "user-1"


def test_sign_in_stores_session():
    ss = {}
    client = FakeAuthClient(session=SESSION)

    assert sign_in(client, "  ops@example.co.za ", "pw", ss) is None
    assert client.calls == [("sign_in", ("ops@example.co.za", "pw"))]
    assert is_authenticated(ss)


def test_sign_in_returns_backend_message():
    ss = {}
    client = FakeAuthClient(error=ApiError("Invalid login credentials", 400))

    assert sign_in(client, "ops@example.co.za", "wrong", ss) == "Invalid login credentials"
    assert not is_authenticated(ss)


def test_sign_out_clears_state_even_when_remote_fails():
    ss = {}
    set_auth(SESSION, ss)

    sign_out(FakeAuthClient(error=ApiError("offline")), ss)

    assert not is_authenticated(ss)


def test_refresh_session_rotates_tokens():
    ss = {}
    set_auth(SESSION, ss)
    client = FakeAuthClient(session={"access_token": "access-2", "refresh_token": "refresh-2"})

    assert refresh_session(client, ss) is True
    assert client.calls == [("refresh_session", ("refresh-1",))]
    assert ss["access_token"] == "access-2"
    assert ss["refresh_token"] == "refresh-2"


def test_refresh_session_failure_signs_out():
    ss = {}
    set_auth(SESSION, ss)

    assert refresh_session(FakeAuthClient(error=ApiError("invalid_grant", 400)), ss) is False
    assert not is_authenticated(ss)


def test_refresh_session_without_refresh_token():
    ss = {}
    client = FakeAuthClient(session=SESSION)

    assert refresh_session(client, ss) is False
    assert client.calls == []


def test_session_auth_view():
    ss = {}
    auth = SessionAuth(ss)
    assert not auth.is_authenticated()
    assert auth.access_token() is None
    assert auth.user_id() is None

    set_auth(SESSION, ss)
    assert auth.is_authenticated()
    assert auth.access_token() == "access-1"
    assert auth.user_id() == "user-1"
