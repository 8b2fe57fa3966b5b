# asset_frontend/test_api_client.py
# Unit tests for the Supabase client: headers, 401 refresh and error mapping

import json as jsonlib

import pytest
import requests

from asset_frontend import config
from asset_frontend.api_client import ApiAuthError, ApiError, SupabaseClient, is_public_endpoint

BASE_URL = "https://demo.supabase.co"


class FakeResponse:
    def __init__(self, status_code=200, body=None, raw=None):
        self.status_code = status_code
        if raw is not None:
            self.content = raw.encode()
        elif body is not None:
            self.content = jsonlib.dumps(body).encode()
        else:
            self.content = b""

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        return jsonlib.loads(self.content.decode())


class StubSession:
    """Replays queued responses (or raises queued exceptions) and records calls."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        outcome = self.responses.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def make_client(*responses, token="user-token", on_unauthorized=None):
    session = StubSession(*responses)
    client = SupabaseClient(
        base_url=BASE_URL + "/",
        anon_key="anon-key",
        token_provider=lambda: token,
        on_unauthorized=on_unauthorized,
        session=session,
        timeout=5,
    )
    return client, session


def test_public_endpoints():
    assert is_public_endpoint("/auth/v1/token")
    assert is_public_endpoint("/auth/v1/signup")
    assert is_public_endpoint("/auth/v1/recover")
    assert not is_public_endpoint("/auth/v1/user")
    assert not is_public_endpoint("/rest/v1/assets")


def test_select_sends_apikey_bearer_and_params():
    client, session = make_client(FakeResponse(200, [{"id": "a1"}]))

    rows = client.select("assets", params=[("select", "*"), ("id", "eq.a1")])

    assert rows == [{"id": "a1"}]
    call = session.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == f"{BASE_URL}/rest/v1/assets"
    assert call["params"] == [("select", "*"), ("id", "eq.a1")]
    assert call["timeout"] == 5
    assert call["headers"]["apikey"] == "anon-key"
    assert call["headers"]["Authorization"] == "Bearer user-token"
    assert "Prefer" not in call["headers"]


def test_writes_ask_for_representation():
    client, session = make_client(
        FakeResponse(201, [{"id": "a1"}]),
        FakeResponse(200, [{"id": "a1"}]),
        FakeResponse(200, []),
    )

    client.insert("assets", {"name": "Desk"})
    client.update("assets", {"name": "Chair"}, params={"id": "eq.a1"})
    assert client.delete("assets", params={"id": "eq.missing"}) == []

    assert [c["method"] for c in session.calls] == ["POST", "PATCH", "DELETE"]
    for call in session.calls:
        assert call["headers"]["Prefer"] == "return=representation"
    assert session.calls[0]["json"] == {"name": "Desk"}
    assert session.calls[0]["headers"]["Content-Type"] == "application/json"


def test_anonymous_requests_use_anon_key_as_bearer():
    client, session = make_client(FakeResponse(200, []), token=None)

    client.select("asset_categories")

    assert session.calls[0]["headers"]["Authorization"] == "Bearer anon-key"


def test_sign_in_never_sends_user_token():
    client, session = make_client(FakeResponse(200, {"access_token": "new"}), token="stale")

    client.sign_in("ops@example.co.za", "pw")

    call = session.calls[0]
    assert call["url"] == f"{BASE_URL}/auth/v1/token"
    assert call["params"] == {"grant_type": "password"}
    assert call["headers"]["Authorization"] == "Bearer anon-key"


def test_sign_up_sends_full_name_as_user_metadata():
    client, session = make_client(FakeResponse(200, {"id": "u1"}))

    client.sign_up("ops@example.co.za", "pw", full_name="Thandi M")

    assert session.calls[0]["json"] == {
        "email": "ops@example.co.za",
        "password": "pw",
        "data": {"full_name": "Thandi M"},
    }


def test_401_refreshes_once_and_retries():
    refreshes = []
    client, session = make_client(
        FakeResponse(401, {"message": "JWT expired"}),
        FakeResponse(200, [{"id": "a1"}]),
        on_unauthorized=lambda: refreshes.append(1) or True,
    )

    assert client.select("assets") == [{"id": "a1"}]
    assert len(refreshes) == 1
    assert len(session.calls) == 2


def test_401_after_retry_raises_auth_error():
    refreshes = []
    client, session = make_client(
        FakeResponse(401),
        FakeResponse(401),
        on_unauthorized=lambda: refreshes.append(1) or True,
    )

    with pytest.raises(ApiAuthError) as exc:
        client.select("assets")

    assert exc.value.status_code == 401
    assert len(refreshes) == 1
    assert len(session.calls) == 2


def test_401_when_refresh_fails_raises_without_retry():
    client, session = make_client(FakeResponse(401), on_unauthorized=lambda: False)

    with pytest.raises(ApiAuthError):
        client.select("assets")
    assert len(session.calls) == 1


def test_401_on_public_endpoint_is_a_plain_error():
    client, _ = make_client(
        FakeResponse(401, {"error_description": "Invalid login credentials"}),
        on_unauthorized=lambda: pytest.fail("should not refresh"),
    )

    with pytest.raises(ApiError) as exc:
        client.sign_in("ops@example.co.za", "wrong")

    assert not isinstance(exc.value, ApiAuthError)
    assert exc.value.message == "Invalid login credentials"


@pytest.mark.parametrize("body,expected", [
    ({"message": "duplicate key value violates unique constraint"}, "duplicate key value violates unique constraint"),
    ({"msg": "User already registered"}, "User already registered"),
    ({"error": "invalid_grant"}, "invalid_grant"),
    (None, "Request failed with status 500"),
])
def test_error_message_extraction(body, expected):
    client, _ = make_client(FakeResponse(500, body))

    with pytest.raises(ApiError) as exc:
        client.select("assets")

    assert exc.value.message == expected
    assert exc.value.status_code == 500


@pytest.mark.parametrize("error,fragment", [
    (requests.exceptions.Timeout(), "timed out after 5s"),
    (requests.exceptions.ConnectionError(), "Cannot connect to backend"),
    (requests.exceptions.TooManyRedirects(), "TooManyRedirects"),
])
def test_transport_errors_become_api_errors(error, fragment):
    client, _ = make_client(error)

    with pytest.raises(ApiError) as exc:
        client.select("assets")

    assert fragment in exc.value.message
    assert exc.value.status_code is None


def test_empty_body_returns_none_and_lists_default_empty():
    client, _ = make_client(FakeResponse(204), FakeResponse(204))

    assert client.request("POST", "/auth/v1/logout") is None
    assert client.select("assets") == []


def test_invalid_json_is_an_error():
    client, _ = make_client(FakeResponse(200, raw="<html>bad gateway</html>"))

    with pytest.raises(ApiError):
        client.select("assets")


def test_missing_configuration_becomes_api_error(monkeypatch):
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.setattr(config, "ENV", "production")
    client = SupabaseClient(anon_key="anon-key", session=StubSession())

    with pytest.raises(ApiError) as exc:
        client.select("assets")

    assert exc.value.message.startswith("Configuration error")


def test_local_env_falls_back_to_supabase_cli(monkeypatch):
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.setattr(config, "ENV", "local")

    assert config.get_supabase_url() == config.LOCAL_SUPABASE_URL


@pytest.mark.parametrize("url", ["http://demo.supabase.co", "https://localhost:54321"])
def test_production_rejects_insecure_urls(url):
    with pytest.raises(ValueError):
        config.validate_supabase_url(url, "production")


def test_local_accepts_http():
    config.validate_supabase_url("http://127.0.0.1:54321", "local")
