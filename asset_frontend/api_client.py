"""
asset_frontend/api_client.py
Centralized client for every request to the hosted Supabase backend.

This module ensures:
1. All calls carry the project apikey and, when signed in, the user's Bearer token
2. Consistent error handling: transport and HTTP failures become ApiError
3. One automatic token refresh on 401, then a single retry
4. Tokens and keys are never printed or put into error messages
"""

from typing import Any, Callable, Dict, List, Literal, Optional, Sequence, Tuple, Union

import requests

from asset_frontend.config import (
    ENABLE_VERBOSE_LOGGING,
    REQUEST_TIMEOUT_SECONDS,
    get_supabase_anon_key,
    get_supabase_url,
)

__all__ = ["ApiError", "ApiAuthError", "SupabaseClient", "is_public_endpoint"]

Params = Union[Dict[str, Any], Sequence[Tuple[str, Any]], None]

REST_PREFIX = "/rest/v1"
AUTH_PREFIX = "/auth/v1"


class ApiError(Exception):
    """A request failed: timeout, connection error, or non-2xx response."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ApiAuthError(ApiError):
    """401 from the backend that a token refresh could not fix."""


def is_public_endpoint(path: str) -> bool:
    """
    Check if endpoint is public (doesn't need the user's Bearer token).

    Public endpoints:
    - /auth/v1/token (password sign-in and refresh grants)
    - /auth/v1/signup
    - /auth/v1/recover
    """
    public_paths = [f"{AUTH_PREFIX}/token", f"{AUTH_PREFIX}/signup", f"{AUTH_PREFIX}/recover"]
    return path in public_paths


def _error_message(resp: requests.Response) -> str:
    """Pull a readable message out of a PostgREST or GoTrue error body."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "msg", "error_description", "error"):
            if body.get(key):
                return str(body[key])
    return f"Request failed with status {resp.status_code}"


class SupabaseClient:
    """
    Thin wrapper over a requests.Session speaking PostgREST (/rest/v1) and
    GoTrue (/auth/v1).

    Args:
        base_url: Project URL; resolved from config on each call when omitted
        anon_key: Project anon key; read from config when omitted
        token_provider: Returns the current access token or None
        on_unauthorized: Called once on a 401; returns True when it refreshed the session
        session: requests.Session to use (tests pass a stub)
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        anon_key: Optional[str] = None,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        on_unauthorized: Optional[Callable[[], bool]] = None,
        session: Optional[requests.Session] = None,
        timeout: int = REQUEST_TIMEOUT_SECONDS,
    ):
        self._base_url = base_url.rstrip("/") if base_url else None
        self._anon_key = anon_key
        self._token_provider = token_provider
        self._on_unauthorized = on_unauthorized
        self._session = session or requests.Session()
        self.timeout = timeout

    @property
    def base_url(self) -> str:
        return self._base_url or get_supabase_url()

    @property
    def anon_key(self) -> str:
        return self._anon_key if self._anon_key is not None else get_supabase_anon_key()

    def _headers(self, path: str, prefer: Optional[str], has_body: bool) -> Dict[str, str]:
        headers = {"Accept": "application/json", "apikey": self.anon_key}
        if has_body:
            headers["Content-Type"] = "application/json"
        if prefer:
            headers["Prefer"] = prefer

        token = None
        if not is_public_endpoint(path) and self._token_provider is not None:
            token = self._token_provider()
        headers["Authorization"] = f"Bearer {token or self.anon_key}"
        return headers

    def request(
        self,
        method: Literal["GET", "POST", "PATCH", "DELETE"],
        path: str,
        params: Params = None,
        json: Any = None,
        prefer: Optional[str] = None,
        _retry: bool = True,
    ) -> Any:
        """
        Make a request and return the decoded JSON body (None when empty).

        Raises:
            ApiAuthError: 401 after the refresh attempt (or with nothing to refresh)
            ApiError: configuration, timeout, connection or HTTP errors
        """
        try:
            url = f"{self.base_url}{path}"
        except RuntimeError as e:
            raise ApiError(f"Configuration error: {e}") from e

        headers = self._headers(path, prefer, json is not None)

        try:
            resp = self._session.request(
                method, url, headers=headers, params=params, json=json, timeout=self.timeout
            )
        except requests.exceptions.Timeout as e:
            if ENABLE_VERBOSE_LOGGING:
                print(f"[API] Timeout on {method} {path}")
            raise ApiError(f"Request timed out after {self.timeout}s. Please try again.") from e
        except requests.exceptions.ConnectionError as e:
            if ENABLE_VERBOSE_LOGGING:
                print(f"[API] Connection error on {method} {path}")
            raise ApiError(f"Cannot connect to backend at {self.base_url}. Please check your connection.") from e
        except requests.exceptions.RequestException as e:
            if ENABLE_VERBOSE_LOGGING:
                print(f"[API] Unexpected error on {method} {path}: {type(e).__name__}")
            raise ApiError(f"Unexpected error: {type(e).__name__}") from e

        if resp.status_code == 401 and not is_public_endpoint(path):
            if _retry and self._on_unauthorized is not None:
                if ENABLE_VERBOSE_LOGGING:
                    print(f"[API] 401 on {path}, attempting token refresh...")
                if self._on_unauthorized():
                    return self.request(method, path, params=params, json=json, prefer=prefer, _retry=False)
            raise ApiAuthError("Your session has expired. Please log in again.", 401)

        if not resp.ok:
            message = _error_message(resp)
            if ENABLE_VERBOSE_LOGGING:
                print(f"[API] {resp.status_code} on {method} {path}: {message}")
            raise ApiError(message, resp.status_code)

        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise ApiError("Backend returned an invalid JSON response", resp.status_code) from e

    # ------------------------------------------------------------------
    # Tables (PostgREST)
    # ------------------------------------------------------------------

    def select(self, table: str, params: Params = None) -> List[Dict[str, Any]]:
        return self.request("GET", f"{REST_PREFIX}/{table}", params=params) or []

    def insert(self, table: str, row: Dict[str, Any], params: Params = None) -> List[Dict[str, Any]]:
        return self.request(
            "POST", f"{REST_PREFIX}/{table}", params=params, json=row, prefer="return=representation"
        ) or []

    def update(self, table: str, patch: Dict[str, Any], params: Params = None) -> List[Dict[str, Any]]:
        return self.request(
            "PATCH", f"{REST_PREFIX}/{table}", params=params, json=patch, prefer="return=representation"
        ) or []

    def delete(self, table: str, params: Params = None) -> List[Dict[str, Any]]:
        return self.request(
            "DELETE", f"{REST_PREFIX}/{table}", params=params, prefer="return=representation"
        ) or []

    # ------------------------------------------------------------------
    # Auth (GoTrue)
    # ------------------------------------------------------------------

    def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        """Password grant. Returns access_token, refresh_token and user."""
        return self.request(
            "POST",
            f"{AUTH_PREFIX}/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )

    def sign_up(self, email: str, password: str, full_name: Optional[str] = None) -> Dict[str, Any]:
        body: Dict[str, Any] = {"email": email, "password": password}
        if full_name:
            body["data"] = {"full_name": full_name}
        return self.request("POST", f"{AUTH_PREFIX}/signup", json=body)

    def recover_password(self, email: str) -> None:
        self.request("POST", f"{AUTH_PREFIX}/recover", json={"email": email})

    def refresh_session(self, refresh_token: str) -> Dict[str, Any]:
        return self.request(
            "POST",
            f"{AUTH_PREFIX}/token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": refresh_token},
        )

    def get_user(self) -> Dict[str, Any]:
        return self.request("GET", f"{AUTH_PREFIX}/user", _retry=False)

    def sign_out(self) -> None:
        self.request("POST", f"{AUTH_PREFIX}/logout", _retry=False)
