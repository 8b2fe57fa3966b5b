"""
asset_frontend/auth.py
Centralized authentication state for the asset inventory frontend.

Streamlit reruns the whole script on every interaction, so auth state lives in
st.session_state and every page goes through the helpers here:
- init_auth_state(): called at the top of main() so keys exist on every rerun
- set_auth(): writes all auth keys at once after sign-in or refresh
- clear_auth(): wipes auth state on sign-out or session expiry
- require_auth(): guards protected pages
- SessionAuth: what the asset store asks for the access token and user id

Functions accept an explicit state mapping so they can be exercised with a
plain dict; they default to st.session_state.
"""

from typing import Any, Dict, MutableMapping, Optional

import streamlit as st

from asset_frontend.api_client import ApiError, SupabaseClient
from asset_frontend.config import ENABLE_VERBOSE_LOGGING

AUTH_KEYS = ("access_token", "refresh_token", "current_user")


def _state(ss: Optional[MutableMapping[str, Any]]) -> MutableMapping[str, Any]:
    return st.session_state if ss is None else ss


def init_auth_state(ss: Optional[MutableMapping[str, Any]] = None) -> None:
    """
    Initialize authentication-related session state keys.

    Idempotent - safe to call on every rerun.
    """
    ss = _state(ss)

    ss.setdefault("access_token", None)
    ss.setdefault("refresh_token", None)
    ss.setdefault("current_user", None)
    ss.setdefault("is_authenticated", False)

    # Keep the flag in sync with actual token presence
    ss["is_authenticated"] = bool(ss["access_token"])


def set_auth(session: Dict[str, Any], ss: Optional[MutableMapping[str, Any]] = None) -> None:
    """
    Store a GoTrue session (sign-in or refresh response).

    Args:
        session: Dict with access_token, refresh_token and user
    """
    ss = _state(ss)

    ss["access_token"] = session.get("access_token")
    # Refresh tokens rotate; keep the old one if the response omitted it
    if session.get("refresh_token"):
        ss["refresh_token"] = session["refresh_token"]
    if session.get("user"):
        ss["current_user"] = session["user"]
    ss["is_authenticated"] = bool(ss["access_token"])


def clear_auth(ss: Optional[MutableMapping[str, Any]] = None) -> None:
    """Wipe all auth state. Safe to call when already signed out."""
    ss = _state(ss)
    for key in AUTH_KEYS:
        ss[key] = None
    ss["is_authenticated"] = False


def is_authenticated(ss: Optional[MutableMapping[str, Any]] = None) -> bool:
    ss = _state(ss)
    return bool(ss.get("is_authenticated") and ss.get("access_token"))


def get_current_user(ss: Optional[MutableMapping[str, Any]] = None) -> Optional[Dict[str, Any]]:
    return _state(ss).get("current_user")


def require_auth() -> bool:
    """
    Guard for protected pages.

    Returns:
        True if authenticated; otherwise shows a message and returns False
    """
    if is_authenticated():
        return True
    st.warning("🔒 Please sign in to continue.")
    return False


def sign_in(client: SupabaseClient, email: str, password: str,
            ss: Optional[MutableMapping[str, Any]] = None) -> Optional[str]:
    """Password sign-in. Returns an error message, or None on success."""
    try:
        session = client.sign_in(email.strip(), password)
    except ApiError as e:
        return e.message
    if not session or not session.get("access_token"):
        return "Sign-in response did not include a session"
    set_auth(session, ss)
    if ENABLE_VERBOSE_LOGGING:
        print("[AUTH] Sign-in successful")
    return None


def sign_out(client: SupabaseClient, ss: Optional[MutableMapping[str, Any]] = None) -> None:
    """Revoke the session remotely when possible, then clear local state."""
    try:
        client.sign_out()
    except ApiError as e:
        if ENABLE_VERBOSE_LOGGING:
            print(f"[AUTH] Remote sign-out failed: {e.message}")
    clear_auth(ss)


def refresh_session(client: SupabaseClient, ss: Optional[MutableMapping[str, Any]] = None) -> bool:
    """
    Exchange the stored refresh token for a new session.

    Used as the client's on_unauthorized hook. Clears auth state when the
    refresh fails so the next rerun lands on the sign-in page.
    """
    ss = _state(ss)
    refresh_token = ss.get("refresh_token")
    if not refresh_token:
        if ENABLE_VERBOSE_LOGGING:
            print("[AUTH] No refresh token available, session invalid")
        clear_auth(ss)
        return False

    try:
        session = client.refresh_session(refresh_token)
    except ApiError as e:
        if ENABLE_VERBOSE_LOGGING:
            print(f"[AUTH] Token refresh failed: HTTP {e.status_code}")
        clear_auth(ss)
        return False

    if not session or not session.get("access_token"):
        clear_auth(ss)
        return False

    set_auth(session, ss)
    if ENABLE_VERBOSE_LOGGING:
        print("[AUTH] Token refresh successful")
    return True


class SessionAuth:
    """Read-only view of the auth keys in a session state mapping."""

    def __init__(self, ss: Optional[MutableMapping[str, Any]] = None):
        self._ss = ss

    @property
    def state(self) -> MutableMapping[str, Any]:
        return _state(self._ss)

    def is_authenticated(self) -> bool:
        return is_authenticated(self.state)

    def access_token(self) -> Optional[str]:
        return self.state.get("access_token") if self.is_authenticated() else None

    def user_id(self) -> Optional[str]:
        user = get_current_user(self.state)
        if self.is_authenticated() and isinstance(user, dict):
            return user.get("id")
        return None
