# asset_frontend/dev_observability.py
# DEV-only event timeline and state snapshots for the debug panel

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from asset_frontend.results import Result

MAX_EVENTS = 100

# Any key containing one of these is fully redacted
SENSITIVE_KEYS = {
    "access_token",
    "refresh_token",
    "password",
    "apikey",
    "anon_key",
    "token",
    "secret",
}


def redact_value(key: str, value: Any) -> Any:
    """
    - Sensitive key: "[REDACTED]"
    - Key naming an id: last 4 chars only (e.g. "…a9f2")
    - Otherwise: value unchanged
    """
    key_lower = key.lower()

    if any(sensitive in key_lower for sensitive in SENSITIVE_KEYS):
        return "[REDACTED]"

    if key_lower.endswith("id") and isinstance(value, str) and len(value) > 4:
        return f"…{value[-4:]}"

    return value


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def track_event(session_state: dict, event_name: str, details: Optional[Dict[str, Any]] = None) -> None:
    """Append a redacted event to the session timeline (last 100 kept)."""
    events = session_state.setdefault("_dev_events", [])

    event: Dict[str, Any] = {"ts": now_iso(), "name": event_name}
    if details:
        event["details"] = {k: redact_value(k, v) for k, v in details.items()}
    events.append(event)

    if len(events) > MAX_EVENTS:
        session_state["_dev_events"] = events[-MAX_EVENTS:]


def track_result(session_state: dict, operation: str, result: Result, **details: Any) -> None:
    """Record the outcome of an asset store call."""
    payload = dict(details)
    payload["ok"] = result.ok
    if not result.ok:
        payload["error_kind"] = result.error.kind.value
        payload["error"] = result.error.message
    track_event(session_state, f"assets.{operation}", payload)


def get_recent_events(session_state: dict, limit: int = 30) -> List[Dict[str, Any]]:
    """Most recent events first."""
    events = session_state.get("_dev_events", [])
    return list(reversed(events[-limit:]))


def snapshot_state(session_state: dict, keys_of_interest: List[str]) -> Dict[str, Any]:
    snapshot = {}
    for key in keys_of_interest:
        if key in session_state:
            snapshot[key] = {"exists": True, "value": redact_value(key, session_state[key])}
        else:
            snapshot[key] = {"exists": False}
    return snapshot


def clear_debug_history(session_state: dict) -> None:
    session_state["_dev_events"] = []


def export_snapshot_json(session_state: dict, keys_of_interest: List[str]) -> str:
    export = {
        "timestamp": now_iso(),
        "state": snapshot_state(session_state, keys_of_interest),
        "recent_events": get_recent_events(session_state, limit=50),
    }
    return json.dumps(export, indent=2, default=str)
