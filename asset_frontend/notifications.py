"""
asset_frontend/notifications.py

Per-session toast queue.

Each toast expires `duration` milliseconds after it was added; a duration of 0
keeps it until removed. Expired toasts are pruned whenever the queue is read,
so a rerun after the deadline no longer shows them. The clock is injectable
(milliseconds) so expiry can be driven with simulated time.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional


class ToastKind(str, Enum):
    success = "success"
    error = "error"
    warning = "warning"
    info = "info"


DEFAULT_DURATION_MS = 5000
DEFAULT_DURATIONS_MS = {
    ToastKind.success: DEFAULT_DURATION_MS,
    ToastKind.error: 7000,
    ToastKind.warning: 6000,
    ToastKind.info: DEFAULT_DURATION_MS,
}


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


@dataclass(frozen=True)
class Toast:
    id: str
    kind: ToastKind
    title: str
    message: Optional[str]
    duration: int
    created_at: float

    def expired(self, now: float) -> bool:
        return self.duration > 0 and now - self.created_at >= self.duration


class NotificationQueue:
    def __init__(self, clock: Callable[[], float] = _monotonic_ms):
        self._clock = clock
        self._toasts: List[Toast] = []

    def add(self, kind: ToastKind, title: str, message: Optional[str] = None,
            duration: Optional[int] = None) -> str:
        """Enqueue a toast and return its id."""
        kind = ToastKind(kind)
        if duration is None:
            duration = DEFAULT_DURATIONS_MS[kind]
        if duration < 0:
            raise ValueError("duration must be >= 0")

        toast = Toast(
            id=uuid.uuid4().hex[:9],
            kind=kind,
            title=title,
            message=message,
            duration=duration,
            created_at=self._clock(),
        )
        self._toasts.append(toast)
        return toast.id

    def success(self, title: str, message: Optional[str] = None, duration: Optional[int] = None) -> str:
        return self.add(ToastKind.success, title, message, duration)

    def error(self, title: str, message: Optional[str] = None, duration: Optional[int] = None) -> str:
        return self.add(ToastKind.error, title, message, duration)

    def warning(self, title: str, message: Optional[str] = None, duration: Optional[int] = None) -> str:
        return self.add(ToastKind.warning, title, message, duration)

    def info(self, title: str, message: Optional[str] = None, duration: Optional[int] = None) -> str:
        return self.add(ToastKind.info, title, message, duration)

    def remove(self, toast_id: str) -> None:
        self._toasts = [t for t in self._toasts if t.id != toast_id]

    def clear(self) -> None:
        self._toasts = []

    def active(self) -> List[Toast]:
        """Toasts still visible, oldest first. Prunes expired ones."""
        now = self._clock()
        self._toasts = [t for t in self._toasts if not t.expired(now)]
        return list(self._toasts)

    def __len__(self) -> int:
        return len(self.active())
