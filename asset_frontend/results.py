"""
asset_frontend/results.py

Result values returned by every asset store operation.

Callers branch on `result.ok` and render `result.error.message` inline or as a
toast; nothing the store does raises past this boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    not_authenticated = "not_authenticated"
    not_found = "not_found"
    remote_failure = "remote_failure"
    validation_failure = "validation_failure"


@dataclass(frozen=True)
class AccessError:
    kind: ErrorKind
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class Result(Generic[T]):
    data: Optional[T] = None
    error: Optional[AccessError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, data: Optional[T] = None) -> "Result[T]":
        return cls(data=data)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "Result[T]":
        return cls(error=AccessError(kind=kind, message=message))
