"""Custom exceptions for Rave."""

from __future__ import annotations

from collections.abc import Iterable


class RaveError(Exception):
    """Base exception for all Rave errors."""

    pass


class InvalidOptionError(RaveError, ValueError):
    """Raised when an entity is constructed with a value outside its allowed set."""

    def __init__(self, option: str, value: object, allowed: Iterable[str]) -> None:
        self.option = option
        self.value = value
        self.allowed = list(allowed)
        super().__init__(
            f"Bad {option} {value!r}. Should be one of {', '.join(self.allowed)}"
        )


class StructureError(RaveError):
    """Raised when an internal transition would break the blip tree."""

    pass


class EventParseError(RaveError):
    """Raised when an inbound event bundle cannot be understood."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid event data at {path}: {reason}")


class RobotLoadError(RaveError):
    """Raised when a robot cannot be imported from its dotted path."""

    pass


class TransportError(RaveError):
    """Base exception for transport-related errors."""

    pass


class AuthenticationError(TransportError):
    """Raised when the remote endpoint rejects our credentials (401/403)."""

    pass


class APIError(TransportError):
    """Raised for other non-success responses."""

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        super().__init__(f"API error {status_code}: {message}")
