from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials or bearer tokens are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class UserNotFound(DomainError):
    """Raised by operations keyed by user_id when the user does not exist."""

    def __init__(self, user_id: int):
        super().__init__(f"User {user_id} not found")
        self.user_id = user_id


class ConcurrentUpdateError(DomainError):
    """Raised when a conditional attendance write lost a race with another request."""


class ScannerError(Exception):
    """Base exception for the fingerprint device interop layer.

    Never propagated past ScannerService / TemplateMatcher.
    """

    def __init__(self, message: str, *, code: Optional[int] = None):
        super().__init__(message)
        self.code = code


class SdkUnavailable(ScannerError):
    """Native ZKFinger library could not be loaded."""


class DeviceBusy(ScannerError):
    """Device handle is held elsewhere or the device reported busy."""


class NoDevice(ScannerError):
    """No scanner connected, or SDK not initialised."""


class CaptureFailed(ScannerError):
    """Capture, merge or match call returned a native error."""
