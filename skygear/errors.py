"""
Skygear SDK 异常定义

Synchronous precondition failures (configuration, auth gating, request
validation) are raised directly. Transport outcomes are never raised from
``send_request``; they reach the caller as ``RequestFailed`` through the
response handler.
"""
from typing import Any


class SkygearError(Exception):
    """Base error carrying a stable code, mirroring ``ErrorDetail``."""

    code: str = "SkygearError"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class InvalidConfiguration(SkygearError):
    """Raised by ``Container.configure`` and ``Configuration`` validation."""

    code = "InvalidConfiguration"


class AuthenticationRequired(SkygearError):
    """Raised when a resource needs a logged-in user and there is none."""

    code = "AuthenticationRequired"


class InvalidRequest(SkygearError):
    """A request failed its own validation before it was handed to the transport."""

    code = "InvalidRequest"


class RequestFailed(SkygearError):
    """Asynchronous failure delivered to a response handler."""

    code = "RequestFailed"

    def __init__(
        self,
        message: str,
        error_code: int | str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.error_code = error_code
        self.status_code = status_code

    @classmethod
    def from_payload(cls, payload: dict[str, Any], status_code: int | None = None) -> "RequestFailed":
        """Build from a server ``{"error": {...}}`` body."""
        error = payload.get("error") or {}
        if not isinstance(error, dict):
            return cls(str(error), status_code=status_code)

        return cls(
            error.get("message") or "Unknown server error",
            error_code=error.get("code"),
            status_code=status_code,
            details=error.get("info"),
        )

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["error_code"] = self.error_code
        data["status_code"] = self.status_code
        return data
