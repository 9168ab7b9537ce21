"""Errors raised by the PIN generator."""
from typing import Any, Dict, Optional


class PinGeneratorError(Exception):
    """Base class for PIN generator errors."""


class StoreError(PinGeneratorError):
    """A store round-trip failed.

    Mirrors the error body returned by PostgREST so the message can be shown
    to the user unchanged.
    """

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        hint: Optional[str] = None,
        code: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or ""
        self.hint = hint or ""
        self.code = code or ""

    @classmethod
    def from_response(cls, body: Any, status: int) -> "StoreError":
        """Build an error from a PostgREST error body (or whatever came back)."""
        if isinstance(body, dict) and body.get("message"):
            return cls(
                message=str(body["message"]),
                details=body.get("details"),
                hint=body.get("hint"),
                code=body.get("code"),
            )
        text = str(body)[:200] if body else ""
        return cls(message=f"Store request failed with HTTP {status}", details=text, code=str(status))

    def to_dict(self) -> Dict[str, str]:
        return {
            "message": self.message,
            "details": self.details,
            "hint": self.hint,
            "code": self.code,
        }


class CapacityExceeded(PinGeneratorError):
    """More PINs were requested than the allowed pool can ever supply."""

    def __init__(self, requested: int, available: int, message: Optional[str] = None):
        self.requested = requested
        self.available = available
        super().__init__(
            message or f"Requested {requested} PINs but only {available} PINs are allowed"
        )


class InvalidPinRequest(PinGeneratorError, ValueError):
    """The requested quantity is not a positive integer."""


class SetupIncomplete(PinGeneratorError, RuntimeError):
    """PINs were requested before the store was set up."""
