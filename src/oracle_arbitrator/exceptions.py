"""Arbitration gateway exception hierarchy."""

from __future__ import annotations

from typing import Any


class GatewayException(Exception):
    """Base exception for all arbitration gateway errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class Unauthorized(GatewayException):
    """Caller is not the current operator."""

    pass


class FeeNotConfigured(GatewayException):
    """Effective fee for the question is zero, so arbitration is refused."""

    pass


class InsufficientPayment(GatewayException):
    """Attached payment is below the effective fee."""

    pass


class OracleCallFailed(GatewayException):
    """The oracle rejected an outward call."""

    pass


class TransferFailed(GatewayException):
    """A funds transfer was refused by its destination."""

    pass


class InvalidAmountError(GatewayException, ValueError):
    """Amount is negative or not an integer."""

    pass


class InvalidIdentityError(GatewayException, ValueError):
    """Identity is empty or not a string."""

    pass
