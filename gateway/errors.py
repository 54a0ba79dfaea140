"""
Error taxonomy for the gateway and its JSON envelope.
"""

from __future__ import annotations

from typing import Optional


class GatewayError(Exception):
    """Base error mapped to an HTTP status and a JSON envelope."""

    status_code = 500
    error = "Internal server error"
    default_message = "Something went wrong"

    def __init__(self, message: Optional[str] = None, *, details: Optional[str] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def as_dict(self) -> dict:
        payload = {"error": self.error, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class AuthenticationMissing(GatewayError):
    status_code = 401
    error = "Unauthorized"
    default_message = "No token provided"


class AuthenticationRejected(GatewayError):
    status_code = 403
    error = "Forbidden"
    default_message = "Invalid or expired token"


class StorageError(GatewayError):
    """Any failure reported by the database or storage client."""

    status_code = 500
    error = "Internal server error"
    default_message = "Storage request failed"


class BadRequest(GatewayError):
    status_code = 400
    error = "Bad request"
    default_message = "Malformed request"


class NotFound(GatewayError):
    status_code = 404
    error = "Not found"
    default_message = "Resource not found"
