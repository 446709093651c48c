"""
Shared error handling for the Posts Gateway.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Body of the generic error envelope."""

    message: str
    error: Dict[str, Any] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Standard error response format."""

    errors: ErrorDetail


class ErrorMessage(BaseModel):
    """Single-message error format used for client errors."""

    error: str


class GatewayException(Exception):
    """Base exception for Posts Gateway services."""

    status_code: int = 500

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self, include_details: bool = False) -> Dict[str, Any]:
        """Convert to a JSON-ready error payload.

        Error internals are only exposed outside production.
        """
        error: Dict[str, Any] = {}
        if include_details:
            error = {"code": self.code, "details": self.details}

        return ErrorResponse(errors=ErrorDetail(message=self.message, error=error)).model_dump()


class ClientError(GatewayException):
    """Errors caused by the request, rendered as a single message."""

    status_code = 400

    def to_response(self, include_details: bool = False) -> Dict[str, Any]:
        return ErrorMessage(error=self.message).model_dump()


class ValidationError(ClientError):
    """Validation-related errors."""

    status_code = 422

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)

    @classmethod
    def for_param(cls, param: str, message: str = "Invalid value") -> "ValidationError":
        return cls(f"{param}: {message}", {"param": param})


class NotFoundError(ClientError):
    """Requested data does not exist."""

    status_code = 404

    def __init__(self, message: str = "Not found", details: Optional[Dict[str, Any]] = None):
        super().__init__("NOT_FOUND", message, details)


class CommentsNotFoundError(NotFoundError):
    """The comment dataset was empty at query time."""

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__("Comments not found", details)


class UpstreamError(GatewayException):
    """Upstream fetch failed (transport, non-2xx status or malformed body)."""

    status_code = 502

    def __init__(self, service: str, message: str = "Upstream request failed", details: Optional[Dict[str, Any]] = None):
        self.service = service
        super().__init__("UPSTREAM_ERROR", f"{service}: {message}", details)
