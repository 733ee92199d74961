"""
Classified error types for the chat service.

Every failure that leaves a service call is one of these, so the HTTP layer
only has to map ``status_code`` onto the response.
"""
from typing import Any, Dict, Optional


class ChatError(Exception):
    """Base class for all classified service errors."""

    status_code: int = 500
    default_message: str = "internal error"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


# Client input errors - never retried

class ValidationError(ChatError):
    status_code = 400
    default_message = "invalid request"


class ContentValidationError(ValidationError):
    default_message = "invalid message content"


class UnsupportedContentType(ValidationError):
    def __init__(self, content_type: Any):
        super().__init__(
            f"Unrecognized message type: {content_type}",
            details={"type": content_type},
        )
        self.content_type = content_type


class UnknownVideoSource(ValidationError):
    def __init__(self, source: Any):
        super().__init__(
            f"Unrecognized video source: {source}",
            details={"source": source},
        )
        self.source = source


# Credential errors - never retried

class AuthError(ChatError):
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(AuthError):
    status_code = 403
    default_message = "Forbidden"


class Unauthorized(AuthError):
    pass


class InvalidCredentials(AuthError):
    default_message = "Failed to login"


class ConflictError(ChatError):
    status_code = 409
    default_message = "conflict"


class UsernameTaken(ConflictError):
    def __init__(self, username: str):
        super().__init__(f"Username already exists: {username}")
        self.username = username


# Store errors - reads may be retried, writes are not

class StoreError(ChatError):
    status_code = 500
    default_message = "store error"


class TransactionFailed(StoreError):
    default_message = "transaction failed"
