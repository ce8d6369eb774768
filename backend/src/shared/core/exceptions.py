"""
Exceptions

Every error a handler can surface to a client is an AnchorException. Each
subclass pins its HTTP status and machine-readable code as class
attributes, so raising one needs only a message (or nothing at all).

Hierarchy:
==========
    AnchorException                     500  INTERNAL_ERROR
       ├── AuthenticationError          401  AUTHENTICATION_ERROR
       ├── AuthorizationError           403  AUTHORIZATION_ERROR
       ├── NotFoundError                404  NOT_FOUND
       │      ├── AnchorNotFoundError         missing, deleted or not visible
       │      └── FollowNotFoundError         viewer does not follow the anchor
       ├── ValidationError              400  VALIDATION_ERROR (code overridable)
       │      ├── InvalidQueryError     400  INVALID_QUERY
       │      └── InvalidCursorError    400  INVALID_CURSOR
       └── ServiceUnavailableError      503  SERVICE_UNAVAILABLE

Wire Format:
============
    raise InvalidCursorError("Cursor was issued for a different feed",
                             details={"expected": "recent", "received": "popular"})

    → 400 {"error": {"code": "INVALID_CURSOR",
                     "message": "Cursor was issued for a different feed",
                     "details": {"expected": "recent", "received": "popular"}}}
"""

from typing import Any, ClassVar, Mapping, Optional, Sequence


# Request-part prefixes FastAPI puts at the front of an error location
_LOCATION_PREFIXES = ("query", "path", "body", "header")


class AnchorException(Exception):
    """Base class; the error handler renders it with ``to_dict()``."""

    status_code: ClassVar[int] = 500
    default_code: ClassVar[str] = "INTERNAL_ERROR"
    default_message: ClassVar[str] = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[dict[str, Any]] = None,
        error_code: Optional[str] = None,
    ) -> None:
        self.message = message or self.default_message
        self.error_code = error_code or self.default_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
            }
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.error_code}: {self.message!r})"


# ═══════════════════════════════════════════════════════════════════════════════
# AUTH (401, 403)
# ═══════════════════════════════════════════════════════════════════════════════


class AuthenticationError(AnchorException):
    """
    Missing header on a protected route, or a bearer token that is
    expired, malformed or carries no usable user id.

    A bad token is rejected even on routes that allow anonymous access.
    """

    status_code = 401
    default_code = "AUTHENTICATION_ERROR"
    default_message = "Authentication failed"


class AuthorizationError(AnchorException):
    """Authenticated, but not allowed (following a private anchor)."""

    status_code = 403
    default_code = "AUTHORIZATION_ERROR"
    default_message = "Access denied"


# ═══════════════════════════════════════════════════════════════════════════════
# NOT FOUND (404)
# ═══════════════════════════════════════════════════════════════════════════════


class NotFoundError(AnchorException):
    status_code = 404
    default_code = "NOT_FOUND"
    default_message = "Resource not found"
    resource: ClassVar[str] = "Resource"

    def __init__(self, resource_id: Optional[str] = None, **kwargs: Any) -> None:
        message = f"{self.resource} '{resource_id}' not found" if resource_id else None
        super().__init__(message, **kwargs)


class AnchorNotFoundError(NotFoundError):
    """
    Raised for deleted anchors and for private anchors read by anyone but
    the owner, so their existence is not revealed.
    """

    resource = "Anchor"


class FollowNotFoundError(NotFoundError):
    resource = "Follow for anchor"


# ═══════════════════════════════════════════════════════════════════════════════
# VALIDATION (400)
# ═══════════════════════════════════════════════════════════════════════════════


class ValidationError(AnchorException):
    """Rejected input; business rules pass their own ``error_code``."""

    status_code = 400
    default_code = "VALIDATION_ERROR"
    default_message = "Validation failed"


class InvalidQueryError(ValidationError):
    """limit outside 1..50, unknown category, tag too short or too long."""

    default_code = "INVALID_QUERY"
    default_message = "Invalid query parameters"

    @classmethod
    def from_errors(
        cls,
        errors: Sequence[Mapping[str, Any]],
        message: Optional[str] = None,
    ) -> "InvalidQueryError":
        """
        Build from pydantic-style error dicts.

        Only field names and messages are kept; raw input values are
        not echoed back to the client.
        """
        return cls(
            message,
            details={
                "errors": [
                    {
                        "field": ".".join(
                            str(part) for part in error.get("loc", ()) if part not in _LOCATION_PREFIXES
                        ),
                        "message": error.get("msg", "Invalid value"),
                    }
                    for error in errors
                ]
            },
        )


class InvalidCursorError(ValidationError):
    """Token is not base64 JSON, lacks a sort field, or belongs to another feed."""

    default_code = "INVALID_CURSOR"
    default_message = "Invalid pagination cursor"


# ═══════════════════════════════════════════════════════════════════════════════
# UNAVAILABLE (503)
# ═══════════════════════════════════════════════════════════════════════════════


class ServiceUnavailableError(AnchorException):
    """The background task runner is not running."""

    status_code = 503
    default_code = "SERVICE_UNAVAILABLE"
    default_message = "Service temporarily unavailable"
