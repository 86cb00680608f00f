"""Domain exceptions for the AdAlert settings service.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class AdAlertException(Exception):
    """Base exception for all AdAlert application errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON body used by the API exception handler."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(AdAlertException):
    """Raised when input validation fails (e.g. unknown field or negative count)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthenticationException(AdAlertException):
    """Raised when authentication fails (e.g. missing or invalid ID token)."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(AdAlertException):
    """Raised when the acting user lacks the role required for the operation."""

    def __init__(
        self,
        resource: str | None = None,
        action: str | None = None,
        message: str | None = None,
    ) -> None:
        """Initialize with optional resource, action, and message.

        Args:
            resource: Optional resource type (e.g. 'user', 'company').
            action: Optional action that was attempted (e.g. 'update', 'delete').
            message: Human-readable message; built from resource/action when omitted.
        """
        if message is None:
            message = (
                f"Permission denied: {action} on {resource}"
                if resource and action
                else "Permission denied"
            )
        details: dict[str, Any] = {}
        if resource:
            details["resource"] = resource
        if action:
            details["action"] = action
        super().__init__(message, "PERMISSION_DENIED", details)


class ResourceNotFoundException(AdAlertException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'user', 'ads_account').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class DuplicateEmailException(AdAlertException):
    """Raised when inviting an email that already belongs to a user."""

    def __init__(self, email: str) -> None:
        super().__init__(
            "A user with this email already exists",
            "DUPLICATE_EMAIL",
            {"email": email},
        )


class PaymentException(AdAlertException):
    """Raised when the payment provider rejects a billing step.

    The message is safe to show to the user (e.g. the card decline reason).
    """

    def __init__(self, message: str, step: str | None = None) -> None:
        details = {"step": step} if step else {}
        super().__init__(message, "PAYMENT_FAILED", details)
