"""Domain exceptions for the taskflow service.

Defines domain-level exceptions that represent failures the core cannot
express as a typed rejection (missing resources, bad input, storage outages).
Presentation layer maps them to HTTP responses in exception handlers.

Expected business outcomes of a status change (illegal edge, forbidden role,
no-op) are not exceptions: the core returns a Rejection value for those, and
only the HTTP boundary wraps it in RejectionException.
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from app.domain.value_objects.results import Rejection


class TaskflowException(Exception):
    """Base exception for all taskflow application errors.

    All custom exceptions inherit from this class to allow consistent
    error handling and logging. Presentation layer maps these to HTTP
    responses using message, error_code, and details.

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
        """Response body shape used by the exception handlers."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(TaskflowException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthenticationException(TaskflowException):
    """Raised when the bearer token is missing, malformed or expired."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(TaskflowException):
    """Raised when the caller's role may not perform the operation."""

    def __init__(
        self,
        resource: str | None = None,
        action: str | None = None,
        message: str = "Permission denied",
    ) -> None:
        """Initialize with optional resource, action, and message.

        Args:
            resource: Optional resource type (e.g. 'workflow').
            action: Optional action that was attempted (e.g. 'create').
            message: Human-readable message; default used when resource/action omitted.
        """
        if resource and action:
            message = f"Permission denied: {action} on {resource}"
        details: dict[str, Any] = {}
        if resource:
            details["resource"] = resource
        if action:
            details["action"] = action
        super().__init__(message, "PERMISSION_DENIED", details)


class ResourceNotFoundException(TaskflowException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'task', 'workflow').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class ConcurrentModificationException(TaskflowException):
    """Raised by storage when a row lock times out or a version check fails.

    The orchestrator converts it to a CONCURRENT_MODIFICATION rejection;
    other use cases let it reach the HTTP layer (409).
    """

    def __init__(self, resource_id: str, reason: str = "lock timeout") -> None:
        super().__init__(
            f"{resource_id} was modified concurrently ({reason}); retry.",
            "CONCURRENT_MODIFICATION",
            {"resource_id": resource_id, "reason": reason},
        )


class StorageException(TaskflowException):
    """Raised when the backing store fails; nothing was committed and the caller may retry."""

    def __init__(self, message: str = "Storage unavailable; retry later.") -> None:
        super().__init__(message, "STORAGE_ERROR")


class OrphanedStatusException(TaskflowException):
    """Raised when replacing a workflow would strand tasks in undeclared statuses."""

    def __init__(self, workflow_id: str, orphaned: list[str]) -> None:
        """Initialize with the workflow and the statuses that lack a remap.

        Args:
            workflow_id: Definition being replaced.
            orphaned: Status ids still held by tasks but absent from the new graph.
        """
        super().__init__(
            "Replacement drops statuses still used by tasks; supply status_remap for: "
            + ", ".join(orphaned),
            "UNKNOWN_STATUS",
            {"workflow_id": workflow_id, "orphaned_statuses": orphaned},
        )


class RejectionException(TaskflowException):
    """Carries a core Rejection across the HTTP boundary.

    Raised only by endpoints; application code returns the Rejection value.
    """

    def __init__(self, rejection: "Rejection") -> None:
        self.rejection = rejection
        super().__init__(
            rejection.message,
            rejection.code.value,
            dict(rejection.details),
        )
