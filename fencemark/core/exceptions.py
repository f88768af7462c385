"""
Custom Exceptions

Centralized exception definitions for better error handling.
FastAPI converts the HTTPException subclasses to responses; main.py
registers handlers that give them their final JSON shape.
"""
from fastapi import HTTPException, status


class ResourceNotFoundError(HTTPException):
    """
    Raised when a resource does not exist or belongs to another organization.

    SECURITY: The two cases are deliberately indistinguishable so callers
    cannot probe for other organizations' identifiers.
    """

    def __init__(self, resource: str = "Resource", resource_id: str = ""):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found: {resource_id}" if resource_id else f"{resource} not found"
        )


class AuthenticationError(HTTPException):
    """Raised when authentication fails."""

    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class TenantIsolationError(HTTPException):
    """
    Raised when a caller targets an organization they do not belong to.

    This is a CRITICAL security error and should be logged/alerted on.
    """

    def __init__(self, detail: str = "Access to this organization is not allowed"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail
        )


class PermissionDenied(HTTPException):
    """Raised when the caller's role is too low for the action."""

    def __init__(self, detail: str = "Permission denied"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail
        )


class InvalidInputError(HTTPException):
    """
    Raised when a request fails business validation.

    Rendered as 400 with an {"error": message} body.
    """

    def __init__(self, detail: str = "Invalid input"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail
        )


class SessionContextError(RuntimeError):
    """
    Raised when the organization id cannot be pushed into the database
    session. The connection must not be used for tenant queries.
    """
