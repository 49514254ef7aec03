"""
FoodHub Admin - Custom Exceptions
==================================
Business-level exceptions that can be caught and converted to HTTP responses.
"""

from fastapi import status


class FoodHubError(Exception):
    """Base exception for all business logic errors."""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "An unexpected error occurred."):
        self.message = message
        super().__init__(self.message)


class ValidationError(FoodHubError):
    """Raised for malformed input to a registry or order mutation."""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class NotFoundError(FoodHubError):
    """Raised when a requested resource doesn't exist."""
    status_code = status.HTTP_404_NOT_FOUND


class ImmutableRoleError(FoodHubError):
    """Raised when someone tries to edit the super admin role."""
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, role_id: str = "admin"):
        super().__init__(f"Role '{role_id}' cannot be edited.")


class SystemRoleProtectedError(FoodHubError):
    """Raised when someone tries to delete a system role."""
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, role_id: str):
        super().__init__(f"Role '{role_id}' is a system role and cannot be deleted.")


class UnauthorizedActionError(FoodHubError):
    """Raised when the principal lacks the capability an action requires."""
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, capability: str, authenticated: bool = True):
        self.capability = capability
        self.authenticated = authenticated
        super().__init__(f"Missing permission: {capability}")


class ExternalServiceError(FoodHubError):
    """Raised when the order persistence service fails or times out."""
    status_code = status.HTTP_502_BAD_GATEWAY
