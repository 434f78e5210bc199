# Error taxonomy shared by services and routers.
# Every error carries a user-facing message and the HTTP status it maps to;
# the handlers in instalike.main render them as {"detail": message}.

from typing import Optional

from fastapi import status


class AppError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or missing input"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class AuthError(AppError):
    """Missing or rejected credentials"""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"


class InvalidTokenError(AuthError):
    """A bearer token was supplied but could not be verified"""
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Invalid token"


class PermissionDeniedError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not enough permissions"


class ConflictError(AppError):
    """Uniqueness violation"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Resource already exists"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class StoreError(AppError):
    """Persistence failure; the detail stays in the server log"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Database error"
