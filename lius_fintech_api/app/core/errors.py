"""
Error taxonomy shared by the services and the HTTP layer.

Services raise these exceptions; ``main.create_app`` registers
handlers that turn each of them into the JSON envelope
``{"success": false, "message": ...}`` with the matching status code.
"""

from fastapi import status


class FintechError(Exception):
    """Base class for all domain errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(FintechError):
    """Bad input shape or range."""

    status_code = status.HTTP_400_BAD_REQUEST


class AuthError(FintechError):
    """Credentials (password or PIN) did not verify."""

    status_code = status.HTTP_401_UNAUTHORIZED


class NotFoundError(FintechError):
    """Unknown user id or username."""

    status_code = status.HTTP_404_NOT_FOUND


class StorageError(FintechError):
    """A collection file could not be written."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
