"""Domain errors for the deck service.

Each error carries a stable ``code`` (the localisation key shown to the user)
and the HTTP status the API answers with.
"""

from typing import Optional


class DeckError(Exception):
    """Base error raised by deck operations."""

    status_code = 400
    code = "somethingWentWrong"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
    ):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code
        super().__init__(self.message)


class NotAuthenticated(DeckError):
    status_code = 401
    code = "loginRequired"


class InvalidCredentials(DeckError):
    status_code = 401
    code = "invalidCredentials"


class EmailExists(DeckError):
    status_code = 409
    code = "emailExists"


class PhoneExists(DeckError):
    status_code = 409
    code = "phoneExists"


class IncorrectCurrentPassword(DeckError):
    status_code = 400
    code = "incorrectCurrentPassword"


class UserNotFound(DeckError):
    status_code = 404
    code = "userNotFound"


class PermissionDenied(DeckError):
    status_code = 403
    code = "permissionDenied"


class EntityNotFound(DeckError):
    status_code = 404
    code = "notFound"


class InvalidProduct(DeckError):
    status_code = 422
    code = "invalidProduct"


class InvalidOperation(DeckError):
    status_code = 400
    code = "invalidOperation"


class ExternalServiceError(DeckError):
    """Failure reported by an AI or media collaborator."""

    status_code = 502
    code = "somethingWentWrong"

    def __init__(self, message: str, response_data: Optional[dict] = None):
        super().__init__(message)
        self.response_data = response_data or {}
