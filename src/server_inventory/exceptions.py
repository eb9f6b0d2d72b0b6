"""
Client-side error types.
"""


class InventoryError(Exception):
    """
    Base class for everything this package raises on purpose.
    """


class ApiError(InventoryError):
    """
    The API answered with a non-2xx status, or could not be reached at all (status is None).
    """

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.message = message
        self.status = status

    def __str__(self):
        if self.status is None:
            return self.message
        return f"{self.message} (HTTP {self.status})"


class AuthenticationError(ApiError):
    """
    Bad credentials, or the API rejected our bearer token.
    """


class NotAuthenticatedError(InventoryError):
    """
    A protected operation was attempted with no local session.
    """


class RecordValidationError(InventoryError):
    """
    Field validation failed before anything was sent.
    """

    def __init__(self, errors: list[str]):
        super().__init__("; ".join(errors))
        self.errors = errors


class EditSurfaceStateError(InventoryError):
    """
    An edit surface call was made in a state that does not allow it.
    """
