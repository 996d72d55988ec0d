from dataclasses import dataclass


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def as_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


class QuickFixError(Exception):
    """Base for errors that the HTTP layer turns into an envelope response."""

    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationError(QuickFixError):
    status_code = 400
    message = "Validation failed"

    def __init__(self, errors: list[FieldError], message: str | None = None):
        super().__init__(message)
        self.errors = list(errors)

    def fields(self) -> set[str]:
        return {e.field for e in self.errors}


class AuthenticationError(QuickFixError):
    """Bad login credentials. `reason` is for logs only."""

    status_code = 401
    message = "Invalid credentials."

    def __init__(self, message: str | None = None, reason: str = "", hint: str | None = None):
        super().__init__(message)
        self.reason = reason
        self.hint = hint


class AuthorizationError(QuickFixError):
    status_code = 401
    message = "Access denied. Invalid token."


class NotFoundError(QuickFixError):
    status_code = 404
    message = "Not found"


class PersistenceError(QuickFixError):
    status_code = 500
    message = "Database operation failed"


class NotificationError(QuickFixError):
    """Raised by notification sinks; logged and never returned to a caller."""

    message = "Notification delivery failed"
