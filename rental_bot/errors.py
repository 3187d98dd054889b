"""Error taxonomy shared by the dialogue engine and the record stores."""


class RentalBotError(Exception):
    """Base class for all errors raised by this package."""


class ValidationError(RentalBotError):
    """Free-text input did not match the shape the current step expects."""


class DateFormatError(ValidationError):
    """Date text does not match D.M.YYYY / DD.MM.YYYY."""


class CalendarDateError(ValidationError):
    """Date text is well-formed but names a day that does not exist."""


class IdentifierError(ValidationError):
    """Text is not a base-10 integer identifier."""


class AccessDenied(RentalBotError):
    """A non-privileged user attempted an operator-only command."""


class RepositoryError(RentalBotError):
    """Base class for record store failures."""


class NotFound(RepositoryError):
    """A referenced record does not exist."""


class ConstraintViolation(RepositoryError):
    """A uniqueness or referential-integrity rule rejected the write."""

    def __init__(self, message: str, constraint: str = "") -> None:
        super().__init__(message)
        self.constraint = constraint


class TransientRepositoryFailure(RepositoryError):
    """Any other persistence failure (connection loss, timeout, driver error)."""
