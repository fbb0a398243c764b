"""Custom exceptions for the studio quotation core."""


class StudioQuotesException(Exception):
    """Base exception for the quotation core."""

    pass


class ValidationError(StudioQuotesException):
    """Raised when input validation fails. No mutation is attempted."""

    pass


class NotFoundError(StudioQuotesException):
    """Raised when a resource is not found."""

    pass


class ConflictError(StudioQuotesException):
    """Raised when the requested change conflicts with the current state."""

    pass


class TransactionError(StudioQuotesException):
    """Raised when a transactional unit of work fails and was rolled back."""

    pass


class TransientCollaboratorError(StudioQuotesException):
    """Raised when an external collaborator (calendar, notifications, contracts) fails."""

    pass


class ConfigurationError(StudioQuotesException):
    """Raised when configuration is invalid."""

    pass
