class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class ConfigurationError(Exception):
    """Raised when persisted configuration cannot be read back."""


class DuplicateMealError(Exception):
    """Raised by storage when a (user, meal type, date) record already exists."""
