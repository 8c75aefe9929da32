class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidReference(DomainError):
    """Raised when an activity, location or member id does not resolve."""


class PermissionDenied(DomainError):
    """Raised when the caller lacks the capability for an action."""


class NoLocationConfigured(DomainError):
    """Raised when signing in/out needs a location and the activity has none."""


class CodeNotFound(DomainError):
    """Raised when a kiosk code matches zero or several members."""


class EmptyInput(DomainError):
    """Raised when a kiosk code is blank. Callers treat it as a no-op."""


class CannotDeleteLastLocation(DomainError):
    """Raised when deleting the only location of an activity."""
