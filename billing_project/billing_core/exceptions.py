from django.core.exceptions import ObjectDoesNotExist, ValidationError


class EntityNotFound(ObjectDoesNotExist):
    """Raised when an entity is absent or belongs to another user."""
    pass


class PolicyViolation(ValidationError):
    """Raised when an entity's state does not allow the requested action."""
    pass


class NumberConflict(Exception):
    """Raised when a quote, invoice or payment number is already taken."""

    def __init__(self, field, value):
        self.field = field
        self.value = value
        super().__init__(f"{field} '{value}' is already in use")


class AuthenticationFailed(Exception):
    """Raised when a bearer token or credentials cannot be verified."""
    pass


class RateLimited(Exception):
    """Raised when a client exceeds the allowed attempts for an endpoint."""
    pass
