"""
Centralized exception hierarchy for domain-specific errors.

Route computation failures fall into a small taxonomy (validation, no route,
provider/internal) so the API layer can map each one to a user-facing
response without leaking provider diagnostics.
"""


class StateMilesError(Exception):
    """Base exception for all application-specific errors."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(StateMilesError):
    """Exception raised when request data validation fails.

    Per-field messages live in ``details["errors"]`` as
    ``{"origin": ["can't be blank"], ...}``.
    """

    @property
    def field_errors(self) -> dict[str, list[str]]:
        return dict(self.details.get("errors") or {})


class NoRouteFoundError(StateMilesError):
    """Exception raised when the route provider answers with zero routes."""


class ExternalServiceError(StateMilesError):
    """Exception raised when service calls fail."""


class RateLimitError(ExternalServiceError):
    """Exception raised when rate limits are exceeded."""


class ConfigurationError(StateMilesError):
    """Exception raised when required configuration is missing."""


class ResourceNotFoundError(StateMilesError):
    """Exception raised when a requested resource is not found."""


StateMilesException = StateMilesError
ValidationException = ValidationError
NoRouteFoundException = NoRouteFoundError
ExternalServiceException = ExternalServiceError
RateLimitException = RateLimitError
ConfigurationException = ConfigurationError
ResourceNotFoundException = ResourceNotFoundError
