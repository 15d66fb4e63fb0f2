"""Custom exceptions used across SchoolRoute."""


class SchoolRouteError(Exception):
    """Base error for the application."""


class ConfigError(SchoolRouteError):
    """Configuration related error."""


class EnvelopeError(SchoolRouteError):
    """Raised when a record cannot be sealed into an encrypted envelope."""
