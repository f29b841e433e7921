"""Custom exceptions for reschedule."""


class RescheduleError(Exception):
    """Base exception for all reschedule errors."""

    pass


class ValidationError(RescheduleError):
    """Raised when validation fails."""

    pass


class CircularDependencyError(ValidationError):
    """Raised when a circular dependency is detected."""

    pass


class MissingReferenceError(ValidationError):
    """Raised when a referenced ID does not exist."""

    pass


class ParseError(RescheduleError):
    """Raised when YAML parsing fails."""

    pass


class CalendarError(RescheduleError):
    """Raised when a working calendar cannot provide a duration."""

    pass
