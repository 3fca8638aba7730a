"""Exception hierarchy for live-filter."""

from pathlib import Path


class LiveFilterError(Exception):
    """Base exception for all live-filter errors.

    All exceptions in this package inherit from this class,
    allowing callers to catch all live-filter errors with
    a single except clause.
    """

    pass


# Configuration Errors
class ConfigError(LiveFilterError):
    """Configuration-related errors."""

    pass


class ConfigParseError(ConfigError):
    """Configuration file has invalid syntax."""

    def __init__(self, path: Path, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Invalid config at {path}: {detail}")


class ConfigValidationError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: object, reason: str) -> None:
        self.key = key
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid config value for '{key}': {reason}")


# Record Store Errors
class RecordStoreError(LiveFilterError):
    """Errors raised while executing a compiled filter."""

    pass


class UnknownFieldError(RecordStoreError):
    """A filter or sort references a field the record store does not have.

    This is a programming or configuration error, never a user input
    problem, so it is raised instead of being degraded to "no filter".
    """

    def __init__(self, field: str, model: str) -> None:
        self.field = field
        self.model = model
        super().__init__(f"Unknown field '{field}' on {model}")


# Validation Errors
class ValidationError(LiveFilterError):
    """Invalid input value."""

    def __init__(self, field: str, value: object, reason: str) -> None:
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")
