"""Exception hierarchy for mailquery."""

from pathlib import Path


class MailQueryError(Exception):
    """Base exception for all mailquery errors.

    All exceptions in this package inherit from this class,
    allowing callers to catch all mailquery errors with
    a single except clause.
    """

    pass


# Query Errors
class QueryError(MailQueryError):
    """Errors raised while turning a query string into terms."""

    pass


class OperatorNotAllowedError(QueryError):
    """An operator was rejected by the allow/deny policy.

    This is the only condition that aborts parsing; every other
    malformation degrades into best-effort terms.
    """

    def __init__(self, operator: str) -> None:
        self.operator = operator
        super().__init__(f"Operator '{operator}' is not allowed")


# Configuration Errors
class ConfigError(MailQueryError):
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
