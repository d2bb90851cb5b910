from __future__ import annotations

from typing import Iterable, List, Optional


class SmartCityError(Exception):
    """Base error for Smart City service exceptions."""


class ConfigurationError(SmartCityError):
    """Raised when settings cannot be loaded or fail validation."""


class DatabaseError(SmartCityError):
    """Base error for database connection problems.

    ``hints`` holds short remediation steps that the lifecycle logs next to
    the failure; ``code`` is a short machine-readable tag for health reports.
    """

    default_hints: tuple = ()

    def __init__(
        self,
        message: str,
        hints: Optional[Iterable[str]] = None,
        code: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.hints: List[str] = list(hints if hints is not None else self.default_hints)
        self.code = code


class DatabaseConnectionError(DatabaseError):
    """Raised when the database cannot be reached or verified."""


class DatabaseReadOnlyError(DatabaseError):
    """Raised when the database only accepts reads."""

    default_hints = (
        "Ensure the database file has write permissions",
        "Check that the application has proper file system access",
        "Consider using PostgreSQL for production environments",
    )


class DatabaseNotFoundError(DatabaseError):
    """Raised when the configured database does not exist."""

    default_hints = (
        "Create the database schema before starting the service",
        "Ensure DATABASE_URL points to the correct location",
    )


class DatabasePermissionError(DatabaseError):
    """Raised when the database file or directory is not accessible."""

    default_hints = (
        "Check file/directory permissions",
        "Ensure the application user has access to the database directory",
    )
