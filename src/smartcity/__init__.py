"""
Cochin Smart City service core.

This package provides the headless pieces of the complaint-management portal:
- Toast notification store (reducer, removal timers, subscribers)
- Settings loaded from YAML defaults, a user file and the environment
- Database connection with read/write verification and health checks
- Server lifecycle with graceful shutdown
- Role-based sidebar navigation

UI layers should import and compose these services.
"""
from .core.roles import Role
from .core.settings import Settings
from .errors import (
    ConfigurationError,
    DatabaseConnectionError,
    DatabaseError,
    DatabaseNotFoundError,
    DatabasePermissionError,
    DatabaseReadOnlyError,
    SmartCityError,
)
from .ui.toast import ToastStore, dismiss, subscribe, toast

__all__ = [
    "ConfigurationError",
    "DatabaseConnectionError",
    "DatabaseError",
    "DatabaseNotFoundError",
    "DatabasePermissionError",
    "DatabaseReadOnlyError",
    "Role",
    "Settings",
    "SmartCityError",
    "ToastStore",
    "dismiss",
    "subscribe",
    "toast",
]
