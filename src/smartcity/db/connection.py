from __future__ import annotations

import logging
import os
import re
import shutil
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import ArgumentError, NoSuchModuleError, SQLAlchemyError

from smartcity.core.settings import DatabaseSettings
from smartcity.errors import (
    DatabaseConnectionError,
    DatabaseError,
    DatabaseNotFoundError,
    DatabasePermissionError,
    DatabaseReadOnlyError,
)

logger = logging.getLogger(__name__)

_CREDENTIALS = re.compile(r"//.*@")

DRIVER_MISSING = "DRIVER_MISSING"

EngineFactory = Callable[..., Engine]


def mask_database_url(url: Optional[str]) -> str:
    if not url:
        return "Not configured"
    return _CREDENTIALS.sub("//***:***@", url)


def database_kind(url: str) -> str:
    return "PostgreSQL" if "postgresql" in url else "SQLite"


def _is_read_writable(path: Path) -> bool:
    return os.access(path, os.R_OK | os.W_OK)


def _is_readonly(exc: BaseException) -> bool:
    return "readonly" in str(exc).lower()


def classify_error(exc: BaseException) -> DatabaseError:
    """Map a driver/filesystem failure onto the service error hierarchy."""
    message = str(exc)
    if _is_readonly(exc):
        return DatabaseReadOnlyError(f"Database is read-only: {message}")
    if "does not exist" in message or "unable to open database file" in message:
        return DatabaseNotFoundError(f"Database not found: {message}")
    if "EACCES" in message or isinstance(exc, PermissionError):
        return DatabasePermissionError(f"Permission denied: {message}")
    return DatabaseConnectionError(f"Error connecting to database: {message}")


@dataclass
class DatabaseHealth:
    healthy: bool
    message: str
    error_code: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"healthy": self.healthy, "message": self.message}
        if self.error_code is not None:
            data["error"] = self.error_code
        return data


class DatabaseConnection:
    """Owns the SQLAlchemy engine for the service.

    ``connect`` prepares SQLite storage, opens the engine and verifies read and
    write access, rebuilding the engine once if the database reports itself
    read-only. Failures are raised as :class:`DatabaseError` subclasses whose
    ``hints`` explain the usual fix.
    """

    def __init__(
        self,
        settings: DatabaseSettings,
        engine_factory: EngineFactory = create_engine,
    ) -> None:
        self.settings = settings
        self._engine_factory = engine_factory
        self._engine: Optional[Engine] = None

    @property
    def url(self) -> str:
        return self.settings.url

    @property
    def kind(self) -> str:
        return database_kind(self.url)

    @property
    def connected(self) -> bool:
        return self._engine is not None

    @property
    def sqlite_path(self) -> Optional[Path]:
        try:
            url = make_url(self.url)
        except ArgumentError:
            return None
        if not url.drivername.startswith("sqlite"):
            return None
        if not url.database or url.database == ":memory:":
            return None
        return Path(url.database)

    def _create_engine(self) -> Engine:
        kwargs = {"echo": self.settings.echo}
        if self.sqlite_path is not None or self.url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
        else:
            kwargs["pool_pre_ping"] = True
        try:
            return self._engine_factory(self.url, **kwargs)
        except (ImportError, NoSuchModuleError) as exc:
            raise DatabaseConnectionError(
                f"No database driver available for {mask_database_url(self.url)}: {exc}",
                hints=[
                    "Install a driver for this backend, e.g. pip install 'cochin-smartcity[postgres]'",
                    "Ensure DATABASE_URL names a supported dialect",
                ],
                code=DRIVER_MISSING,
            ) from exc

    def ensure_access(self) -> None:
        """Make sure a SQLite file can be created, read and written.

        A file that exists but is not read/writable is backed up to
        ``<name>.backup.<epoch ms>`` and deleted so it can be recreated.
        """
        db_path = self.sqlite_path
        if db_path is None:
            return
        try:
            db_path.parent.mkdir(parents=True, exist_ok=True, mode=0o755)
        except OSError as exc:
            raise DatabasePermissionError(f"Cannot create database directory {db_path.parent}: {exc}") from exc

        if not db_path.exists() or _is_read_writable(db_path):
            return

        logger.error("Database file is not writable: %s", db_path)
        backup = db_path.with_name(f"{db_path.name}.backup.{int(time.time() * 1000)}")
        try:
            logger.info("Creating backup at %s", backup)
            shutil.copyfile(db_path, backup)
            db_path.unlink()
        except OSError as exc:
            raise DatabasePermissionError(f"Database file permission error: {exc}") from exc
        logger.warning("Removed read-only database file %s; it will be recreated", db_path)

    def _verify(self, engine: Engine) -> None:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database read access verified")
        with engine.begin() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database write access verified")

    def connect(self) -> Engine:
        engine: Optional[Engine] = None
        try:
            self.ensure_access()
            engine = self._create_engine()
            try:
                self._verify(engine)
            except SQLAlchemyError as exc:
                if not _is_readonly(exc):
                    raise
                logger.error("Database is in readonly mode; re-initialising the connection")
                engine.dispose()
                engine = self._create_engine()
                self._verify(engine)
                logger.info("Database readonly issue resolved")
        except DatabaseError as exc:
            self._log_failure(exc)
            raise
        except (SQLAlchemyError, OSError) as exc:
            if engine is not None:
                engine.dispose()
            error = classify_error(exc)
            self._log_failure(error)
            raise error from exc

        self._engine = engine
        logger.info("%s connected successfully", self.kind)
        logger.info("Database URL: %s", mask_database_url(self.url))
        return engine

    def _log_failure(self, error: DatabaseError) -> None:
        logger.error("%s", error)
        for hint in error.hints:
            logger.error("  - %s", hint)
        logger.error("DATABASE_URL: %s", mask_database_url(self.url))

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            logger.warning("Database engine not initialised, creating new instance")
            self._engine = self._create_engine()
        return self._engine

    def health(self) -> DatabaseHealth:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except (DatabaseError, SQLAlchemyError, OSError) as exc:
            return DatabaseHealth(
                healthy=False,
                message=f"Database connection failed: {exc}",
                error_code=getattr(exc, "code", None) or "UNKNOWN_ERROR",
            )
        return DatabaseHealth(healthy=True, message="Database connection is healthy")

    def disconnect(self) -> bool:
        engine, self._engine = self._engine, None
        if engine is None:
            return True
        try:
            engine.dispose()
        except SQLAlchemyError as exc:
            logger.error("Error closing database connection: %s", exc)
            return False
        logger.info("Database connection closed")
        return True
