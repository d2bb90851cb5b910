from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from platformdirs import user_config_dir

from smartcity.errors import ConfigurationError

logger = logging.getLogger(__name__)

APP_NAME = "smartcity"
USER_SETTINGS_FILENAME = "settings.yaml"

# Environment variable -> (section, key). A section of None means top level.
ENV_OVERRIDES = {
    "SMARTCITY_ENV": (None, "environment"),
    "DATABASE_URL": ("database", "url"),
    "HOST": ("server", "host"),
    "PORT": ("server", "port"),
    "SMARTCITY_LOG_LEVEL": ("logging", "level"),
}


@dataclass
class ToastSettings:
    limit: int = 1
    remove_delay_seconds: float = 1000.0


@dataclass
class DatabaseSettings:
    url: str = "sqlite:///data/smartcity.db"
    echo: bool = False


@dataclass
class ServerSettings:
    host: str = "0.0.0.0"
    port: int = 4005
    shutdown_timeout_seconds: float = 30.0


@dataclass
class LoggingSettings:
    level: str = "INFO"


@dataclass
class Settings:
    environment: str = "development"
    toast: ToastSettings = field(default_factory=ToastSettings)
    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    server: ServerSettings = field(default_factory=ServerSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @staticmethod
    def default_user_path() -> Path:
        return Path(user_config_dir(APP_NAME)) / USER_SETTINGS_FILENAME

    @staticmethod
    def _load_yaml(path: Path) -> dict:
        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigurationError(f"Settings file {path} must contain a mapping")
        return data

    @classmethod
    def _deep_merge(cls, base: dict, overlay: dict) -> dict:
        merged = dict(base)
        for k, v in (overlay or {}).items():
            if isinstance(v, dict) and isinstance(base.get(k), dict):
                merged[k] = cls._deep_merge(base[k], v)
            else:
                merged[k] = v
        return merged

    @staticmethod
    def _env_overlay(environ: Mapping[str, str]) -> dict:
        overlay: Dict[str, Any] = {}
        for var, (section, key) in ENV_OVERRIDES.items():
            value = environ.get(var)
            if not value:
                continue
            if section is None:
                overlay[key] = value
            else:
                overlay.setdefault(section, {})[key] = value
            logger.debug("Settings override from %s", var)
        return overlay

    @classmethod
    def _from_dict(cls, data: dict) -> "Settings":
        toast = data.get("toast") or {}
        database = data.get("database") or {}
        server = data.get("server") or {}
        logging_ = data.get("logging") or {}
        try:
            return Settings(
                environment=str(data.get("environment", "development")),
                toast=ToastSettings(
                    limit=max(1, int(toast.get("limit", 1))),
                    remove_delay_seconds=max(0.0, float(toast.get("remove_delay_seconds", 1000.0))),
                ),
                database=DatabaseSettings(
                    url=str(database.get("url", DatabaseSettings.url)),
                    echo=bool(database.get("echo", False)),
                ),
                server=ServerSettings(
                    host=str(server.get("host", ServerSettings.host)),
                    port=_port(server.get("port", ServerSettings.port)),
                    shutdown_timeout_seconds=max(0.0, float(server.get("shutdown_timeout_seconds", 30.0))),
                ),
                logging=LoggingSettings(level=str(logging_.get("level", "INFO")).upper()),
            )
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid settings value: {exc}") from exc

    @classmethod
    def load(
        cls,
        user_path: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "Settings":
        """Load settings from built-in defaults, a user file and the environment.

        When ``user_path`` is omitted the platform config directory is checked
        for ``settings.yaml``. Environment variables win over both files.
        """
        try:
            with resources.files("smartcity.config").joinpath("default_settings.yaml").open("r", encoding="utf-8") as f:
                default_data = yaml.safe_load(f) or {}
        except FileNotFoundError:
            logger.warning("Default settings not found; falling back to dataclass defaults.")
            default_data = dataclasses.asdict(Settings())

        user_data = {}
        explicit = user_path is not None
        path = user_path if explicit else cls.default_user_path()
        if path.exists():
            user_data = cls._load_yaml(path)
            logger.info("Loaded user settings from %s", path)
        elif explicit:
            logger.warning("User settings file not found: %s", path)

        env_data = cls._env_overlay(os.environ if environ is None else environ)
        merged = cls._deep_merge(cls._deep_merge(default_data, user_data), env_data)
        settings = cls._from_dict(merged)
        logger.debug("Settings merged: %s", settings)
        return settings

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.safe_dump(dataclasses.asdict(self), f, sort_keys=False)
        logger.info("Saved settings to %s", path)


def _port(value: Any) -> int:
    port = int(value)
    if not 1 <= port <= 65535:
        raise ValueError(f"port out of range: {port}")
    return port
