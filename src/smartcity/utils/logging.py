import logging
import os
import sys
from typing import Optional

LOG_LEVEL_ENV = "SMARTCITY_LOG_LEVEL"


def resolve_level(default_level: int = logging.INFO, name: Optional[str] = None) -> int:
    """Map a level name to a logging level.

    Respects SMARTCITY_LOG_LEVEL when no explicit name is given. Unknown names
    fall back to ``default_level``.
    """
    level_name = name or os.getenv(LOG_LEVEL_ENV)
    if not level_name:
        return default_level
    level = getattr(logging, level_name.upper(), None)
    return level if isinstance(level, int) else default_level


def configure_logging(level: int = logging.INFO) -> None:
    handler = logging.StreamHandler(stream=sys.stdout)
    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    # Remove existing handlers to avoid duplicates in repeated test runs
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(handler)
