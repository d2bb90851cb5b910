import argparse
import json
import logging
import sys
from pathlib import Path

from .core.navigation import visible_items
from .core.roles import Role
from .core.settings import Settings
from .errors import SmartCityError
from .lifecycle import Server
from .utils.logging import configure_logging, resolve_level

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="smartcity",
        description="Cochin Smart City - complaint management service host",
    )
    parser.add_argument(
        "--settings",
        dest="settings_path",
        type=Path,
        default=None,
        help="Path to a user settings YAML file to load/override defaults.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable verbose debug logging.",
    )
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("serve", help="Start the service and wait for SIGINT/SIGTERM.")
    sub.add_parser("health", help="Connect to the database and print detailed health as JSON.")
    nav = sub.add_parser("nav", help="List the sidebar paths visible to a role.")
    nav.add_argument("role", choices=[r.value for r in Role])
    return parser.parse_args(argv)


def _cmd_serve(settings: Settings) -> int:
    server = Server(settings)
    try:
        server.start()
    except SmartCityError as exc:
        logger.critical("Server startup failed: %s", exc)
        return 1
    server.install_signal_handlers()
    return server.serve_forever()


def _cmd_health(settings: Settings) -> int:
    server = Server(settings)
    try:
        server.database.connect()
    except SmartCityError as exc:
        logger.error("Database connection failed: %s", exc)
    report = server.detailed_health()
    server.shutdown("health check complete")
    print(json.dumps(report, indent=2))
    return 0 if report["success"] else 1


def _cmd_nav(role: str) -> int:
    for item in visible_items(Role.parse(role)):
        print(f"{item.path}\t{item.label}")
    return 0


def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        settings = Settings.load(user_path=args.settings_path)
    except SmartCityError as exc:
        configure_logging()
        logger.critical("Could not load settings: %s", exc)
        return 2
    configure_logging(level=logging.DEBUG if args.debug else resolve_level(name=settings.logging.level))

    if args.command == "serve":
        return _cmd_serve(settings)
    if args.command == "health":
        return _cmd_health(settings)
    return _cmd_nav(args.role)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
