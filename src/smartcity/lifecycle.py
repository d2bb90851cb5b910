from __future__ import annotations

import logging
import os
import signal
import threading
from typing import Callable, Optional

from .core.settings import Settings
from .db.connection import DatabaseConnection, DatabaseHealth
from .errors import DatabaseError
from .ui.toast import ToastStore, set_default_store

logger = logging.getLogger(__name__)


class Server:
    """
    Service host and lifecycle manager.

    Responsibilities:
    - Connect the database in order at start-up (fatal only in production)
    - Own the process toast store
    - Report detailed health
    - Shut down gracefully on SIGINT/SIGTERM, forcing exit after a deadline
    """

    def __init__(
        self,
        settings: Settings,
        database: Optional[DatabaseConnection] = None,
        toasts: Optional[ToastStore] = None,
        force_exit: Callable[[int], None] = os._exit,
    ) -> None:
        self.settings = settings
        self.database = database or DatabaseConnection(settings.database)
        self.toasts = toasts or ToastStore.from_settings(settings.toast)
        self._force_exit = force_exit
        self._stopped = threading.Event()
        self._shutdown_lock = threading.RLock()
        self._shutting_down = False
        self._closing = False
        self._exit_code: Optional[int] = None
        self._force_timer: Optional[threading.Timer] = None

    @property
    def base_url(self) -> str:
        return f"http://{self.settings.server.host}:{self.settings.server.port}"

    def start(self) -> None:
        logger.info("Starting Cochin Smart City service (environment=%s)", self.settings.environment)

        logger.info("Step 1: database connection")
        try:
            self.database.connect()
        except DatabaseError:
            if self.settings.is_production:
                logger.critical("Exiting in production due to database connection failure")
                raise
            logger.warning("Continuing in %s mode despite database issues", self.settings.environment)

        logger.info("Step 2: notification store")
        set_default_store(self.toasts)

        logger.info("Server URL: %s", self.base_url)
        logger.info("Health Check: %s/api/health", self.base_url)
        logger.info("Detailed Health: %s/api/health/detailed", self.base_url)
        logger.info("Server is ready to accept connections")

    def detailed_health(self) -> dict:
        db: DatabaseHealth = self.database.health()
        return {
            "success": db.healthy,
            "message": "All systems operational" if db.healthy else "System issues detected",
            "data": {"database": db.to_dict(), "environment": self.settings.environment},
        }

    def install_signal_handlers(self) -> None:
        for sig in (signal.SIGINT, signal.SIGTERM):
            signal.signal(sig, self._handle_signal)

    @property
    def shutting_down(self) -> bool:
        return self._shutting_down

    def _handle_signal(self, signum, frame) -> None:
        name = signal.Signals(signum).name
        if self._shutting_down:
            # Handlers run on the main thread, possibly in the middle of shutdown().
            logger.warning("%s received while shutdown is in progress; ignoring", name)
            return
        self.shutdown(name)

    def _arm_force_exit(self) -> None:
        timeout = self.settings.server.shutdown_timeout_seconds

        def _expired() -> None:
            logger.error("Forced shutdown - graceful shutdown timeout (%.0fs)", timeout)
            self._force_exit(1)

        self._force_timer = threading.Timer(timeout, _expired)
        self._force_timer.daemon = True
        self._force_timer.start()

    def shutdown(self, reason: str = "shutdown") -> int:
        """Close the toast store and database; safe to call more than once.

        A call re-entering from the thread that is already shutting down
        returns 0 straight away instead of waiting on itself.
        """
        self._shutting_down = True
        with self._shutdown_lock:
            if self._exit_code is not None:
                return self._exit_code
            if self._closing:
                return 0
            self._closing = True
            logger.info("%s received, initiating graceful shutdown", reason)
            self._arm_force_exit()
            self.toasts.close()
            ok = self.database.disconnect()
            self._exit_code = 0 if ok else 1
            if self._force_timer is not None:
                self._force_timer.cancel()
            logger.info("Graceful shutdown completed")
            self._stopped.set()
            return self._exit_code

    def serve_forever(self, poll_interval: float = 0.5) -> int:
        # Poll so the main thread stays responsive to signals.
        while not self._stopped.wait(poll_interval):
            pass
        return self._exit_code if self._exit_code is not None else 0
