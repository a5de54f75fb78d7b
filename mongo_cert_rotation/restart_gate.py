#!/usr/bin/env python3
"""Restart & Readiness Gate module for the MongoDB service."""

import time
from typing import Any, Callable, Optional

from .errors import ReadinessTimeout, RestartFailed
from .print_manager import PrintManager
from .utilities import run_system_command


class RestartGate:
    """Restarts the node through the service manager and waits for ping"""

    def __init__(
        self,
        admin_client: Any,
        printer: PrintManager,
        service_name: str = "mongod",
        max_attempts: int = 30,
        interval: float = 2,
        restart_timeout: int = 120,
        run_command: Callable[..., Any] = run_system_command,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.admin_client = admin_client
        self.printer = printer
        self.service_name = service_name
        self.max_attempts = max_attempts
        self.interval = interval
        self.restart_timeout = restart_timeout
        self.run_command = run_command
        self.sleep = sleep

    def restart(self) -> None:
        """
        Restart the service.

        Raises:
            RestartFailed: If the service manager reports failure
        """
        self.printer.print_info(f"Restarting MongoDB service ({self.service_name})...")
        success, error = self.run_command(
            ["systemctl", "restart", self.service_name], timeout=self.restart_timeout, printer=self.printer
        )
        if not success:
            raise RestartFailed(f"Failed to restart MongoDB service {self.service_name}: {error}")
        self.printer.print_success("MongoDB service restarted successfully")

    def await_ready(self, max_attempts: Optional[int] = None, interval: Optional[float] = None) -> int:
        """
        Poll ping until the node answers.

        Args:
            max_attempts: Attempt ceiling, defaults to the configured one
            interval: Seconds between attempts, defaults to the configured one

        Returns:
            int: The attempt number that succeeded

        Raises:
            ReadinessTimeout: If no attempt succeeded
        """
        max_attempts = self.max_attempts if max_attempts is None else max_attempts
        interval = self.interval if interval is None else interval

        self.printer.print_info("Waiting for MongoDB to be ready...")
        for attempt in range(1, max_attempts + 1):
            if self.admin_client.ping():
                self.printer.print_success(f"MongoDB is ready and accepting connections (attempt {attempt})")
                return attempt
            self.printer.print_info(f"Waiting for MongoDB... (attempt {attempt}/{max_attempts})")
            if attempt < max_attempts:
                self.sleep(interval)

        raise ReadinessTimeout(
            f"MongoDB failed to become ready after restart ({max_attempts} attempts, {interval}s interval)",
            attempts=max_attempts,
        )

    def restart_and_wait(self) -> int:
        self.restart()
        return self.await_ready()
