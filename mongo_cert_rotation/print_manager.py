#!/usr/bin/env python3
"""Print Manager module for the MongoDB Certificate Rotation Tool."""

import os
import sys
from datetime import datetime

from .errors import ConfigurationError


class PrintManager:
    """Manages all output formatting, console echo and log file writes"""

    def __init__(self, log_file=None, quiet=False, debug=False):
        self.log_file = log_file
        self.quiet = quiet
        self.debug = debug

    def configure(self, log_file=None, quiet=False, debug=False):
        """
        Point the printer at a log file and set console behaviour.

        Args:
            log_file: Path of the log file every line is appended to
            quiet: If True, lines are only written to the log file
            debug: If True, action lines are emitted as well

        Raises:
            ConfigurationError: If the log directory cannot be created
        """
        self.log_file = log_file
        self.quiet = quiet
        self.debug = debug
        if log_file:
            log_dir = os.path.dirname(log_file)
            if log_dir:
                try:
                    os.makedirs(log_dir, exist_ok=True)
                except OSError as e:
                    self.log_file = None
                    self.quiet = False
                    raise ConfigurationError(f"Cannot create log directory {log_dir}: {e}") from e

    def _emit(self, line):
        message = f"[{datetime.now().strftime('%Y-%m-%d %H:%M:%S')}] {line}"
        if self.log_file:
            try:
                with open(self.log_file, "a") as f:
                    f.write(message + "\n")
            except OSError as e:
                # Console only from here on; the line itself is still shown
                print(f"Cannot write log file {self.log_file}: {e}", file=sys.stderr)
                self.log_file = None
                self.quiet = False
        if not self.quiet:
            print(message)

    def print_header(self, message):
        """Print a section header with visual separation"""
        self._emit("=" * 60)
        self._emit(f" {message.upper()}")
        self._emit("=" * 60)

    def print_info(self, message):
        """Print informational message"""
        self._emit(f"[INFO]  {message}")

    def print_success(self, message):
        """Print success message"""
        self._emit(f"[✓]     {message}")

    def print_warning(self, message):
        """Print warning message"""
        self._emit(f"[⚠️]     {message}")

    def print_error(self, message):
        """Print error message"""
        self._emit(f"[✗]     ERROR: {message}")

    def print_step(self, step_num, total_steps, message):
        """Print numbered step"""
        self._emit(f"[{step_num}/{total_steps}] {message}")

    def print_action(self, message):
        """Print action being performed (only in debug mode)"""
        if self.debug:
            self._emit(f"[ACTION] {message}")


# Create a global print manager instance for convenience
printer = PrintManager()
