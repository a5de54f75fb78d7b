#!/usr/bin/env python3
"""Utilities module for the MongoDB Certificate Rotation Tool."""

import subprocess
from typing import Optional, Tuple

from .print_manager import printer as default_printer


def _handle_command_result(result: subprocess.CompletedProcess) -> Tuple[bool, Optional[str]]:
    """Handle the result of a system command execution.

    Args:
        result: The subprocess result

    Returns:
        Tuple of (success, error_message)
    """
    if result.returncode == 0:
        return True, None

    stderr = (result.stderr or "").strip()
    return False, stderr or f"Command failed with exit code {result.returncode}"


def run_system_command(command, timeout=120, printer=None):
    """
    Execute a system command with a hard timeout.

    Args:
        command: List of command arguments to execute
        timeout: Seconds before the command is abandoned (default: 120)
        printer: Printer instance for output

    Returns:
        Tuple of (success, error_message). error_message is None on success.
    """
    printer = printer or default_printer
    printer.print_action(f"Executing command: {' '.join(command)}")

    try:
        result = subprocess.run(command, capture_output=True, text=True, timeout=timeout)
    except subprocess.TimeoutExpired:
        return False, f"Command timed out after {timeout} seconds"
    except OSError as e:
        return False, str(e)

    return _handle_command_result(result)


def split_host_port(member_name: str) -> Tuple[str, Optional[int]]:
    """Split a replica set member name into host and port.

    Handles bracketed IPv6 literals such as ``[::1]:27017``.

    Args:
        member_name: Member address as reported by the replica set

    Returns:
        Tuple of (host, port). port is None when the name carries none.
    """
    if member_name.startswith("["):
        host, _, rest = member_name[1:].partition("]")
        port = rest[1:] if rest.startswith(":") else ""
        return host, int(port) if port.isdigit() else None

    host, sep, port = member_name.rpartition(":")
    if not sep or not port.isdigit():
        return member_name, None
    return host, int(port)


def format_runtime(start_time, end_time):
    """
    Format runtime duration in a human-readable way.

    Args:
        start_time (float): Start timestamp from time.time()
        end_time (float): End timestamp from time.time()

    Returns:
        str: Formatted runtime string (e.g., "5m 23s", "1h 15m 30s")
    """
    total_seconds = int(end_time - start_time)

    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    seconds = total_seconds % 60

    if hours > 0:
        return f"{hours}h {minutes}m {seconds}s"
    elif minutes > 0:
        return f"{minutes}m {seconds}s"
    else:
        return f"{seconds}s"
