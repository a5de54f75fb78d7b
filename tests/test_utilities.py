#!/usr/bin/env python3
"""
Pytest tests for the utilities module.
"""

import os
import sys

import pytest

# Add parent directory to path for module imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from mongo_cert_rotation.utilities import format_runtime, split_host_port  # noqa: E402


class TestFormatRuntime:
    """Test runtime formatting"""

    @pytest.mark.parametrize(
        "seconds,expected",
        [(0, "0s"), (45, "45s"), (90, "1m 30s"), (3600, "1h 0m 0s"), (4530, "1h 15m 30s")],
    )
    def test_format(self, seconds, expected):
        assert format_runtime(1000.0, 1000.0 + seconds) == expected


class TestSplitHostPort:
    """Test member name parsing"""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("mongo1.example.com:27017", ("mongo1.example.com", 27017)),
            ("mongo1.example.com", ("mongo1.example.com", None)),
            ("10.0.0.5:27018", ("10.0.0.5", 27018)),
            ("[::1]:27017", ("::1", 27017)),
            ("[fe80::1]", ("fe80::1", None)),
        ],
    )
    def test_split(self, name, expected):
        assert split_host_port(name) == expected
