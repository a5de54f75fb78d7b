#!/usr/bin/env python3
"""
Legacy setup.py for the MongoDB Certificate Rotation Tool.
Package metadata, dependencies and console scripts live in pyproject.toml.
"""

from setuptools import setup

if __name__ == "__main__":
    setup()
