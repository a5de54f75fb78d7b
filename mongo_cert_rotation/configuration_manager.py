#!/usr/bin/env python3
"""Configuration Manager module: the immutable rotation configuration."""

import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional

import yaml

from .errors import ConfigurationError

DEFAULT_CERT_FILE = "/etc/ssl/mongodb/mongodb-cert.pem"
DEFAULT_BACKUP_DIR = "/etc/ssl/mongodb/backups"
DEFAULT_LOG_FILE = "/var/log/mongodb/certificate-renewal.log"
DEFAULT_SOURCE_ROOT = "/etc/letsencrypt/live"

# CLI destination -> RotationConfig field, for flags whose names differ
_ARGUMENT_FIELDS = {
    "cert_file": "cert_file",
    "backup_dir": "backup_dir",
    "log_file": "log_file",
    "domain": "domain",
    "source_dir": "source_dir",
    "host": "host",
    "port": "port",
    "service_name": "service_name",
}

_POSITIVE_FIELDS = (
    "port",
    "command_timeout",
    "stepdown_grace_seconds",
    "ready_max_attempts",
)

_NON_NEGATIVE_FIELDS = ("settle_seconds", "ready_interval")

_BOOLEAN_FIELDS = ("quiet", "debug", "tls")
_INTEGER_FIELDS = ("port", "stepdown_grace_seconds", "ready_max_attempts")
_NUMBER_FIELDS = ("command_timeout", "settle_seconds", "ready_interval")
_OPTIONAL_TEXT_FIELDS = ("source_dir", "cert_owner", "cert_group")


def _check_value_type(name: str, value: Any) -> None:
    """
    Reject a setting whose type does not match its RotationConfig field.

    Raises:
        ConfigurationError: Naming the field and the offending value
    """
    if name in _BOOLEAN_FIELDS:
        valid, expected = isinstance(value, bool), "true or false"
    elif name in _INTEGER_FIELDS:
        valid, expected = isinstance(value, int) and not isinstance(value, bool), "a whole number"
    elif name in _NUMBER_FIELDS:
        valid, expected = isinstance(value, (int, float)) and not isinstance(value, bool), "a number"
    elif name in _OPTIONAL_TEXT_FIELDS:
        valid, expected = value is None or isinstance(value, str), "a string"
    else:
        valid, expected = isinstance(value, str), "a string"
    if not valid:
        raise ConfigurationError(f"{name} must be {expected}, got {value!r}")


@dataclass(frozen=True)
class RotationConfig:
    """Everything a rotation attempt needs, built once at startup"""

    mongo_user: str = ""
    mongo_password: str = ""
    mongo_auth_db: str = ""
    domain: str = ""
    cert_file: str = DEFAULT_CERT_FILE
    backup_dir: str = DEFAULT_BACKUP_DIR
    log_file: str = DEFAULT_LOG_FILE
    quiet: bool = False
    debug: bool = False
    source_dir: Optional[str] = None
    host: str = "localhost"
    port: int = 27017
    tls: bool = True
    command_timeout: float = 10
    stepdown_grace_seconds: int = 60
    settle_seconds: float = 10
    ready_max_attempts: int = 30
    ready_interval: float = 2
    service_name: str = "mongod"
    cert_owner: Optional[str] = "mongodb"
    cert_group: Optional[str] = "mongodb"

    @property
    def candidate_dir(self) -> str:
        """Directory the issuance client wrote fullchain.pem and privkey.pem to"""
        return self.source_dir or os.path.join(DEFAULT_SOURCE_ROOT, self.domain)

    def validate(self) -> None:
        """
        Check required values and tunables.

        Raises:
            ConfigurationError: Naming the first missing or invalid value
        """
        if not self.mongo_auth_db:
            raise ConfigurationError("MongoDB auth db not provided. Set MONGO_AUTH_DB environment variable.")
        if not self.mongo_user:
            raise ConfigurationError("MongoDB user not provided. Set MONGO_USER environment variable.")
        if not self.mongo_password:
            raise ConfigurationError("MongoDB password not provided. Set MONGO_PASSWORD environment variable.")
        if not self.domain:
            raise ConfigurationError("Renewed domain not provided. Set -d opt.")

        for field in fields(self):
            _check_value_type(field.name, getattr(self, field.name))

        for name in _POSITIVE_FIELDS:
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be greater than zero")
        for name in _NON_NEGATIVE_FIELDS:
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must not be negative")


def load_config_file(path: str) -> Dict[str, Any]:
    """
    Load rotation settings from a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        dict: Settings keyed by RotationConfig field name

    Raises:
        ConfigurationError: If the file is unreadable, not a mapping, or has unknown keys
    """
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to load configuration file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file {path} must contain a mapping")

    known = {f.name for f in fields(RotationConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigurationError(f"Unknown configuration keys in {path}: {', '.join(unknown)}")
    for name, value in data.items():
        try:
            _check_value_type(name, value)
        except ConfigurationError as e:
            raise ConfigurationError(f"Invalid value in {path}: {e}") from e
    return data


def _domain_from_deploy_hook(environ: Mapping[str, str]) -> str:
    """certbot deploy hooks export the renewed names space-separated"""
    domains = environ.get("RENEWED_DOMAINS", "").split()
    return domains[0] if domains else ""


def build_rotation_config(args: Any, environ: Mapping[str, str]) -> RotationConfig:
    """
    Merge CLI arguments, environment and the optional YAML file.

    Precedence: CLI flags, then environment, then config file, then defaults.

    Args:
        args: Parsed command-line arguments
        environ: Environment mapping handed in by the entry point

    Returns:
        RotationConfig: Immutable configuration (not yet validated)
    """
    settings: Dict[str, Any] = {}
    config_path = getattr(args, "config", None)
    if config_path:
        settings.update(load_config_file(config_path))

    env_settings = {
        "mongo_user": environ.get("MONGO_USER"),
        "mongo_password": environ.get("MONGO_PASSWORD"),
        "mongo_auth_db": environ.get("MONGO_AUTH_DB"),
        "domain": _domain_from_deploy_hook(environ),
    }
    settings.update({key: value for key, value in env_settings.items() if value})

    for dest, field_name in _ARGUMENT_FIELDS.items():
        value = getattr(args, dest, None)
        if value is not None:
            settings[field_name] = value

    if getattr(args, "quiet", False):
        settings["quiet"] = True
    if getattr(args, "debug", False):
        settings["debug"] = True

    return RotationConfig(**settings)
