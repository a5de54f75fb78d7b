#!/usr/bin/env python3
"""Backup Manager module for certificate backup and atomic installation."""

import os
import shutil
import tempfile
from dataclasses import dataclass
from datetime import datetime

from .errors import BackupFailed, CertificateWriteFailed, PermissionSetFailed

CERTIFICATE_MODE = 0o400


@dataclass(frozen=True)
class BackupRecord:
    """Timestamped copy of the previously installed certificate file"""

    original_path: str
    backup_path: str
    created_at: datetime


def combine_material(chain_pem, key_pem):
    """
    Build the installed file content: chain followed by key.

    mongod reads certificate and key from one PEM file (net.tls.certificateKeyFile)
    and accepts the blocks in this order. A newline is inserted only when the
    chain lacks a trailing one, so the PEM blocks never run together.

    Args:
        chain_pem: Certificate chain bytes
        key_pem: Private key bytes

    Returns:
        bytes: Combined file content
    """
    if chain_pem and not chain_pem.endswith(b"\n"):
        chain_pem += b"\n"
    return chain_pem + key_pem


class BackupManager:
    """Manages certificate backups and the swap of the installed file"""

    def __init__(self, backup_dir=None, printer=None, owner="mongodb", group="mongodb", clock=datetime.now):
        """
        Initialize BackupManager with backup directory path

        Args:
            backup_dir: Path to the backup directory
            printer: Printer instance for output
            owner: User that must own certificate files, or None to leave ownership untouched
            group: Group that must own certificate files, or None to leave it untouched
            clock: Callable returning the current datetime, used for backup names
        """
        self.backup_dir = backup_dir
        self.printer = printer
        self.owner = owner
        self.group = group
        self.clock = clock

    def setup_backup_directory(self, backup_dir=None):
        """
        Create the backup directory if it does not exist.

        Args:
            backup_dir: Optional backup directory path overriding the configured one

        Returns:
            str: Path to the backup directory

        Raises:
            BackupFailed: If the directory cannot be created
        """
        if backup_dir:
            self.backup_dir = backup_dir
        if not self.backup_dir:
            raise BackupFailed("No backup directory configured")

        self.printer.print_info(f"Backup directory: {self.backup_dir}")

        if not os.path.isdir(self.backup_dir):
            try:
                os.makedirs(self.backup_dir, exist_ok=True)
            except OSError as e:
                raise BackupFailed(f"Failed to create backup directory {self.backup_dir}: {e}") from e
            self.printer.print_success(f"Created backup directory: {self.backup_dir}")
        else:
            self.printer.print_info(f"Using existing backup directory: {self.backup_dir}")

        return self.backup_dir

    def apply_permissions(self, path):
        """
        Restrict a certificate file to owner-read-only and set its ownership.

        Args:
            path: File to restrict

        Raises:
            PermissionSetFailed: If mode or ownership cannot be applied
        """
        try:
            if self.owner or self.group:
                shutil.chown(path, user=self.owner, group=self.group)
            os.chmod(path, CERTIFICATE_MODE)
        except (OSError, LookupError) as e:
            raise PermissionSetFailed(f"Failed to set certificate permissions on {path}: {e}") from e

    def backup_existing_certificate(self, target_path):
        """
        Copy the installed certificate into the backup directory.

        Args:
            target_path: Currently installed certificate file

        Returns:
            BackupRecord or None: None when no certificate is installed yet

        Raises:
            BackupFailed: If the copy cannot be made
            PermissionSetFailed: If the copy cannot be restricted
        """
        if not os.path.isfile(target_path):
            self.printer.print_info("No existing certificate found, skipping backup")
            return None

        created_at = self.clock()
        backup_filename = f"{os.path.basename(target_path)}.backup.{created_at.strftime('%Y%m%d_%H%M%S')}"
        backup_path = self._copy_exclusive(target_path, os.path.join(self.backup_dir, backup_filename))

        self.apply_permissions(backup_path)
        self.printer.print_success(f"Backup created successfully: {backup_path}")
        return BackupRecord(original_path=target_path, backup_path=backup_path, created_at=created_at)

    def _copy_exclusive(self, source_path, backup_path):
        """
        Copy source_path to a backup file that did not exist before.

        An existing backup of the same second gets a numeric suffix
        (``.1``, ``.2``, ...) instead of being overwritten.

        Returns:
            str: Path of the created backup
        """
        candidate = backup_path
        suffix = 0
        while True:
            try:
                dst = open(candidate, "xb")
            except FileExistsError:
                suffix += 1
                candidate = f"{backup_path}.{suffix}"
                continue
            except OSError as e:
                raise BackupFailed(f"Failed to create certificate backup {candidate}: {e}") from e
            break

        self.printer.print_info(f"Creating backup of existing certificate: {candidate}")
        try:
            with dst, open(source_path, "rb") as src:
                shutil.copyfileobj(src, dst)
            shutil.copystat(source_path, candidate)
        except OSError as e:
            self._discard(candidate)
            raise BackupFailed(f"Failed to create certificate backup {candidate}: {e}") from e
        return candidate

    def write_certificate(self, content, target_path):
        """
        Atomically replace the installed certificate.

        The content goes to a temporary file in the target's directory, is
        restricted, then renamed over the target, so readers never see a
        truncated or world-readable file.

        Args:
            content: Bytes to install
            target_path: Installed certificate file

        Raises:
            CertificateWriteFailed: If the file cannot be written or renamed
            PermissionSetFailed: If the new file cannot be restricted
        """
        target_dir = os.path.dirname(os.path.abspath(target_path))
        try:
            fd, tmp_path = tempfile.mkstemp(prefix=f".{os.path.basename(target_path)}.", dir=target_dir)
        except OSError as e:
            raise CertificateWriteFailed(f"Failed to combine certificate files: {e}") from e

        try:
            with os.fdopen(fd, "wb") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            self.apply_permissions(tmp_path)
            os.replace(tmp_path, target_path)
        except PermissionSetFailed:
            self._discard(tmp_path)
            raise
        except OSError as e:
            self._discard(tmp_path)
            raise CertificateWriteFailed(f"Failed to combine certificate files: {e}") from e

    def _discard(self, path):
        try:
            os.unlink(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            self.printer.print_warning(f"Could not remove temporary file {path}: {e}")

    def swap(self, material, target_path, backup_dir=None):
        """
        Back up the installed certificate and install validated material.

        Args:
            material: Validated CertificateMaterial
            target_path: Installed certificate file
            backup_dir: Optional backup directory overriding the configured one

        Returns:
            BackupRecord or None: Backup of the previous file, if there was one
        """
        self.setup_backup_directory(backup_dir)
        record = self.backup_existing_certificate(target_path)

        self.printer.print_info("Combining validated fullchain.pem and privkey.pem...")
        self.write_certificate(combine_material(material.chain_pem, material.key_pem), target_path)
        self.printer.print_success("Certificate permissions set correctly")
        self.printer.print_info(f"Certificate updated: {target_path}")
        return record
