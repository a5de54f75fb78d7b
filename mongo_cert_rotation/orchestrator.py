#!/usr/bin/env python3
"""Orchestrator module for the certificate rotation workflow."""

import time
from dataclasses import dataclass
from typing import Any, Optional

from .errors import IdentityMismatch, ConnectivityError, RotationError


@dataclass(frozen=True)
class RotationOutcome:
    """Final result of one rotation attempt"""

    success: bool
    exit_code: int
    backup: Any = None
    error: Optional[RotationError] = None
    certificate_installed: bool = False


class CertificateRotationOrchestrator:
    """
    Sequences one rotation attempt: health gate, validate, swap, health gate
    again, restart, readiness. Every step depends on the one before, so the
    first failure ends the attempt.
    """

    TOTAL_STEPS = 7

    def __init__(self, config: Any, **dependencies: Any) -> None:
        """
        Initialize the orchestrator with its configuration and collaborators.

        Args:
            config: Validated-on-run RotationConfig
            **dependencies: All required function and class dependencies including:
                - printer: PrintManager instance for output formatting
                - format_runtime: Function to format time durations
                - admin_client: ClusterAdminClient for the local node
                - StepdownCoordinator: StepdownCoordinator class constructor
                - BackupManager: BackupManager class constructor
                - RestartGate: RestartGate class constructor
                - read_candidate_material: Function reading the issued chain and key
                - validate_material: Function validating chain and key
                - sleep: Optional sleep function shared by the waiting components
        """
        self.config = config
        self.printer = dependencies["printer"]
        self.format_runtime = dependencies["format_runtime"]
        self.admin_client = dependencies["admin_client"]
        self.read_candidate_material = dependencies["read_candidate_material"]
        self.validate_material = dependencies["validate_material"]
        sleep = dependencies.get("sleep", time.sleep)

        self.stepdown_coordinator = dependencies["StepdownCoordinator"](
            self.admin_client,
            self.printer,
            grace_seconds=config.stepdown_grace_seconds,
            settle_seconds=config.settle_seconds,
            sleep=sleep,
        )
        self.backup_manager = dependencies["BackupManager"](
            backup_dir=config.backup_dir,
            printer=self.printer,
            owner=config.cert_owner,
            group=config.cert_group,
        )
        self.restart_gate = dependencies["RestartGate"](
            self.admin_client,
            self.printer,
            service_name=config.service_name,
            max_attempts=config.ready_max_attempts,
            interval=config.ready_interval,
            sleep=sleep,
        )

        self.backup_record = None
        self.certificate_installed = False

    def _log_configuration(self) -> None:
        self.printer.print_info(f"CONFIG -> Backups directory location: {self.config.backup_dir}")
        self.printer.print_info(f"CONFIG -> Certificate file location: {self.config.cert_file}")
        self.printer.print_info(f"CONFIG -> Logs file location: {self.config.log_file}")
        self.printer.print_info(f"CONFIG -> Certificate source directory: {self.config.candidate_dir}")

    def _validate_prerequisites(self) -> None:
        self.config.validate()
        if not self.admin_client.ping():
            raise ConnectivityError("MongoDB connection failed")
        self.printer.print_success("MongoDB connection successful")

    def _verify_identity(self):
        snapshot = self.admin_client.get_status()
        current_domain = snapshot.self_host
        self.printer.print_info(f"Detected current node domain: {current_domain}")
        if current_domain != self.config.domain:
            raise IdentityMismatch(
                f"Renewed domain {self.config.domain} does not match the current node domain {current_domain}"
            )
        return snapshot

    def _validate_candidate(self):
        self.printer.print_info(f"Validating source certificates in {self.config.candidate_dir}...")
        chain_pem, key_pem = self.read_candidate_material(self.config.candidate_dir)
        material = self.validate_material(chain_pem, key_pem)
        self.printer.print_info(f"Certificate subject: {material.subject}")
        self.printer.print_info(f"Certificate expires: {material.not_valid_after}")
        self.printer.print_action(f"Public key fingerprint (sha256): {material.certificate_fingerprint}")
        self.printer.print_success("Source certificates are valid and match")
        return material

    def rotate(self) -> RotationOutcome:
        """
        Run the rotation pipeline, raising on the first fatal condition.

        Returns:
            RotationOutcome: Successful outcome

        Raises:
            RotationError: Any fatal condition, see errors module
        """
        start_time = time.time()
        self._log_configuration()
        self.printer.print_header("Starting MongoDB certificate renewal process")

        self.printer.print_step(1, self.TOTAL_STEPS, "Validating prerequisites")
        self._validate_prerequisites()

        self.printer.print_step(2, self.TOTAL_STEPS, "Verifying node identity")
        snapshot = self._verify_identity()

        self.printer.print_step(3, self.TOTAL_STEPS, "Checking replica set health")
        self.stepdown_coordinator.coordinate(snapshot)
        self.printer.print_success("All replicas healthy - ready to proceed with certificate renewal")

        self.printer.print_step(4, self.TOTAL_STEPS, "Validating candidate certificate")
        material = self._validate_candidate()

        # Not applied until the node restarts
        self.printer.print_step(5, self.TOTAL_STEPS, "Installing certificate")
        self.backup_record = self.backup_manager.swap(material, self.config.cert_file)
        self.certificate_installed = True

        self.printer.print_step(6, self.TOTAL_STEPS, "Re-checking replica set health")
        self.stepdown_coordinator.coordinate(self.admin_client.get_status())
        self.printer.print_success("All replicas healthy - ready to proceed with node restart")

        self.printer.print_step(7, self.TOTAL_STEPS, "Restarting node and awaiting readiness")
        self.restart_gate.restart_and_wait()

        self.printer.print_info(f"Elapsed time: {self.format_runtime(start_time, time.time())}")
        return RotationOutcome(
            success=True, exit_code=0, backup=self.backup_record, certificate_installed=True
        )

    def run(self) -> RotationOutcome:
        """
        Run the rotation and convert any fatal condition into an outcome.

        Returns:
            RotationOutcome: Outcome carrying the process exit code
        """
        start_time = time.time()
        try:
            outcome = self.rotate()
        except RotationError as e:
            handle_rotation_failure(
                e,
                self.format_runtime,
                start_time,
                backup=self.backup_record,
                certificate_installed=self.certificate_installed,
                printer=self.printer,
            )
            return RotationOutcome(
                success=False,
                exit_code=e.exit_code,
                backup=self.backup_record,
                error=e,
                certificate_installed=self.certificate_installed,
            )
        finally:
            self.admin_client.close()

        handle_successful_completion(
            self.config.domain, start_time, printer=self.printer, format_runtime=self.format_runtime
        )
        return outcome


def handle_successful_completion(
    domain: str, start_time: float, printer: Any = None, format_runtime: Any = None
) -> None:
    """
    Handle successful completion of a rotation.

    Args:
        domain: Domain whose certificate was rotated
        start_time: Start time of the operation
        printer: PrintManager instance for output formatting
        format_runtime: Function to format time duration
    """
    total_runtime = format_runtime(start_time, time.time())
    printer.print_header(f"Certificate renewal for '{domain}' completed successfully!")
    printer.print_info(f"Total runtime: {total_runtime}")


def handle_rotation_failure(
    error: RotationError,
    format_runtime: Any,
    start_time: float,
    backup: Any = None,
    certificate_installed: bool = False,
    printer: Any = None,
) -> None:
    """
    Handle a fatal rotation condition.

    Args:
        error: The condition that ended the attempt
        format_runtime: Function to format time duration
        start_time: Start time of the operation
        backup: BackupRecord of the previous certificate, if one was made
        certificate_installed: Whether the new certificate is already on disk
        printer: PrintManager instance for output formatting
    """
    total_runtime = format_runtime(start_time, time.time())
    printer.print_error(f"{type(error).__name__}: {error}")
    printer.print_error(f"Total runtime before failure: {total_runtime}")

    if certificate_installed:
        printer.print_warning("The new certificate is installed on disk but the running node may still use the old one")
        if backup is not None:
            printer.print_warning(f"Previous certificate backup for manual rollback: {backup.backup_path}")
        else:
            printer.print_warning("No previous certificate existed, so no backup is available")
        printer.print_info("Operator intervention is required")
    else:
        printer.print_info("No certificate file was modified")
