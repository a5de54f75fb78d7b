#!/usr/bin/env python3
"""
MongoDB Certificate Rotation Tool - Modular Components.

This package rotates the TLS certificate of one MongoDB replica set member
without taking the replica set offline: it only touches the node when every
member is healthy, steps the node down first if it is primary, validates the
issued material before any file is changed, and gates success on the node
answering again after restart.

Modules:
- print_manager: Handles all output formatting, console echo and log file
- errors: Fatal rotation conditions and their exit codes
- utilities: Common helpers (system commands, member names, runtime format)
- configuration_manager: Immutable rotation configuration
- arguments_parser: Command-line argument parsing
- cluster_state: Typed replica set membership snapshot
- health_evaluator: Healthy/total counts and self role from a snapshot
- cluster_admin_client: ping, replSetGetStatus and replSetStepDown
- stepdown_coordinator: Health gate and leadership hand-off
- certificate_validator: Chain and key parsing and matching
- backup_manager: Certificate backup and atomic installation
- restart_gate: Service restart and readiness polling
- orchestrator: End-to-end rotation workflow
- health_api: Read-only HTTP health endpoint
"""

from .arguments_parser import ArgumentsParser
from .backup_manager import BackupManager, BackupRecord, combine_material
from .certificate_validator import CertificateMaterial, read_candidate_material, validate_material
from .cluster_admin_client import ClusterAdminClient, StepdownResult
from .cluster_state import ClusterSnapshot, MemberRole, MemberStatus
from .configuration_manager import RotationConfig, build_rotation_config, load_config_file
from .health_evaluator import HealthReport, evaluate
from .orchestrator import (
    CertificateRotationOrchestrator,
    RotationOutcome,
    handle_rotation_failure,
    handle_successful_completion,
)
from .print_manager import PrintManager, printer
from .restart_gate import RestartGate
from .stepdown_coordinator import DecisionKind, RotationDecision, StepdownCoordinator, StepdownState, decide
from .utilities import format_runtime, run_system_command, split_host_port

__all__ = [
    "ArgumentsParser",
    "BackupManager",
    "BackupRecord",
    "combine_material",
    "CertificateMaterial",
    "read_candidate_material",
    "validate_material",
    "ClusterAdminClient",
    "StepdownResult",
    "ClusterSnapshot",
    "MemberRole",
    "MemberStatus",
    "RotationConfig",
    "build_rotation_config",
    "load_config_file",
    "HealthReport",
    "evaluate",
    "CertificateRotationOrchestrator",
    "RotationOutcome",
    "handle_rotation_failure",
    "handle_successful_completion",
    "PrintManager",
    "printer",
    "RestartGate",
    "DecisionKind",
    "RotationDecision",
    "StepdownCoordinator",
    "StepdownState",
    "decide",
    "format_runtime",
    "run_system_command",
    "split_host_port",
]
