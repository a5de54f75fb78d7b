#!/usr/bin/env python3
"""Stepdown Coordinator module for leadership-aware health gating."""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from .cluster_state import ClusterSnapshot
from .errors import QuorumUnsafe
from .health_evaluator import HealthReport, evaluate
from .print_manager import PrintManager


class StepdownState(Enum):
    CHECKING = "CHECKING"
    STEPDOWN_REQUESTED = "STEPDOWN_REQUESTED"
    STEPDOWN_SETTLED = "STEPDOWN_SETTLED"
    STEPDOWN_FAILED = "STEPDOWN_FAILED"
    PASSTHROUGH = "PASSTHROUGH"


class DecisionKind(Enum):
    STEPDOWN_REQUIRED = "STEPDOWN_REQUIRED"
    PROCEED = "PROCEED"
    BLOCKED = "BLOCKED"


@dataclass(frozen=True)
class RotationDecision:
    """What the rotation may do given one health report. Never cached."""

    kind: DecisionKind
    reason: Optional[str] = None


def decide(report: HealthReport) -> RotationDecision:
    """Map a health report to a rotation decision.

    Only a fully healthy replica set is a safe time to touch a node. When it
    is healthy and the local node is primary, leadership must move first.

    Args:
        report: Health facts for the current snapshot

    Returns:
        RotationDecision: STEPDOWN_REQUIRED, PROCEED or BLOCKED(reason)
    """
    if not report.all_healthy:
        return RotationDecision(
            DecisionKind.BLOCKED,
            f"Not all replicas are healthy ({report.healthy_count}/{report.total_count}). "
            "Cannot proceed with certificate renewal.",
        )
    if report.is_leader:
        return RotationDecision(DecisionKind.STEPDOWN_REQUIRED)
    return RotationDecision(DecisionKind.PROCEED)


class StepdownCoordinator:
    """Evaluates a snapshot and vacates leadership when the local node holds it"""

    def __init__(
        self,
        admin_client: Any,
        printer: PrintManager,
        grace_seconds: int = 60,
        settle_seconds: float = 10,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Args:
            admin_client: ClusterAdminClient used for the stepdown request
            printer: Printer instance for output
            grace_seconds: Seconds the stepped-down node stays ineligible for election
            settle_seconds: Seconds to wait for the new election after an accepted stepdown
            sleep: Sleep function, replaceable in tests
        """
        self.admin_client = admin_client
        self.printer = printer
        self.grace_seconds = grace_seconds
        self.settle_seconds = settle_seconds
        self.sleep = sleep
        self.state = StepdownState.CHECKING

    def coordinate(self, snapshot: ClusterSnapshot) -> StepdownState:
        """
        Gate the rotation on replica set health, stepping down if primary.

        Args:
            snapshot: Fresh membership snapshot

        Returns:
            StepdownState: PASSTHROUGH or STEPDOWN_SETTLED

        Raises:
            QuorumUnsafe: If the set is degraded or the stepdown was rejected
        """
        self.state = StepdownState.CHECKING
        report = evaluate(snapshot)
        self.printer.print_info(report.describe())

        decision = decide(report)
        if decision.kind is DecisionKind.BLOCKED:
            raise QuorumUnsafe(decision.reason)

        if decision.kind is DecisionKind.PROCEED:
            self.state = StepdownState.PASSTHROUGH
            return self.state

        self.state = StepdownState.STEPDOWN_REQUESTED
        self.printer.print_info(f"Local node is primary - requesting stepdown ({self.grace_seconds}s)")
        result = self.admin_client.step_down(self.grace_seconds)
        if not result.accepted:
            self.state = StepdownState.STEPDOWN_FAILED
            raise QuorumUnsafe(f"Primary stepdown failed, cannot proceed safely: {result.reason}")

        self.printer.print_success("Primary stepdown successful")
        self.printer.print_info(f"Waiting {self.settle_seconds}s for new primary election...")
        self.sleep(self.settle_seconds)
        self.state = StepdownState.STEPDOWN_SETTLED
        return self.state
