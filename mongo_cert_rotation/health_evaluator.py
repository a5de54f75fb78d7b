#!/usr/bin/env python3
"""Health Evaluator module: pure reduction of a snapshot to quorum facts."""

from dataclasses import dataclass

from .cluster_state import ClusterSnapshot, MemberRole
from .errors import ClusterStatusError


@dataclass(frozen=True)
class HealthReport:
    """Quorum facts derived from one cluster snapshot"""

    healthy_count: int
    total_count: int
    self_role: MemberRole

    @property
    def all_healthy(self) -> bool:
        return self.healthy_count == self.total_count

    @property
    def is_leader(self) -> bool:
        return self.self_role is MemberRole.LEADER

    def describe(self) -> str:
        return f"Replica set: {self.healthy_count}/{self.total_count} healthy (Primary: {str(self.is_leader).lower()})"


def evaluate(snapshot: ClusterSnapshot) -> HealthReport:
    """Count healthy members and resolve the local node's role.

    Args:
        snapshot: Membership snapshot to evaluate

    Returns:
        HealthReport: Counts and self role

    Raises:
        ClusterStatusError: If the snapshot has no members
        SelfMemberNotFound: If no member is flagged as self
    """
    if not snapshot.members:
        raise ClusterStatusError("Replica set status reports no members")

    return HealthReport(
        healthy_count=sum(1 for m in snapshot.members if m.is_healthy),
        total_count=len(snapshot.members),
        self_role=snapshot.self_member.role,
    )
