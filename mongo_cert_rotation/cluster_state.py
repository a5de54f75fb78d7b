#!/usr/bin/env python3
"""Cluster State module: typed snapshot of replica set membership."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .errors import ClusterStatusError, SelfMemberNotFound
from .utilities import split_host_port

# replSetGetStatus state codes
PRIMARY_STATE = 1
SECONDARY_STATE = 2
DOWN_STATE = 8


class MemberRole(Enum):
    """Role of a replica set member derived from its state code"""

    LEADER = "LEADER"
    FOLLOWER = "FOLLOWER"
    OTHER = "OTHER"

    @classmethod
    def from_state(cls, state: Optional[int]) -> "MemberRole":
        if state == PRIMARY_STATE:
            return cls.LEADER
        if state == SECONDARY_STATE:
            return cls.FOLLOWER
        return cls.OTHER


@dataclass(frozen=True)
class MemberStatus:
    """One entry of the replica set member list"""

    name: str
    is_self: bool
    health: int
    role: MemberRole
    state: Optional[int] = None
    state_str: str = "UNKNOWN"

    @property
    def host(self) -> str:
        return split_host_port(self.name)[0]

    @property
    def is_healthy(self) -> bool:
        """A member counts toward quorum only if reachable and voting-ready"""
        return self.health == 1 and self.role in (MemberRole.LEADER, MemberRole.FOLLOWER)

    @property
    def is_down(self) -> bool:
        return self.state == DOWN_STATE

    @classmethod
    def from_document(cls, member: Dict[str, Any]) -> "MemberStatus":
        if "name" not in member:
            raise ClusterStatusError(f"Replica set member entry has no name: {member}")
        state = member.get("state")
        try:
            health = int(member.get("health", 0))
        except (TypeError, ValueError):
            health = 0
        return cls(
            name=member["name"],
            is_self=member.get("self") is True,
            health=health,
            role=MemberRole.from_state(state),
            state=state,
            state_str=member.get("stateStr", "UNKNOWN"),
        )


@dataclass(frozen=True)
class ClusterSnapshot:
    """Point-in-time view of replica set membership, in reporting order"""

    set_name: str
    members: Tuple[MemberStatus, ...]

    @classmethod
    def from_status(cls, status: Dict[str, Any]) -> "ClusterSnapshot":
        """
        Parse a replSetGetStatus response document.

        Args:
            status: Raw command response

        Returns:
            ClusterSnapshot: Parsed snapshot

        Raises:
            ClusterStatusError: If the member list is missing or more than one
                member claims to be self
        """
        members = status.get("members")
        if not isinstance(members, list):
            raise ClusterStatusError("Replica set status has no member list")

        snapshot = cls(
            set_name=status.get("set", ""),
            members=tuple(MemberStatus.from_document(m) for m in members),
        )
        self_count = sum(1 for m in snapshot.members if m.is_self)
        if self_count > 1:
            raise ClusterStatusError(f"Replica set status reports {self_count} members as self")
        return snapshot

    @property
    def self_member(self) -> MemberStatus:
        member = next((m for m in self.members if m.is_self), None)
        if member is None:
            raise SelfMemberNotFound("Could not determine hostname from replica set: no member is flagged as self")
        return member

    @property
    def self_host(self) -> str:
        return self.self_member.host

    @property
    def has_leader(self) -> bool:
        return any(m.role is MemberRole.LEADER for m in self.members)

    def peers(self):
        return [m for m in self.members if not m.is_self]
