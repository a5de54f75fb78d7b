#!/usr/bin/env python3
"""
Pytest tests for the health_evaluator module.
Evaluates hand-constructed snapshots; no cluster access involved.
"""

import itertools
import os
import sys

import pytest

# Add parent directory to path for module imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from mongo_cert_rotation.cluster_state import ClusterSnapshot, MemberRole  # noqa: E402
from mongo_cert_rotation.errors import ClusterStatusError, SelfMemberNotFound  # noqa: E402
from mongo_cert_rotation.health_evaluator import evaluate  # noqa: E402


class TestEvaluate:
    """Test the evaluate function"""

    def test_all_healthy_leader(self, snapshot_factory):
        report = evaluate(snapshot_factory(states=[1, 2, 2], self_index=0))

        assert report.healthy_count == 3
        assert report.total_count == 3
        assert report.self_role is MemberRole.LEADER
        assert report.all_healthy is True
        assert report.is_leader is True

    def test_unreachable_follower(self, snapshot_factory):
        report = evaluate(snapshot_factory(states=[1, 2, 8], healths=[1.0, 1.0, 0.0]))

        assert report.healthy_count == 2
        assert report.all_healthy is False

    def test_reachable_but_not_voting_member_counts_unhealthy(self, snapshot_factory):
        report = evaluate(snapshot_factory(states=[2, 2, 5], self_index=1))

        assert report.healthy_count == 2
        assert report.self_role is MemberRole.FOLLOWER
        assert report.all_healthy is False

    def test_empty_snapshot_is_an_error(self):
        with pytest.raises(ClusterStatusError):
            evaluate(ClusterSnapshot(set_name="rs0", members=()))

    def test_snapshot_without_self_is_an_error(self, snapshot_factory):
        with pytest.raises(SelfMemberNotFound):
            evaluate(snapshot_factory(self_index=None))

    def test_describe(self, snapshot_factory):
        report = evaluate(snapshot_factory(states=[2, 1, 2], self_index=0))

        assert report.describe() == "Replica set: 3/3 healthy (Primary: false)"

    @pytest.mark.parametrize(
        "states,healths",
        [
            (list(states), list(healths))
            for states in itertools.product([1, 2, 8], repeat=3)
            for healths in ([1.0, 1.0, 1.0], [1.0, 0.0, 1.0])
        ],
    )
    def test_counts_are_consistent(self, snapshot_factory, states, healths):
        report = evaluate(snapshot_factory(states=states, healths=healths))

        assert report.healthy_count <= report.total_count
        assert report.all_healthy == (report.healthy_count == report.total_count)

    def test_evaluate_is_pure(self, snapshot_factory):
        snapshot = snapshot_factory()

        assert evaluate(snapshot) == evaluate(snapshot)
