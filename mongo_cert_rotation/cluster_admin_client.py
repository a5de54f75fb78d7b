#!/usr/bin/env python3
"""Cluster Admin Client module for MongoDB administrative commands."""

from dataclasses import dataclass
from typing import Optional

import pymongo
from pymongo import MongoClient
from pymongo.errors import AutoReconnect, OperationFailure, PyMongoError

from .cluster_state import ClusterSnapshot
from .errors import ConnectivityError, NotReplicaSetMember

# Server error codes returned by replSetGetStatus on a node without a replica set
NO_REPLICATION_ENABLED = 76
NOT_YET_INITIALIZED = 94


@dataclass(frozen=True)
class StepdownResult:
    """Outcome of a replSetStepDown request"""

    accepted: bool
    reason: Optional[str] = None


class ClusterAdminClient:
    """Issues ping, replSetGetStatus and replSetStepDown against the local node"""

    def __init__(
        self,
        username,
        password,
        auth_db,
        host="localhost",
        port=27017,
        timeout=10,
        tls=True,
        printer=None,
        client_factory=MongoClient,
    ):
        """
        Initialize the admin client. No connection is opened until first use.

        Args:
            username: Administrative user
            password: Password of the administrative user
            auth_db: Authentication database
            host: Host of the local node
            port: Port of the local node
            timeout: Seconds every operation may take before it is failed
            tls: Whether to connect over TLS (invalid certificates and hostnames tolerated)
            printer: Printer instance for output
            client_factory: Callable building the underlying MongoClient
        """
        self.username = username
        self.password = password
        self.auth_db = auth_db
        self.host = host
        self.port = port
        self.timeout = timeout
        self.tls = tls
        self.printer = printer
        self._client_factory = client_factory
        self._client = None

    def _get_client(self):
        if self._client is None:
            timeout_ms = int(self.timeout * 1000)
            options = {
                "username": self.username,
                "password": self.password,
                "authSource": self.auth_db,
                "directConnection": True,
                "serverSelectionTimeoutMS": timeout_ms,
                "connectTimeoutMS": timeout_ms,
                "socketTimeoutMS": timeout_ms,
            }
            if self.tls:
                options.update(tls=True, tlsAllowInvalidCertificates=True, tlsAllowInvalidHostnames=True)
            self._client = self._client_factory(self.host, self.port, **options)
        return self._client

    def _run_admin_command(self, command, value=1, timeout=None, **kwargs):
        with pymongo.timeout(timeout or self.timeout):
            return self._get_client().admin.command(command, value, **kwargs)

    def close(self):
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def ping(self) -> bool:
        """
        Check whether the node answers an authenticated ping.

        Returns:
            bool: True if the node replied ok
        """
        try:
            result = self._run_admin_command("ping")
        except PyMongoError as e:
            if self.printer:
                self.printer.print_action(f"Ping failed: {e}")
            return False
        return bool(result.get("ok"))

    def get_status(self) -> ClusterSnapshot:
        """
        Read replica set status from the node.

        Returns:
            ClusterSnapshot: Parsed membership snapshot

        Raises:
            NotReplicaSetMember: If the node runs without replication
            ConnectivityError: If the command could not be completed
        """
        try:
            status = self._run_admin_command("replSetGetStatus")
        except OperationFailure as e:
            if e.code in (NO_REPLICATION_ENABLED, NOT_YET_INITIALIZED):
                raise NotReplicaSetMember(f"Node is not part of an initialized replica set: {e}") from e
            raise ConnectivityError(f"replSetGetStatus failed: {e}") from e
        except PyMongoError as e:
            raise ConnectivityError(f"replSetGetStatus failed: {e}") from e
        return ClusterSnapshot.from_status(status)

    def step_down(self, grace_seconds, catch_up_seconds=10) -> StepdownResult:
        """
        Ask the primary to relinquish leadership.

        The node refuses to seek re-election for grace_seconds. Servers older
        than 4.2 close every client connection on a successful stepdown, so a
        dropped connection counts as accepted; timeouts never do.

        Args:
            grace_seconds: Seconds the node stays ineligible for election
            catch_up_seconds: Seconds the primary waits for a secondary to catch up

        Returns:
            StepdownResult: accepted, or rejected with the server's reason
        """
        try:
            self._run_admin_command(
                "replSetStepDown",
                grace_seconds,
                timeout=self.timeout + catch_up_seconds,
                secondaryCatchUpPeriodSecs=catch_up_seconds,
            )
        except OperationFailure as e:
            return StepdownResult(accepted=False, reason=(e.details or {}).get("errmsg", str(e)))
        except PyMongoError as e:
            if e.timeout:
                return StepdownResult(accepted=False, reason=f"stepdown timed out: {e}")
            if isinstance(e, AutoReconnect):
                return StepdownResult(accepted=True, reason="connection closed by stepdown")
            return StepdownResult(accepted=False, reason=str(e))
        return StepdownResult(accepted=True)
