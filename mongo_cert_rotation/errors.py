#!/usr/bin/env python3
"""Error taxonomy for certificate rotation failures.

Every failure the rotation can hit is a ``RotationError`` subclass. Each class
carries the exit code the CLI terminates with, so a scheduler or certbot
deploy hook can tell a configuration mistake from an unhealthy replica set
without parsing the log.
"""


class RotationError(Exception):
    """Base class for every fatal rotation condition"""

    exit_code = 1


class ConfigurationError(RotationError):
    """A required credential, domain or tunable is missing or invalid"""

    exit_code = 2


class ConnectivityError(RotationError):
    """The administrative interface of the local node could not be reached"""

    exit_code = 3


class ClusterStatusError(RotationError):
    """The replica set status document is malformed or unusable"""

    exit_code = 4


class NotReplicaSetMember(ClusterStatusError):
    """The node is running standalone, without replication enabled"""


class IdentityMismatch(RotationError):
    """The node's self-reported hostname is not the renewed domain"""

    exit_code = 5


class SelfMemberNotFound(IdentityMismatch):
    """No member in the status document is flagged as self"""


class QuorumUnsafe(RotationError):
    """Replica set is not fully healthy, or the primary could not step down"""

    exit_code = 6


class ValidationError(RotationError):
    """Candidate certificate material failed validation"""

    exit_code = 7


class CandidateMaterialMissing(ValidationError):
    """The issued chain or key file does not exist"""


class InvalidCertificate(ValidationError):
    """The chain does not parse as a PEM certificate"""


class InvalidPrivateKey(ValidationError):
    """The key does not parse as a supported private key"""


class KeyMismatch(ValidationError):
    """The private key does not belong to the certificate"""


class BackupFailed(RotationError):
    """The installed certificate could not be copied to the backup directory"""

    exit_code = 8


class PermissionSetFailed(RotationError):
    """Ownership or mode could not be applied to a certificate file"""

    exit_code = 9


class CertificateWriteFailed(RotationError):
    """The combined certificate file could not be written in place"""

    exit_code = 10


class RestartFailed(RotationError):
    """The service manager refused or failed to restart the node"""

    exit_code = 11


class ReadinessTimeout(RotationError):
    """The restarted node never answered ping within the attempt ceiling"""

    exit_code = 12

    def __init__(self, message, attempts=0):
        super().__init__(message)
        self.attempts = attempts
