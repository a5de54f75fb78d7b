#!/usr/bin/env python3
"""
Shared pytest configuration and fixtures for all tests.
"""

import os
import sys
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from unittest.mock import Mock

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.x509.oid import NameOID

# Add the parent directory to Python path so we can import modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from mongo_cert_rotation.cluster_state import ClusterSnapshot  # noqa: E402
from mongo_cert_rotation.configuration_manager import RotationConfig  # noqa: E402

NODE_DOMAIN = "mongo1.example.com"


@pytest.fixture
def mock_printer():
    """Mock printer object"""
    printer = Mock()
    printer.print_header = Mock()
    printer.print_info = Mock()
    printer.print_success = Mock()
    printer.print_warning = Mock()
    printer.print_error = Mock()
    printer.print_step = Mock()
    printer.print_action = Mock()
    return printer


@pytest.fixture
def mock_format_runtime():
    """Mock runtime formatter returning a fixed duration"""
    return Mock(return_value="1m 30s")


# =============================================================================
# Replica set status factories
# =============================================================================


@pytest.fixture
def member_factory():
    """Factory for replSetGetStatus member entries.

    Returns:
        Callable creating one member document
    """

    def _create_member(
        name: str = f"{NODE_DOMAIN}:27017",
        state: int = 2,
        health: float = 1.0,
        is_self: bool = False,
        member_id: int = 0,
    ) -> Dict[str, Any]:
        state_names = {1: "PRIMARY", 2: "SECONDARY", 5: "STARTUP2", 7: "ARBITER", 8: "(not reachable/healthy)"}
        member = {
            "_id": member_id,
            "name": name,
            "health": health,
            "state": state,
            "stateStr": state_names.get(state, "UNKNOWN"),
            "uptime": 86400,
        }
        if is_self:
            member["self"] = True
        return member

    return _create_member


@pytest.fixture
def status_factory(member_factory):
    """Factory for full replSetGetStatus documents of a three member set.

    Args:
        member_factory: Factory fixture for member entries

    Returns:
        Callable creating a status document. ``states`` and ``healths`` list one
        value per member; ``self_index`` marks the local node (None for no self).
    """

    def _create_status(
        states: Optional[List[int]] = None,
        healths: Optional[List[float]] = None,
        self_index: Optional[int] = 0,
        set_name: str = "rs0",
    ) -> Dict[str, Any]:
        states = states if states is not None else [1, 2, 2]
        healths = healths if healths is not None else [1.0] * len(states)
        members = []
        for index, (state, health) in enumerate(zip(states, healths)):
            members.append(
                member_factory(
                    name=f"mongo{index + 1}.example.com:27017",
                    state=state,
                    health=health,
                    is_self=index == self_index,
                    member_id=index,
                )
            )
        return {"set": set_name, "myState": states[self_index or 0], "members": members, "ok": 1.0}

    return _create_status


@pytest.fixture
def snapshot_factory(status_factory):
    """Factory for parsed ClusterSnapshot objects"""

    def _create_snapshot(**kwargs) -> ClusterSnapshot:
        return ClusterSnapshot.from_status(status_factory(**kwargs))

    return _create_snapshot


# =============================================================================
# Certificate material factories
# =============================================================================


def _generate_key(key_type: str):
    if key_type == "rsa":
        return rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return ec.generate_private_key(ec.SECP256R1())


def _build_certificate(subject_key, common_name: str, issuer_key=None, issuer_name=None):
    subject = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.now(timezone.utc)
    return (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer_name or subject)
        .public_key(subject_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=90))
        .add_extension(x509.SubjectAlternativeName([x509.DNSName(common_name)]), critical=False)
        .sign(issuer_key or subject_key, hashes.SHA256())
    )


@pytest.fixture
def pem_factory():
    """Factory for real certificate chain and key PEM bytes.

    Returns:
        Callable returning (chain_pem, key_pem). ``with_intermediate`` appends
        an issuing CA certificate after the leaf, as fullchain.pem does.
    """

    def _create_pem(
        key_type: str = "ec",
        key_format: str = "pkcs8",
        common_name: str = NODE_DOMAIN,
        with_intermediate: bool = False,
    ):
        leaf_key = _generate_key(key_type)
        if with_intermediate:
            ca_key = _generate_key("ec")
            ca_cert = _build_certificate(ca_key, "Test Intermediate CA")
            leaf = _build_certificate(leaf_key, common_name, issuer_key=ca_key, issuer_name=ca_cert.subject)
            chain_pem = leaf.public_bytes(serialization.Encoding.PEM) + ca_cert.public_bytes(
                serialization.Encoding.PEM
            )
        else:
            leaf = _build_certificate(leaf_key, common_name)
            chain_pem = leaf.public_bytes(serialization.Encoding.PEM)

        private_format = (
            serialization.PrivateFormat.PKCS8
            if key_format == "pkcs8"
            else serialization.PrivateFormat.TraditionalOpenSSL
        )
        key_pem = leaf_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=private_format,
            encryption_algorithm=serialization.NoEncryption(),
        )
        return chain_pem, key_pem

    return _create_pem


@pytest.fixture
def candidate_dir(tmp_path, pem_factory):
    """Issuance output directory holding a matching fullchain.pem and privkey.pem"""
    source = tmp_path / "live" / NODE_DOMAIN
    source.mkdir(parents=True)
    chain_pem, key_pem = pem_factory()
    (source / "fullchain.pem").write_bytes(chain_pem)
    (source / "privkey.pem").write_bytes(key_pem)
    return source


@pytest.fixture
def rotation_config_factory(tmp_path, candidate_dir):
    """Factory for RotationConfig objects rooted in the test's tmp_path"""

    def _create_config(**overrides) -> RotationConfig:
        settings = {
            "mongo_user": "clusterAdmin",
            "mongo_password": "s3cret",
            "mongo_auth_db": "admin",
            "domain": NODE_DOMAIN,
            "cert_file": str(tmp_path / "ssl" / "mongodb-cert.pem"),
            "backup_dir": str(tmp_path / "ssl" / "backups"),
            "log_file": str(tmp_path / "log" / "certificate-renewal.log"),
            "source_dir": str(candidate_dir),
            "cert_owner": None,
            "cert_group": None,
        }
        settings.update(overrides)
        return RotationConfig(**settings)

    return _create_config
