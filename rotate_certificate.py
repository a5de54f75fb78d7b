#!/usr/bin/env python3
"""
MongoDB Certificate Rotation Tool

This is the main entry point for rotating the TLS certificate of a MongoDB
replica set member. It is meant to be run by a certbot deploy hook or a
scheduler, once per node, after the issuance client has written the renewed
fullchain.pem and privkey.pem.

Environment variables:
    MONGO_USER         MongoDB username (REQUIRED)
    MONGO_PASSWORD     MongoDB password (REQUIRED)
    MONGO_AUTH_DB      MongoDB authentication database (REQUIRED)
    RENEWED_DOMAINS    Set by certbot deploy hooks; first entry used when -d is absent
"""

import os
import sys

from mongo_cert_rotation import (
    ArgumentsParser,
    BackupManager,
    CertificateRotationOrchestrator,
    ClusterAdminClient,
    RestartGate,
    StepdownCoordinator,
    build_rotation_config,
    format_runtime,
    printer,
    read_candidate_material,
    validate_material,
)
from mongo_cert_rotation.errors import ConfigurationError


def main(argv=None):
    """
    Rotate the certificate of the local replica set member.

    Args:
        argv: Optional argument list, defaults to sys.argv

    Returns:
        int: Process exit code
    """
    args = ArgumentsParser.parse_arguments(argv)

    try:
        config = build_rotation_config(args, os.environ)
        printer.configure(log_file=config.log_file, quiet=config.quiet, debug=config.debug)
    except ConfigurationError as e:
        printer.print_error(str(e))
        return e.exit_code

    admin_client = ClusterAdminClient(
        config.mongo_user,
        config.mongo_password,
        config.mongo_auth_db,
        host=config.host,
        port=config.port,
        timeout=config.command_timeout,
        tls=config.tls,
        printer=printer,
    )

    dependencies = {
        "printer": printer,
        "format_runtime": format_runtime,
        "admin_client": admin_client,
        "StepdownCoordinator": StepdownCoordinator,
        "BackupManager": BackupManager,
        "RestartGate": RestartGate,
        "read_candidate_material": read_candidate_material,
        "validate_material": validate_material,
    }

    orchestrator = CertificateRotationOrchestrator(config, **dependencies)
    outcome = orchestrator.run()
    return outcome.exit_code


if __name__ == "__main__":
    sys.exit(main())
