#!/usr/bin/env python3
"""Arguments Parser module for the MongoDB Certificate Rotation Tool."""

import argparse


class ArgumentsParser:
    """Handles command-line argument parsing for certificate rotation"""

    @staticmethod
    def build_parser():
        parser = argparse.ArgumentParser(
            description="Rotate the TLS certificate of a MongoDB replica set member. "
            "Only restarts MongoDB if ALL replica set members are healthy.",
            epilog="Credentials are read from MONGO_USER, MONGO_PASSWORD and MONGO_AUTH_DB. "
            "When run as a certbot deploy hook, the domain defaults to the first of RENEWED_DOMAINS.",
        )

        parser.add_argument(
            "-c",
            "--cert-file",
            dest="cert_file",
            type=str,
            default=None,
            help="Certificate file (default: /etc/ssl/mongodb/mongodb-cert.pem)",
        )
        parser.add_argument(
            "-b",
            "--backup-dir",
            dest="backup_dir",
            type=str,
            default=None,
            help="Backup directory (default: /etc/ssl/mongodb/backups)",
        )
        parser.add_argument(
            "-l",
            "--log-file",
            dest="log_file",
            type=str,
            default=None,
            help="Log file (default: /var/log/mongodb/certificate-renewal.log)",
        )
        parser.add_argument(
            "-d",
            "--domain",
            dest="domain",
            type=str,
            default=None,
            help="Domain whose certificate was renewed (REQUIRED unless RENEWED_DOMAINS is set)",
        )
        parser.add_argument(
            "-q",
            "--quiet",
            action="store_true",
            help="Quiet mode (write to the log file only)",
        )
        parser.add_argument(
            "--config",
            type=str,
            default=None,
            help="Optional YAML file with rotation settings",
        )
        parser.add_argument(
            "--source-dir",
            dest="source_dir",
            type=str,
            default=None,
            help="Directory holding fullchain.pem and privkey.pem (default: /etc/letsencrypt/live/<domain>)",
        )
        parser.add_argument(
            "--host",
            type=str,
            default=None,
            help="Host of the local MongoDB node (default: localhost)",
        )
        parser.add_argument(
            "--port",
            type=int,
            default=None,
            help="Port of the local MongoDB node (default: 27017)",
        )
        parser.add_argument(
            "--service-name",
            dest="service_name",
            type=str,
            default=None,
            help="systemd unit restarted after the swap (default: mongod)",
        )
        parser.add_argument(
            "--debug",
            action="store_true",
            help="Enable debug output (shows command execution details)",
        )
        return parser

    @staticmethod
    def parse_arguments(argv=None):
        """
        Parse command-line arguments and return configuration

        Args:
            argv: Optional argument list, defaults to sys.argv

        Returns:
            argparse.Namespace: Parsed arguments
        """
        return ArgumentsParser.build_parser().parse_args(argv)
