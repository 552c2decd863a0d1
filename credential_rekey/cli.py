#!/usr/bin/env python3
"""Command-line interface for switching the credential encryption scheme."""

import argparse
import json
import logging
import os
import sys
from typing import Any, Optional

from credential_rekey.config import ConfigFile
from credential_rekey.constants import Constants
from credential_rekey.crypto_utils import supported_algorithms
from credential_rekey.exceptions import CredentialRekeyError
from credential_rekey.file_manager import FileManager
from credential_rekey.services.rotation.engine import KeyRotationEngine
from credential_rekey.services.user_card_service import UserCardService
from credential_rekey.services.user_service import UserService

logger = logging.getLogger(__name__)


class SwitchDbHashCLI:
    """Command-line interface for the encryption algorithm switcher."""

    def __init__(self) -> None:
        """Initialize the CLI."""
        self._parser = self._create_parser()
        self._pretty = False

    def _default_config_path(self) -> str:
        """Config file to update, overridable from the environment."""
        return os.getenv("CREDENTIAL_REKEY_CONFIG") or os.path.join(
            os.getcwd(), Constants.DEFAULT_CONFIG_FILE()
        )

    def _default_data_dir(self) -> str:
        """Record store directory, overridable from the environment."""
        return os.getenv("CREDENTIAL_REKEY_DATA_DIR") or os.path.join(
            os.getcwd(), Constants.DEFAULT_DATA_DIR()
        )

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create the argument parser.

        Returns:
            Configured argument parser
        """
        parser = argparse.ArgumentParser(
            prog="switch-db-hash",
            description=(
                "Switches the encryption algorithm in the database and config. "
                "Expects new algorithm and (optional) new key as parameters."
            ),
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=f"""
Supported algorithms: {", ".join(supported_algorithms())}

Examples:
  # Turn on encryption for passwords stored in plain text
  switch-db-hash -c /path/to/config.ini -d /path/to/data aes "my-new-key"

  # Switch algorithm, keeping the key on file
  switch-db-hash -c /path/to/config.ini -d /path/to/data camellia

  # Print a JSON summary of the run
  switch-db-hash --json --pretty blowfish "another-key"
            """,
        )

        parser.add_argument(
            "newmethod",
            help="Encryption method",
        )
        parser.add_argument(
            "newkey",
            nargs="?",
            default=None,
            help="Encryption key (default: the key on file)",
        )
        parser.add_argument(
            "-c",
            "--config",
            default=self._default_config_path(),
            help="Configuration file holding the [Authentication] settings",
        )
        parser.add_argument(
            "-d",
            "--data-dir",
            default=self._default_data_dir(),
            help="Directory holding the user and library card records",
        )
        parser.add_argument(
            "--log-level",
            default="WARNING",
            choices=["DEBUG", "INFO", "WARNING", "ERROR"],
            help="Logging level (default: WARNING)",
        )
        parser.add_argument(
            "--json",
            action="store_true",
            help="Print a JSON summary after the run",
        )
        parser.add_argument(
            "--pretty",
            action="store_true",
            help="Pretty-print JSON outputs",
        )

        return parser

    def _print_json(self, payload: dict[str, Any]) -> None:
        """Print a JSON payload to stdout."""
        print(json.dumps(payload, indent=2 if self._pretty else None))

    def _print_stderr(self, line: str) -> None:
        """Print an operator line to stderr, keeping stdout for JSON."""
        print(line, file=sys.stderr)

    def _print_error(self, *, message: str, code: str = "error") -> int:
        """Print a JSON error to stderr and return a non-zero exit code."""
        error_obj = {
            "success": False,
            "error_code": code,
            "message": message,
        }
        print(json.dumps(error_obj, indent=2), file=sys.stderr)
        return 1

    def _build_engine(self, args: argparse.Namespace) -> KeyRotationEngine:
        """Wire the engine from the parsed arguments.

        Raises:
            FileOperationError: If the config file cannot be read
            ValidationError: If the config file holds invalid settings
        """
        settings = ConfigFile(args.config).read_encryption_settings()
        file_manager = FileManager(args.data_dir)
        return KeyRotationEngine(
            settings,
            UserService(file_manager),
            UserCardService(file_manager),
            config_path=args.config,
            output=self._print_stderr if args.json else print,
        )

    def run(self, args: Optional[list[str]] = None) -> int:
        """Run the CLI with given arguments.

        Returns:
            Process exit code
        """
        parsed_args = self._parser.parse_args(args)
        self._pretty = bool(parsed_args.pretty)
        logging.basicConfig(level=getattr(logging, parsed_args.log_level))

        try:
            engine = self._build_engine(parsed_args)
            exit_code = engine.run(parsed_args.newmethod, parsed_args.newkey)
        except CredentialRekeyError as e:
            return self._print_error(message=str(e), code="rekey_error")
        except KeyboardInterrupt:
            return self._print_error(message="Operation cancelled by user", code="cancelled")
        except Exception as e:
            logger.debug("Unexpected error during switch", exc_info=True)
            return self._print_error(message=str(e), code="unexpected_error")

        if parsed_args.json:
            report = engine.last_report
            self._print_json({
                "success": exit_code == 0,
                "command": "switch-db-hash",
                "exit_code": exit_code,
                "report": report.to_dict() if report else None,
            })

        return exit_code


def main() -> None:
    """Main entry point for the CLI."""
    cli = SwitchDbHashCLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
