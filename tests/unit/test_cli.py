#!/usr/bin/env python3
"""Unit tests for the command-line interface."""

import json
from unittest.mock import Mock, patch

import pytest

from credential_rekey.cli import SwitchDbHashCLI, main
from credential_rekey.exceptions import FileOperationError
from tests.test_utility import TestUtilities


class TestSwitchDbHashCLI:
    """Test CLI argument handling and wiring."""

    @pytest.fixture
    def cli_args_base(self, tmp_path):
        """Base CLI arguments pointing at a temporary config and store."""
        return [
            "--config", str(tmp_path / "config.ini"),
            "--data-dir", str(tmp_path / "data"),
        ]

    def test_parser_positional_arguments(self):
        cli = SwitchDbHashCLI()

        args = cli._parser.parse_args(["aes", "k1"])

        assert args.newmethod == "aes"
        assert args.newkey == "k1"

    def test_parser_key_optional(self):
        args = SwitchDbHashCLI()._parser.parse_args(["aes"])
        assert args.newkey is None

    def test_parser_requires_method(self):
        with pytest.raises(SystemExit):
            SwitchDbHashCLI()._parser.parse_args([])

    def test_defaults_from_environment(self, monkeypatch):
        monkeypatch.setenv("CREDENTIAL_REKEY_CONFIG", "/etc/library/config.ini")
        monkeypatch.setenv("CREDENTIAL_REKEY_DATA_DIR", "/var/lib/library")

        args = SwitchDbHashCLI()._parser.parse_args(["aes"])

        assert args.config == "/etc/library/config.ini"
        assert args.data_dir == "/var/lib/library"

    @patch("credential_rekey.cli.KeyRotationEngine")
    @patch("credential_rekey.cli.ConfigFile")
    def test_run_passes_arguments_to_engine(self, mock_config_class, mock_engine_class, cli_args_base):
        mock_config_class.return_value = TestUtilities.create_mock_config_file(
            {"encryption_enabled": True, "algorithm": "blowfish", "key": "k0"}
        )
        mock_engine = Mock()
        mock_engine.run.return_value = 0
        mock_engine_class.return_value = mock_engine

        exit_code = SwitchDbHashCLI().run(cli_args_base + ["aes", "k1"])

        assert exit_code == 0
        mock_engine.run.assert_called_once_with("aes", "k1")
        settings = mock_engine_class.call_args.args[0]
        assert settings.algorithm == "blowfish"

    @patch("credential_rekey.cli.ConfigFile")
    def test_unreadable_config(self, mock_config_class, cli_args_base, capsys):
        mock_config_class.return_value = TestUtilities.create_mock_config_file(
            exception=FileOperationError("Failed to read config file")
        )

        exit_code = SwitchDbHashCLI().run(cli_args_base + ["aes", "k1"])

        assert exit_code == 1
        error = json.loads(capsys.readouterr().err)
        assert error["success"] is False
        assert error["error_code"] == "rekey_error"

    @patch("credential_rekey.cli.KeyRotationEngine")
    @patch("credential_rekey.cli.ConfigFile")
    def test_unexpected_error(self, mock_config_class, mock_engine_class, cli_args_base, capsys):
        mock_config_class.return_value = TestUtilities.create_mock_config_file()
        mock_engine_class.return_value.run.side_effect = RuntimeError("boom")

        exit_code = SwitchDbHashCLI().run(cli_args_base + ["aes", "k1"])

        assert exit_code == 1
        assert json.loads(capsys.readouterr().err)["error_code"] == "unexpected_error"

    def test_json_summary(self, cli_args_base, capsys):
        """Test that --json keeps stdout machine-readable."""
        exit_code = SwitchDbHashCLI().run(cli_args_base + ["--json", "aes", "k1"])

        captured = capsys.readouterr()
        result = json.loads(captured.out)
        assert exit_code == 0
        assert result["success"] is True
        assert result["command"] == "switch-db-hash"
        assert result["report"] == {
            "users_processed": 0,
            "cards_processed": 0,
            "failures": [],
        }
        assert "Finished." in captured.err

    def test_json_summary_on_missing_key(self, cli_args_base, capsys):
        exit_code = SwitchDbHashCLI().run(cli_args_base + ["--json", "aes"])

        result = json.loads(capsys.readouterr().out)
        assert exit_code == 1
        assert result["success"] is False
        assert result["report"] is None

    def test_main_exits_with_engine_code(self, cli_args_base, monkeypatch):
        monkeypatch.setattr("sys.argv", ["switch-db-hash"] + cli_args_base + ["rot13-nonexistent", "k1"])

        with pytest.raises(SystemExit) as excinfo:
            main()

        assert excinfo.value.code == 1
