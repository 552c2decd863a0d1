"""Configuration file access for the credential re-keying tool."""

import configparser
import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from credential_rekey.constants import Constants
from credential_rekey.exceptions import (
    ConfigWriteError,
    FileOperationError,
    ValidationError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EncryptionSettings:
    """Read-only snapshot of the encryption directives on file."""

    encryption_enabled: bool = False
    algorithm: Optional[str] = None
    key: Optional[str] = None


def _new_parser() -> configparser.ConfigParser:
    parser = configparser.ConfigParser(interpolation=None)
    # Keep directive names exactly as written
    parser.optionxform = str
    return parser


class ConfigFile:
    """Reads encryption settings from an INI configuration file."""

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        """Get the configuration file path."""
        return self._path

    def _load(self) -> configparser.ConfigParser:
        parser = _new_parser()
        if not self._path.exists():
            return parser
        try:
            with self._path.open(encoding="utf-8") as f:
                parser.read_file(f)
        except (OSError, configparser.Error) as e:
            raise FileOperationError(f"Failed to read config file {self._path}: {e}") from e
        return parser

    def read_encryption_settings(self) -> EncryptionSettings:
        """Read the encryption directives.

        A missing file or section yields settings with encryption disabled.

        Returns:
            EncryptionSettings snapshot

        Raises:
            FileOperationError: If the file cannot be read or parsed
            ValidationError: If the enabled flag is not a boolean
        """
        parser = self._load()
        section = Constants.CONFIG_SECTION()
        if not parser.has_section(section):
            return EncryptionSettings()

        try:
            enabled = parser.getboolean(
                section, Constants.ENABLED_DIRECTIVE(), fallback=False
            )
        except ValueError as e:
            raise ValidationError(
                f"Invalid value for {Constants.ENABLED_DIRECTIVE()}: {e}"
            ) from e

        algorithm = parser.get(section, Constants.ALGORITHM_DIRECTIVE(), fallback="").strip()
        key = parser.get(section, Constants.KEY_DIRECTIVE(), fallback=None)

        return EncryptionSettings(
            encryption_enabled=enabled,
            algorithm=algorithm or None,
            key=key or None,
        )


class ConfigWriter:
    """Updates directives in an INI file, leaving everything else in place."""

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)
        self._parser = _new_parser()
        if self._path.exists():
            try:
                with self._path.open(encoding="utf-8") as f:
                    self._parser.read_file(f)
            except (OSError, configparser.Error) as e:
                raise ConfigWriteError(
                    f"Failed to load config file {self._path}: {e}"
                ) from e

    @property
    def path(self) -> Path:
        """Get the configuration file path."""
        return self._path

    def set(self, section: str, name: str, value: Union[str, bool]) -> None:
        """Set a directive, creating the section if needed."""
        if isinstance(value, bool):
            value = "true" if value else "false"
        if not self._parser.has_section(section):
            self._parser.add_section(section)
        self._parser.set(section, name, value)

    def save(self) -> None:
        """Write all directives atomically using a temporary file.

        Raises:
            ConfigWriteError: If the file cannot be written
        """
        temp_file = self._path.with_suffix(self._path.suffix + ".temp")

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)

            with temp_file.open("w", encoding="utf-8") as f:
                self._parser.write(f)

            shutil.move(str(temp_file), str(self._path))
            self._set_secure_permissions(self._path)

        except Exception as e:
            if temp_file.exists():
                temp_file.unlink()
            raise ConfigWriteError(f"Failed to write config file {self._path}: {e}") from e

        logger.debug("Config file written", extra={
            "path": str(self._path),
            "event": "config_written"
        })

    def _set_secure_permissions(self, file_path: Path) -> None:
        """Set owner read/write only; the file holds the encryption key."""
        try:
            os.chmod(file_path, 0o600)
        except OSError:
            # Not supported on every platform
            pass
