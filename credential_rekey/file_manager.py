"""File-backed record store for user and library card records."""

import json
import os
import shutil
from pathlib import Path
from typing import Any, Optional

from credential_rekey.constants import Constants
from credential_rekey.exceptions import FileOperationError


class FileManager:
    """Manages the JSON record files with atomic operations."""

    def __init__(
        self,
        data_dir: str
    ):
        """Initialize the file manager.

        The directory is created by the first write, not here.

        Args:
            data_dir: Directory holding the record files
        """
        self._data_dir = Path(data_dir)
        self._users_file = self._data_dir / Constants.USERS_FILE()
        self._user_cards_file = self._data_dir / Constants.USER_CARDS_FILE()

    def _write_json_atomic(
        self,
        file_path: Path,
        data: dict[str, Any]
    ) -> None:
        """Replace a record file atomically.

        The new content goes to a ``.temp`` sibling first. The current file is
        parked as ``.archive`` while the new one is moved in, and moved back
        if that fails.

        Args:
            file_path: Path to the target file
            data: Data to write

        Raises:
            FileOperationError: If the file cannot be replaced
        """
        temp_file = file_path.with_suffix(".temp")
        archive_file = file_path.with_suffix(".archive")

        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with temp_file.open("w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)

            if file_path.exists():
                shutil.move(str(file_path), str(archive_file))
            shutil.move(str(temp_file), str(file_path))
        except Exception as e:
            if temp_file.exists():
                temp_file.unlink()
            if archive_file.exists() and not file_path.exists():
                shutil.move(str(archive_file), str(file_path))
            raise FileOperationError(f"Failed to write file {file_path}: {e}") from e

        self._set_secure_permissions(file_path)
        if archive_file.exists():
            archive_file.unlink()

    def _read_json(self, file_path: Path) -> Optional[dict[str, Any]]:
        """Read JSON data from file.

        Args:
            file_path: Path to the file to read

        Returns:
            JSON data as dictionary, or None if file doesn't exist

        Raises:
            FileOperationError: If read operation fails
        """
        if not file_path.exists():
            return None

        try:
            with file_path.open(encoding="utf-8") as f:
                return json.load(f)
        except Exception as e:
            raise FileOperationError(f"Failed to read file {file_path}: {e}") from e

    def _read_records(self, file_path: Path) -> list[dict[str, Any]]:
        data = self._read_json(file_path)
        if data is None:
            return []
        records = data.get("records", [])
        if not isinstance(records, list):
            raise FileOperationError(f"Malformed record file {file_path}")
        return records

    def _save_records(self, file_path: Path, records: list[dict[str, Any]]) -> None:
        self._write_json_atomic(file_path, {
            "records": records,
            "version": Constants.STORE_VERSION(),
        })

    def read_users(self) -> list[dict[str, Any]]:
        """Read all user records in storage order."""
        return self._read_records(self._users_file)

    def save_users(self, records: list[dict[str, Any]]) -> None:
        """Save all user records atomically."""
        self._save_records(self._users_file, records)

    def read_user_cards(self) -> list[dict[str, Any]]:
        """Read all library card records in storage order."""
        return self._read_records(self._user_cards_file)

    def save_user_cards(self, records: list[dict[str, Any]]) -> None:
        """Save all library card records atomically."""
        self._save_records(self._user_cards_file, records)

    def _set_secure_permissions(self, file_path: Path) -> None:
        """Set secure file permissions (owner read/write only).

        Args:
            file_path: Path to the file to secure
        """
        try:
            os.chmod(file_path, 0o600)
        except OSError:
            # Ignore permission errors - they may not be critical
            pass

    @property
    def data_directory(self) -> Path:
        """Get the data directory path."""
        return self._data_dir

    @property
    def users_file_path(self) -> Path:
        """Get the users file path."""
        return self._users_file

    @property
    def user_cards_file_path(self) -> Path:
        """Get the library cards file path."""
        return self._user_cards_file
