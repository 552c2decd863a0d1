"""User service for primary account records."""

from typing import Any

from credential_rekey.models import UserRecord
from credential_rekey.services.record_service import RecordService


class UserService(RecordService[UserRecord]):
    """Service for primary account records."""

    _record_type = UserRecord
    _collection_name = "users"

    def _read(self) -> list[dict[str, Any]]:
        return self._file_manager.read_users()

    def _save(self, records: list[dict[str, Any]]) -> None:
        self._file_manager.save_users(records)
