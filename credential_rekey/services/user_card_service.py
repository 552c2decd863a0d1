"""User card service for linked library card records."""

from typing import Any

from credential_rekey.models import UserCardRecord
from credential_rekey.services.record_service import RecordService


class UserCardService(RecordService[UserCardRecord]):
    """Service for library card records linked to a user."""

    _record_type = UserCardRecord
    _collection_name = "user cards"

    def _read(self) -> list[dict[str, Any]]:
        return self._file_manager.read_user_cards()

    def _save(self, records: list[dict[str, Any]]) -> None:
        self._file_manager.save_user_cards(records)
