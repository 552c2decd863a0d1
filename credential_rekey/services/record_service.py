"""Shared persistence logic for secret-bearing record services."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from credential_rekey.exceptions import FileOperationError, RecordNotFoundError
from credential_rekey.file_manager import FileManager
from credential_rekey.models import SecretBearingRecord

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=SecretBearingRecord)


class RecordService(ABC, Generic[RecordT]):
    """Loads and persists one collection of secret-bearing records.

    Subclasses bind the collection to a record type and a pair of
    FileManager read/save methods.
    """

    _record_type: type[RecordT]
    _collection_name = "records"

    def __init__(self, file_manager: FileManager):
        """Initialize the service.

        Args:
            file_manager: File manager instance
        """
        self._file_manager = file_manager

    @abstractmethod
    def _read(self) -> list[dict[str, Any]]:
        """Read the raw collection from the store."""

    @abstractmethod
    def _save(self, records: list[dict[str, Any]]) -> None:
        """Write the raw collection back to the store."""

    def _load_records(self) -> list[RecordT]:
        try:
            return [self._record_type.from_dict(data) for data in self._read()]
        except (KeyError, TypeError, ValueError) as e:
            raise FileOperationError(
                f"Failed to parse {self._collection_name}: {e}"
            ) from e

    def list_all(self) -> list[RecordT]:
        """List records that have a catalog username, in storage order."""
        return [r for r in self._load_records() if r.cat_username]

    def persist_entity(self, record: RecordT) -> None:
        """Write one record back to the store.

        Args:
            record: Record to persist

        Raises:
            RecordNotFoundError: If the record is not in the store
            FileOperationError: If the store cannot be written
        """
        records = self._read()
        for i, data in enumerate(records):
            if data.get("id") == record.id:
                records[i] = record.to_dict()
                break
        else:
            raise RecordNotFoundError(
                f"No {self._collection_name} entry with id {record.id}"
            )

        self._save(records)

        logger.debug(f"Persisted {record.label}", extra={
            "record_id": record.id,
            "collection": self._collection_name,
            "event": "record_persisted"
        })
