"""Key rotation engine that switches the stored-secret encryption scheme."""

import logging
from pathlib import Path
from typing import Callable, Optional, Sequence, Union

from credential_rekey.config import ConfigWriter, EncryptionSettings
from credential_rekey.constants import Constants
from credential_rekey.crypto_utils import BlockCipher, CipherFactory, create_cipher
from credential_rekey.exceptions import (
    ConfigWriteError,
    FileOperationError,
    MissingKeyError,
    UnsupportedAlgorithmError,
    ValidationError,
)
from credential_rekey.models import (
    EncryptionSpec,
    RotationFailure,
    RotationPlan,
    RotationReport,
    SecretBearingRecord,
    UserCardRecord,
    UserRecord,
)
from credential_rekey.services.rotation.operations import RecordPersister, rotate_record
from credential_rekey.services.user_card_service import UserCardService
from credential_rekey.services.user_service import UserService

logger = logging.getLogger(__name__)


class KeyRotationEngine:
    """Re-encrypts every stored catalog password under a new algorithm/key.

    The run is split in two phases. The validation phase resolves the old and
    new parameters, builds both ciphers and writes the new parameters to the
    configuration file; any failure there aborts with nothing changed in the
    record store. The database phase then re-encrypts users followed by
    library cards, isolating failures to the record that caused them.
    """

    def __init__(
        self,
        settings: EncryptionSettings,
        user_service: UserService,
        user_card_service: UserCardService,
        *,
        config_path: Union[str, Path],
        cipher_factory: CipherFactory = create_cipher,
        config_writer_factory: Callable[[Path], ConfigWriter] = ConfigWriter,
        output: Callable[[str], None] = print
    ):
        """Initialize the engine.

        Args:
            settings: Snapshot of the encryption settings currently on file
            user_service: Storage service for user records
            user_card_service: Storage service for library card records
            config_path: Configuration file to update
            cipher_factory: Callable building a cipher from (algorithm, key)
            config_writer_factory: Callable building a writer for a path
            output: Callable receiving operator console lines
        """
        self._settings = settings
        self._user_service = user_service
        self._user_card_service = user_card_service
        self._config_path = Path(config_path)
        self._cipher_factory = cipher_factory
        self._config_writer_factory = config_writer_factory
        self._output = output
        self._last_report: Optional[RotationReport] = None

    @property
    def last_report(self) -> Optional[RotationReport]:
        """Report of the most recent database phase, if one ran."""
        return self._last_report

    def determine_rotation_plan(
        self,
        new_algorithm: str,
        new_key: Optional[str] = None
    ) -> RotationPlan:
        """Resolve the old and new encryption parameters.

        Args:
            new_algorithm: Algorithm to switch to
            new_key: Key to switch to (defaults to the key on file)

        Returns:
            RotationPlan; callers must check ``is_noop`` before changing anything

        Raises:
            MissingKeyError: If no key is given and none is on file
            UnsupportedAlgorithmError: If the new algorithm is "none"
            ValidationError: If no new algorithm is given, or the key cannot
                be stored in the configuration file unchanged
        """
        if not new_algorithm:
            raise ValidationError("New encryption algorithm is required")

        settings = self._settings
        if (
            not settings.key
            or not settings.encryption_enabled
            or settings.algorithm == Constants.NONE_ALGORITHM()
        ):
            old_spec = EncryptionSpec.none()
        else:
            old_spec = EncryptionSpec(
                settings.algorithm or Constants.DEFAULT_OLD_ALGORITHM(),
                settings.key,
            )

        stored_key = settings.key if settings.encryption_enabled else None
        resolved_key = new_key or stored_key
        if not resolved_key:
            raise MissingKeyError("Please specify a key as the second parameter.")

        if new_algorithm == Constants.NONE_ALGORITHM():
            raise UnsupportedAlgorithmError("Encryption cannot be switched off")

        # The INI format trims values and ends them at a line break
        if resolved_key != resolved_key.strip() or any(c in resolved_key for c in "\r\n"):
            raise ValidationError(
                "Encryption key must not contain line breaks or leading/trailing whitespace"
            )

        return RotationPlan(old_spec, EncryptionSpec(new_algorithm, resolved_key))

    def build_ciphers(
        self,
        plan: RotationPlan
    ) -> tuple[Optional[BlockCipher], BlockCipher]:
        """Construct the old and new ciphers before anything is written.

        Returns:
            Tuple of (old cipher or None, new cipher)

        Raises:
            UnsupportedAlgorithmError: If either cipher cannot be constructed
            ValidationError: If the factory rejects a key
        """
        old_spec, new_spec = plan.old_spec, plan.new_spec
        try:
            old_cipher = None if old_spec.is_none else self._cipher_factory(
                old_spec.algorithm, old_spec.key
            )
            new_cipher = self._cipher_factory(new_spec.algorithm, new_spec.key)
        except (UnsupportedAlgorithmError, ValidationError) as e:
            self._log_cipher_failure(plan, e)
            raise
        except Exception as e:
            self._log_cipher_failure(plan, e)
            raise UnsupportedAlgorithmError(str(e)) from e

        return old_cipher, new_cipher

    def _log_cipher_failure(self, plan: RotationPlan, error: Exception) -> None:
        logger.error("Cipher construction failed", extra={
            "old_algorithm": plan.old_spec.algorithm,
            "new_algorithm": plan.new_spec.algorithm,
            "error": str(error),
            "event": "cipher_construction_failed"
        })

    def persist_config(self, new_spec: EncryptionSpec) -> None:
        """Write the new parameters to the configuration file as one unit.

        Raises:
            ConfigWriteError: If the file cannot be written
        """
        section = Constants.CONFIG_SECTION()
        writer = self._config_writer_factory(self._config_path)
        writer.set(section, Constants.ENABLED_DIRECTIVE(), True)
        writer.set(section, Constants.ALGORITHM_DIRECTIVE(), new_spec.algorithm)
        writer.set(section, Constants.KEY_DIRECTIVE(), new_spec.key)
        writer.save()

        logger.info("Encryption settings written", extra={
            "path": str(self._config_path),
            "algorithm": new_spec.algorithm,
            "event": "config_updated"
        })

    def _rotate_collection(
        self,
        service: RecordPersister,
        records: Sequence[SecretBearingRecord],
        old_cipher: Optional[BlockCipher],
        new_cipher: BlockCipher,
        report: RotationReport
    ) -> int:
        processed = 0
        for record in records:
            try:
                rotate_record(service, record, old_cipher, new_cipher)
            except Exception as e:
                self._output(f"Problem with {record.label}: {e}")
                logger.warning(f"Failed to re-encrypt {record.label}", extra={
                    "record_id": record.id,
                    "error": str(e),
                    "event": "record_rotation_failed"
                })
                report.failures.append(RotationFailure(record.label, str(e)))
            processed += 1
        return processed

    def rotate_all(
        self,
        users: Sequence[UserRecord],
        cards: Sequence[UserCardRecord],
        old_cipher: Optional[BlockCipher],
        new_cipher: BlockCipher
    ) -> RotationReport:
        """Re-encrypt users, then library cards, in storage order.

        A failing record is reported and skipped; records already rotated are
        never rolled back.

        Returns:
            RotationReport with per-collection counts and failures
        """
        report = RotationReport()

        self._output(f"\tConverting hashes for {len(users)} user(s).")
        report.users_processed = self._rotate_collection(
            self._user_service, users, old_cipher, new_cipher, report
        )

        if len(cards) > 0:
            self._output(f"\tConverting hashes for {len(cards)} card(s).")
        report.cards_processed = self._rotate_collection(
            self._user_card_service, cards, old_cipher, new_cipher, report
        )

        logger.info("Credential re-encryption completed", extra={
            "users_processed": report.users_processed,
            "cards_processed": report.cards_processed,
            "failures": report.failure_count,
            "event": "rotation_completed"
        })

        return report

    def run(
        self,
        new_algorithm: str,
        new_key: Optional[str] = None
    ) -> int:
        """Switch the encryption algorithm/key for all stored secrets.

        Args:
            new_algorithm: Algorithm to switch to
            new_key: Key to switch to (defaults to the key on file)

        Returns:
            Process exit code: 0 for success or no-op, 1 for a fatal error
        """
        self._last_report = None

        try:
            plan = self.determine_rotation_plan(new_algorithm, new_key)
        except (MissingKeyError, UnsupportedAlgorithmError, ValidationError) as e:
            self._output(str(e))
            return 1

        if plan.is_noop:
            self._output("No changes requested -- no action needed.")
            return 0

        # Both ciphers must exist before anything is written
        try:
            old_cipher, new_cipher = self.build_ciphers(plan)
        except (UnsupportedAlgorithmError, ValidationError) as e:
            self._output(str(e))
            return 1

        # Records are only read once the config write succeeded
        self._output(f"\tUpdating {self._config_path}...")
        try:
            self.persist_config(plan.new_spec)
        except ConfigWriteError as e:
            logger.error("Config write failed", extra={
                "path": str(self._config_path),
                "error": str(e),
                "event": "config_write_failed"
            })
            self._output("\tWrite failed!")
            return 1

        try:
            users = self._user_service.list_all()
            cards = self._user_card_service.list_all()
        except FileOperationError as e:
            logger.error("Failed to load records", extra={
                "error": str(e),
                "event": "record_load_failed"
            })
            self._output(str(e))
            return 1

        self._last_report = self.rotate_all(users, cards, old_cipher, new_cipher)

        self._output("\tFinished.")
        return 0
