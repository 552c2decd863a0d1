"""Stateless rotation operations for re-encrypting stored secrets."""

import logging
from typing import Optional, Protocol

from credential_rekey.crypto_utils import BlockCipher
from credential_rekey.models import SecretBearingRecord

logger = logging.getLogger(__name__)


class RecordPersister(Protocol):
    """Storage service that owns a record."""

    def persist_entity(self, record: SecretBearingRecord) -> None:
        ...


def rotate_record(
    service: RecordPersister,
    record: SecretBearingRecord,
    old_cipher: Optional[BlockCipher],
    new_cipher: BlockCipher
) -> None:
    """Re-encrypt one record's secret and persist it.

    The secret is taken from the encrypted field when an old cipher exists and
    the field is set, otherwise from the raw field. The raw field is always
    cleared, and the record is persisted exactly once.

    Args:
        service: Storage service owning the record
        record: Record to re-encrypt
        old_cipher: Cipher the secret is currently stored under (None for none)
        new_cipher: Cipher to store the secret under

    Raises:
        DecryptionError: If the stored secret cannot be decrypted
    """
    old_encrypted = record.get_cat_pass_enc()
    if old_cipher is not None and old_encrypted:
        secret = old_cipher.decrypt(old_encrypted)
    else:
        secret = record.get_raw_cat_password()

    record.set_raw_cat_password(None)
    record.set_cat_pass_enc(None if secret is None else new_cipher.encrypt(secret))

    service.persist_entity(record)
