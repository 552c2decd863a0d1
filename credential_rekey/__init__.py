"""Credential Rekey - switch the encryption scheme of stored catalog passwords.

This package re-encrypts the catalog passwords kept for users and their
library cards when the configured encryption algorithm or key changes, after
validating both ciphers and writing the new settings to the config file.
"""

from credential_rekey.crypto_utils import BlockCipher, create_cipher
from credential_rekey.exceptions import (
    ConfigWriteError,
    CredentialRekeyError,
    DecryptionError,
    EncryptionError,
    FileOperationError,
    MissingKeyError,
    RecordNotFoundError,
    UnsupportedAlgorithmError,
    ValidationError,
)
from credential_rekey.services.rotation.engine import KeyRotationEngine

try:
    from importlib.metadata import version
    __version__ = version("credential-rekey")
except ImportError:
    # Not installed as a distribution
    __version__ = "unknown"

__all__ = [
    "BlockCipher",
    "ConfigWriteError",
    "CredentialRekeyError",
    "DecryptionError",
    "EncryptionError",
    "FileOperationError",
    "KeyRotationEngine",
    "MissingKeyError",
    "RecordNotFoundError",
    "UnsupportedAlgorithmError",
    "ValidationError",
    "create_cipher",
]
