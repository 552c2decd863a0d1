"""Custom exceptions for the credential re-keying tool."""


class CredentialRekeyError(Exception):
    """Base exception for all credential re-keying errors."""


class MissingKeyError(CredentialRekeyError):
    """Raised when no encryption key can be resolved from arguments or config."""


class UnsupportedAlgorithmError(CredentialRekeyError):
    """Raised when a cipher cannot be built for the requested algorithm."""


class FileOperationError(CredentialRekeyError):
    """Raised when file operations fail."""


class ConfigWriteError(FileOperationError):
    """Raised when the configuration file cannot be written."""


class RecordNotFoundError(CredentialRekeyError):
    """Raised when a record to persist does not exist in the store."""


class EncryptionError(CredentialRekeyError):
    """Raised when encryption/decryption operations fail."""


class DecryptionError(EncryptionError):
    """Raised when a stored secret cannot be decrypted with the old cipher."""


class ValidationError(CredentialRekeyError):
    """Raised when data validation fails."""
