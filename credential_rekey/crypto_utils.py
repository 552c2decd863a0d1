"""Block cipher construction and encrypt-then-MAC helpers."""

import base64
import binascii
import secrets
from dataclasses import dataclass
from typing import Callable

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.decrepit.ciphers.algorithms import Blowfish, Camellia
from cryptography.hazmat.primitives import hashes, hmac, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from credential_rekey.constants import Constants
from credential_rekey.exceptions import (
    DecryptionError,
    EncryptionError,
    UnsupportedAlgorithmError,
    ValidationError,
)


@dataclass(frozen=True)
class _AlgorithmSpec:
    """Parameters of one supported block cipher."""

    factory: Callable[[bytes], object]
    key_size: int  # bytes
    block_size: int  # bits


_ALGORITHMS: dict[str, _AlgorithmSpec] = {
    "aes": _AlgorithmSpec(algorithms.AES, 32, 128),
    "blowfish": _AlgorithmSpec(Blowfish, 56, 64),
    "camellia": _AlgorithmSpec(Camellia, 32, 128),
}


def supported_algorithms() -> list[str]:
    """Return the names accepted by :func:`create_cipher`."""
    return sorted(_ALGORITHMS)


class BlockCipher:
    """A CBC block cipher bound to one algorithm and key.

    Each message gets a random IV which also serves as the PBKDF2 salt used to
    derive the encryption key and the HMAC-SHA256 authentication key from the
    configured key. Ciphertext is rendered as the hex HMAC followed by the
    Base64 encoding of ``iv + ciphertext``.
    """

    def __init__(self, algorithm: str, key: str):
        """Initialize the cipher.

        Args:
            algorithm: Algorithm name (aes, blowfish, camellia)
            key: Encryption key

        Raises:
            UnsupportedAlgorithmError: If the algorithm is not supported
            ValidationError: If the key is empty
        """
        name = (algorithm or "").strip().lower()
        spec = _ALGORITHMS.get(name)
        if spec is None:
            raise UnsupportedAlgorithmError(
                f"Unsupported encryption algorithm: {algorithm}"
            )
        if not key or not isinstance(key, str):
            raise ValidationError("Encryption key must be a non-empty string")

        self._algorithm = name
        self._spec = spec
        self._key = key.encode("utf-8")

    @property
    def algorithm(self) -> str:
        """Get the normalized algorithm name."""
        return self._algorithm

    @property
    def _block_bytes(self) -> int:
        return self._spec.block_size // 8

    def _derive_keys(self, salt: bytes) -> tuple[bytes, bytes]:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=self._spec.key_size + Constants.HMAC_KEY_SIZE(),
            salt=salt,
            iterations=Constants.PBKDF2_ITERATIONS(),
        )
        derived = kdf.derive(self._key)
        return derived[:self._spec.key_size], derived[self._spec.key_size:]

    def _mac(self, mac_key: bytes, payload: bytes) -> hmac.HMAC:
        h = hmac.HMAC(mac_key, hashes.SHA256())
        h.update(self._algorithm.encode("ascii") + payload)
        return h

    def encrypt(self, plaintext: str) -> str:
        """Encrypt a secret.

        Args:
            plaintext: Secret to encrypt

        Returns:
            Authenticated ciphertext as a string

        Raises:
            EncryptionError: If encryption fails
        """
        if not isinstance(plaintext, str):
            raise ValidationError("Plaintext must be a string")

        try:
            iv = secrets.token_bytes(self._block_bytes)
            enc_key, mac_key = self._derive_keys(iv)

            padder = padding.PKCS7(self._spec.block_size).padder()
            padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()

            encryptor = Cipher(self._spec.factory(enc_key), modes.CBC(iv)).encryptor()
            payload = iv + encryptor.update(padded) + encryptor.finalize()

            tag = self._mac(mac_key, payload).finalize()
        except Exception as e:
            raise EncryptionError(f"Encryption failed: {e}") from e

        return tag.hex() + base64.b64encode(payload).decode("ascii")

    def decrypt(self, ciphertext: str) -> str:
        """Decrypt a secret produced by :meth:`encrypt`.

        Args:
            ciphertext: Authenticated ciphertext

        Returns:
            Decrypted secret

        Raises:
            DecryptionError: If the data is malformed or was not produced with
                this algorithm and key
        """
        mac_length = Constants.HMAC_HEX_LENGTH()
        if not isinstance(ciphertext, str) or len(ciphertext) <= mac_length:
            raise DecryptionError("Encrypted data is malformed")

        try:
            tag = bytes.fromhex(ciphertext[:mac_length])
            payload = base64.b64decode(ciphertext[mac_length:], validate=True)
        except (ValueError, binascii.Error) as e:
            raise DecryptionError(f"Encrypted data is malformed: {e}") from e

        block = self._block_bytes
        if len(payload) < 2 * block or len(payload) % block:
            raise DecryptionError("Encrypted data has an invalid length")

        iv = payload[:block]
        enc_key, mac_key = self._derive_keys(iv)

        try:
            self._mac(mac_key, payload).verify(tag)
        except InvalidSignature as e:
            raise DecryptionError(
                f"Authentication failed for {self._algorithm} ciphertext"
            ) from e

        try:
            decryptor = Cipher(self._spec.factory(enc_key), modes.CBC(iv)).decryptor()
            padded = decryptor.update(payload[block:]) + decryptor.finalize()
            unpadder = padding.PKCS7(self._spec.block_size).unpadder()
            data = unpadder.update(padded) + unpadder.finalize()
            return data.decode("utf-8")
        except (ValueError, UnicodeDecodeError) as e:
            raise DecryptionError(f"Decryption failed: {e}") from e


CipherFactory = Callable[[str, str], BlockCipher]


def create_cipher(algorithm: str, key: str) -> BlockCipher:
    """Build a cipher for an algorithm/key pair.

    Raises:
        UnsupportedAlgorithmError: If the algorithm is not supported
    """
    return BlockCipher(algorithm, key)
