"""Rotation services package for the credential re-keying tool."""

from credential_rekey.services.rotation.engine import KeyRotationEngine
from credential_rekey.services.rotation.operations import rotate_record

__all__ = [
    "KeyRotationEngine",
    "rotate_record",
]
