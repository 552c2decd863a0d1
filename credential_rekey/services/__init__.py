"""Services package for the credential re-keying tool."""

from credential_rekey.services.record_service import RecordService
from credential_rekey.services.user_card_service import UserCardService
from credential_rekey.services.user_service import UserService
from credential_rekey.services.rotation import KeyRotationEngine

__all__ = [
    "KeyRotationEngine",
    "RecordService",
    "UserCardService",
    "UserService",
]
