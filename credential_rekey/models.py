"""Data models for the credential re-keying tool."""

from dataclasses import dataclass, field
from typing import Any, Optional

from credential_rekey.constants import Constants
from credential_rekey.exceptions import ValidationError


@dataclass(frozen=True)
class EncryptionSpec:
    """Algorithm/key pair describing how secrets are (or will be) stored."""

    algorithm: str
    key: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate fields after initialization."""
        if not self.algorithm:
            raise ValidationError("algorithm cannot be empty")
        if self.is_none and self.key is not None:
            raise ValidationError("An unencrypted spec cannot carry a key")

    @classmethod
    def none(cls) -> "EncryptionSpec":
        """Spec for secrets that are stored unencrypted."""
        return cls(Constants.NONE_ALGORITHM())

    @property
    def is_none(self) -> bool:
        """True when no decryption step applies."""
        return self.algorithm == Constants.NONE_ALGORITHM()


@dataclass(frozen=True)
class RotationPlan:
    """Old and new encryption parameters for one run."""

    old_spec: EncryptionSpec
    new_spec: EncryptionSpec

    @property
    def is_noop(self) -> bool:
        """True when the requested parameters match the current ones exactly."""
        return self.old_spec == self.new_spec


@dataclass
class SecretBearingRecord:
    """Stored entity holding a catalog password.

    The secret lives in exactly one of two fields: ``cat_password`` (raw) or
    ``cat_pass_enc`` (encrypted).
    """

    id: int
    cat_username: Optional[str] = None
    cat_password: Optional[str] = None
    cat_pass_enc: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate fields after initialization."""
        if self.id is None:
            raise ValueError("id cannot be empty")

    @property
    def label(self) -> str:
        """Identifying label used in operator output."""
        return f"record {self.id}"

    def get_raw_cat_password(self) -> Optional[str]:
        return self.cat_password

    def set_raw_cat_password(self, value: Optional[str]) -> None:
        self.cat_password = value

    def get_cat_pass_enc(self) -> Optional[str]:
        return self.cat_pass_enc

    def set_cat_pass_enc(self, value: Optional[str]) -> None:
        self.cat_pass_enc = value

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "cat_username": self.cat_username,
            "cat_password": self.cat_password,
            "cat_pass_enc": self.cat_pass_enc,
        }


@dataclass
class UserRecord(SecretBearingRecord):
    """Primary account record."""

    username: str = ""

    @property
    def label(self) -> str:
        return f"user {self.username}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        result = super().to_dict()
        result["username"] = self.username
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserRecord":
        """Create UserRecord from dictionary."""
        return cls(
            id=data["id"],
            username=data.get("username", ""),
            cat_username=data.get("cat_username"),
            cat_password=data.get("cat_password"),
            cat_pass_enc=data.get("cat_pass_enc"),
        )


@dataclass
class UserCardRecord(SecretBearingRecord):
    """Linked secondary account (library card) record."""

    user_id: Optional[int] = None
    card_name: str = ""

    @property
    def label(self) -> str:
        return f"card {self.id}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        result = super().to_dict()
        result["user_id"] = self.user_id
        result["card_name"] = self.card_name
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserCardRecord":
        """Create UserCardRecord from dictionary."""
        return cls(
            id=data["id"],
            user_id=data.get("user_id"),
            card_name=data.get("card_name", ""),
            cat_username=data.get("cat_username"),
            cat_password=data.get("cat_password"),
            cat_pass_enc=data.get("cat_pass_enc"),
        )


@dataclass
class RotationFailure:
    """A record that could not be re-encrypted."""

    label: str
    error: str

    def to_dict(self) -> dict[str, Any]:
        return {"label": self.label, "error": self.error}


@dataclass
class RotationReport:
    """Outcome of the database phase of a rotation."""

    users_processed: int = 0
    cards_processed: int = 0
    failures: list[RotationFailure] = field(default_factory=list)

    @property
    def failure_count(self) -> int:
        return len(self.failures)

    @property
    def success(self) -> bool:
        """True when every record was re-encrypted."""
        return not self.failures

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "users_processed": self.users_processed,
            "cards_processed": self.cards_processed,
            "failures": [f.to_dict() for f in self.failures],
        }
