"""Data models for persistent suppression state."""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from ..errors import CorruptStateError

# One-byte meta tags stored alongside each value
META_MUTED = 0x00
META_SNOOZED = 0x01

MUTED_SENTINEL = b"y"


class SuppressionState(Enum):
    """Suppression state of a fingerprint."""
    UNSET = "unset"      # No record, notifications allowed
    SNOOZED = "snoozed"  # Suppressed until snoozed_until
    MUTED = "muted"      # Suppressed until overwritten


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass
class SuppressionRecord:
    """Suppression state for one fingerprint.

    Muted and snoozed are mutually exclusive: a record holds exactly one
    state, and writing a new record replaces the old one.
    """
    fingerprint: str
    state: SuppressionState = SuppressionState.UNSET
    snoozed_until: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def unset(cls, fingerprint: str) -> "SuppressionRecord":
        return cls(fingerprint=fingerprint)

    @classmethod
    def snoozed(cls, fingerprint: str, until: datetime) -> "SuppressionRecord":
        if until.tzinfo is None:
            raise ValueError("snoozed_until must be timezone-aware")
        return cls(
            fingerprint=fingerprint,
            state=SuppressionState.SNOOZED,
            snoozed_until=until,
        )

    @classmethod
    def muted(cls, fingerprint: str) -> "SuppressionRecord":
        return cls(fingerprint=fingerprint, state=SuppressionState.MUTED)

    def is_suppressed(self, now: datetime) -> bool:
        """Check whether notifications are suppressed at the given time.

        A snooze expires at exactly snoozed_until.
        """
        if self.state == SuppressionState.MUTED:
            return True
        if self.state == SuppressionState.SNOOZED:
            return now < self.snoozed_until
        return False

    def encode(self) -> tuple[bytes, int]:
        """Encode to (value, meta) for the key-value store."""
        if self.state == SuppressionState.SNOOZED:
            return self.snoozed_until.astimezone(timezone.utc).isoformat().encode("ascii"), META_SNOOZED
        if self.state == SuppressionState.MUTED:
            return MUTED_SENTINEL, META_MUTED
        raise ValueError("Unset records are not stored")

    @classmethod
    def decode(
        cls,
        fingerprint: str,
        value: bytes,
        meta: int,
        updated_at: datetime | None = None,
    ) -> "SuppressionRecord":
        """Decode a stored (value, meta) pair.

        Raises:
            CorruptStateError: If the tag is unknown or the value does not
                match the encoding for its tag.
        """
        if meta == META_SNOOZED:
            try:
                until = datetime.fromisoformat(bytes(value).decode("ascii"))
            except (UnicodeDecodeError, ValueError) as e:
                raise CorruptStateError(fingerprint, f"bad snooze timestamp: {e}") from e
            if until.tzinfo is None:
                raise CorruptStateError(fingerprint, "snooze timestamp has no timezone")
            return cls(
                fingerprint=fingerprint,
                state=SuppressionState.SNOOZED,
                snoozed_until=until,
                updated_at=updated_at,
            )

        if meta == META_MUTED:
            if bytes(value) != MUTED_SENTINEL:
                raise CorruptStateError(fingerprint, f"unexpected mute value {bytes(value)[:16]!r}")
            return cls(
                fingerprint=fingerprint,
                state=SuppressionState.MUTED,
                updated_at=updated_at,
            )

        raise CorruptStateError(fingerprint, f"unknown state tag {meta!r}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "fingerprint": self.fingerprint,
            "state": self.state.value,
            "snoozed_until": self.snoozed_until.isoformat() if self.snoozed_until else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
