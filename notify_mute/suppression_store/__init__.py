"""Suppression storage module for persistent mute/snooze tracking.

Provides SQLite-backed storage for suppression decisions:
- Decide whether an alert may be sent via should_send()
- Snooze (time-bounded) or mute (until overwritten) a fingerprint
- Per-fingerprint locking shared by the dispatcher and callback handler
"""

from .models import (
    META_MUTED,
    META_SNOOZED,
    MUTED_SENTINEL,
    SuppressionState,
    SuppressionRecord,
)
from .store import SuppressionStore

__all__ = [
    "META_MUTED",
    "META_SNOOZED",
    "MUTED_SENTINEL",
    "SuppressionState",
    "SuppressionRecord",
    "SuppressionStore",
]
