"""Alert key fingerprinting.

An alert key is any JSON-serializable value identifying what an alert is
about. It is serialized canonically (sorted keys, compact separators) and
hashed with SHA-256, so the same key always produces the same fingerprint
regardless of dict ordering or process.

The hex form of the fingerprint is what gets stored and what travels
through the Slack button values.
"""

import dataclasses
import hashlib
import json
import string
from typing import Any

from .errors import InvalidFingerprintError, SerializationError

FINGERPRINT_SIZE = 32
FINGERPRINT_HEX_LENGTH = FINGERPRINT_SIZE * 2

_HEX_DIGITS = frozenset(string.hexdigits)


def canonical_json(key: Any) -> bytes:
    """Serialize an alert key to canonical JSON bytes.

    Raises:
        SerializationError: If the key contains values JSON cannot encode
            (sets, arbitrary objects, NaN/Infinity) or unsortable dict keys.
    """
    if dataclasses.is_dataclass(key) and not isinstance(key, type):
        key = dataclasses.asdict(key)

    try:
        encoded = json.dumps(
            key,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=True,
            allow_nan=False,
        )
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Alert key is not serializable: {e}") from e

    return encoded.encode("utf-8")


def fingerprint(key: Any) -> bytes:
    """Return the 32 byte SHA-256 fingerprint of an alert key."""
    return hashlib.sha256(canonical_json(key)).digest()


def fingerprint_hex(key: Any) -> str:
    """Return the fingerprint as a 64 character lowercase hex string."""
    return fingerprint(key).hex()


def is_fingerprint(token: Any) -> bool:
    """Check whether a value looks like a hex fingerprint."""
    return (
        isinstance(token, str)
        and len(token) == FINGERPRINT_HEX_LENGTH
        and all(c in _HEX_DIGITS for c in token)
    )


def parse_fingerprint(token: Any) -> str:
    """Validate an untrusted fingerprint token and normalize it.

    Tokens come back from Slack button values, so they are checked before
    being used as store keys.

    Raises:
        InvalidFingerprintError: If the token is not 64 hex characters.
    """
    if not is_fingerprint(token):
        shown = repr(token)[:80]
        raise InvalidFingerprintError(f"Invalid fingerprint token: {shown}")
    return token.lower()
