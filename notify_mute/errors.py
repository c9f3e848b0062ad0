"""Exceptions raised by notify-mute."""


class NotifyMuteError(Exception):
    """Base class for all notify-mute errors."""


class SerializationError(NotifyMuteError):
    """Alert key could not be canonically serialized."""


class StorageError(NotifyMuteError):
    """Suppression store read or write failed."""


class CorruptStateError(StorageError):
    """A stored suppression record could not be decoded."""

    def __init__(self, fingerprint: str, reason: str):
        self.fingerprint = fingerprint
        self.reason = reason
        super().__init__(f"Corrupt suppression record for {fingerprint}: {reason}")


class DeliveryError(NotifyMuteError):
    """Outbound webhook call failed or returned a non-success status."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_text: str | None = None,
    ):
        self.status_code = status_code
        self.response_text = response_text
        super().__init__(message)


class PayloadParseError(NotifyMuteError):
    """Inbound callback payload was missing or malformed."""


class InvalidFingerprintError(PayloadParseError):
    """A fingerprint token was not a 64 character hex string."""
